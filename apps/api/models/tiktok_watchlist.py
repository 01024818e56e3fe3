"""TikTok watchlist models."""

import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from database import Base


class TikTokWatchlist(Base):
    """Named set of creators/hashtags to poll for a niche."""

    __tablename__ = "tiktok_watchlists"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    project_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    niche = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    items = relationship("TikTokWatchItem", back_populates="watchlist", cascade="all, delete-orphan")


class TikTokWatchItem(Base):
    """Single creator handle or hashtag on a watchlist."""

    __tablename__ = "tiktok_watch_items"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    watchlist_id = Column(String, ForeignKey("tiktok_watchlists.id"), nullable=False, index=True)
    item_type = Column(String, nullable=False)  # creator|hashtag
    handle = Column(String, nullable=True)
    hashtag = Column(String, nullable=True)
    source = Column(String, nullable=False, default="manual")
    enabled = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    watchlist = relationship("TikTokWatchlist", back_populates="items")
