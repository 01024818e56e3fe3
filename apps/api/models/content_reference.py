"""ContentReference model for discovered social content."""

import uuid

from sqlalchemy import Column, DateTime, Float, JSON, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from database import Base


class ContentReference(Base):
    """A discovered video/post with its platform metrics."""

    __tablename__ = "content_references"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    platform = Column(String, nullable=False, index=True)
    url = Column(String, nullable=False, unique=True)
    title = Column(String, nullable=False)
    creator = Column(String, nullable=False)
    metrics = Column(JSON, nullable=False, default=dict)
    transcript = Column(Text, nullable=True)
    viral_score = Column(Float, nullable=True, index=True)
    thumbnail_url = Column(String, nullable=True)
    published_at = Column(String, nullable=True)
    watchlist_id = Column(String, nullable=True, index=True)
    source_item_id = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    analysis = relationship(
        "Analysis",
        back_populates="reference",
        uselist=False,
        cascade="all, delete-orphan",
    )
