"""Pack model for generated content."""

import uuid

from sqlalchemy import Column, DateTime, ForeignKey, JSON, String
from sqlalchemy.sql import func

from database import Base


class Pack(Base):
    """Generated script, captions and production notes for one platform."""

    __tablename__ = "packs"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    project_id = Column(String, nullable=False, index=True)
    reference_id = Column(String, ForeignKey("content_references.id"), nullable=True, index=True)
    offer_id = Column(String, ForeignKey("offer_profiles.id"), nullable=True)
    platform = Column(String, nullable=False)
    contents = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
