"""OfferProfile model for reusable offers."""

import uuid

from sqlalchemy import Column, DateTime, JSON, String, Text
from sqlalchemy.sql import func

from database import Base


class OfferProfile(Base):
    """Problem/promise/proof/pitch tuple saved per project."""

    __tablename__ = "offer_profiles"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    project_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    problem = Column(Text, nullable=False)
    promise = Column(Text, nullable=False)
    proof = Column(Text, nullable=False)
    pitch = Column(Text, nullable=False)
    brand_voice = Column(Text, nullable=True)
    constraints = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
