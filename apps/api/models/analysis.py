"""Analysis model for why a reference performed well."""

import uuid

from sqlalchemy import Column, DateTime, Float, ForeignKey, JSON, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from database import Base


class Analysis(Base):
    """Heuristic + LLM-refined breakdown of a reference."""

    __tablename__ = "analyses"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    reference_id = Column(String, ForeignKey("content_references.id"), nullable=False, unique=True, index=True)
    hooks = Column(JSON, nullable=False, default=list)
    structure = Column(JSON, nullable=False, default=dict)
    reasons = Column(JSON, nullable=False, default=dict)
    scores = Column(JSON, nullable=False, default=dict)
    why_worked = Column(JSON, nullable=False, default=list)
    content_metrics = Column(JSON, nullable=True)
    analysis_score = Column(Float, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    reference = relationship("ContentReference", back_populates="analysis")
