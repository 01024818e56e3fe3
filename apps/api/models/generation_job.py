"""GenerationJob model tracking one pack generation run."""

import uuid

from sqlalchemy import Column, DateTime, ForeignKey, JSON, String, Text
from sqlalchemy.sql import func

from database import Base


GENERATION_JOB_STATUSES = ("pending", "processing", "completed", "failed")


class GenerationJob(Base):
    """Status record for an LLM generation request."""

    __tablename__ = "generation_jobs"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    reference_id = Column(String, ForeignKey("content_references.id"), nullable=False, index=True)
    offer = Column(JSON, nullable=True)
    outputs = Column(JSON, nullable=True)
    status = Column(String, nullable=False, default="pending", index=True)  # pending|processing|completed|failed
    error_message = Column(Text, nullable=True)
    pack_id = Column(String, nullable=True)
    model = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
