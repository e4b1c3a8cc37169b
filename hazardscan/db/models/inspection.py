# hazardscan/db/models/inspection.py
from sqlalchemy import Column, String, Integer, Text, JSON, ForeignKey, CheckConstraint, Uuid
from sqlalchemy.orm import relationship
import uuid
from hazardscan.db.base import BaseModel


class Inspection(BaseModel):
    """
    One analysis attempt of a single workplace image.

    Status must be one of: pending, processing, completed, failed.
    A safety grade is only ever stored on completed inspections, and
    hazard_count mirrors len(analysis_results["hazards"]).
    """
    __tablename__ = "inspections"
    __table_args__ = (
        CheckConstraint(
            "processing_status IN ('pending', 'processing', 'completed', 'failed')",
            name="inspections_status_check"
        ),
        CheckConstraint(
            "safety_grade IS NULL OR safety_grade IN ('A', 'B', 'C', 'D', 'F')",
            name="inspections_grade_check"
        ),
        CheckConstraint(
            "risk_score IS NULL OR (risk_score >= 0 AND risk_score <= 100)",
            name="inspections_risk_score_check"
        ),
        CheckConstraint(
            "safety_grade IS NULL OR processing_status = 'completed'",
            name="inspections_grade_completed_check"
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)

    image_url = Column(Text, nullable=False)
    original_image_url = Column(Text, nullable=True)

    hazard_count = Column(Integer, default=0, nullable=False)
    risk_score = Column(Integer, nullable=True)
    safety_grade = Column(String(2), nullable=True, index=True)
    analysis_results = Column(JSON, nullable=True)

    processing_status = Column(String(20), default="pending", nullable=False, index=True)
    error_message = Column(Text, nullable=True)

    # Relationships
    user = relationship("User", back_populates="inspections")
