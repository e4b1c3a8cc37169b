# hazardscan/db/models/user.py
from sqlalchemy import Column, String, Integer, DateTime, Text, CheckConstraint, Uuid
from sqlalchemy.orm import relationship
import uuid
from hazardscan.db.base import BaseModel, utcnow


class User(BaseModel):
    """
    Application user mirrored from the identity provider.

    Users are never hard-deleted; deactivation flips `status` to 'inactive'.
    """
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            "status IN ('active', 'inactive')",
            name="users_status_check"
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    external_id = Column(String(255), unique=True, nullable=False, index=True)
    email = Column(String(255), nullable=True)

    # Profile
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    image_url = Column(Text, nullable=True)

    # Quota counters
    inspection_count = Column(Integer, default=0, nullable=False)
    monthly_inspection_count = Column(Integer, default=0, nullable=False)
    last_reset_date = Column(DateTime, default=utcnow, nullable=True)

    status = Column(String(20), default="active", nullable=False, index=True)

    # Relationships
    inspections = relationship("Inspection", back_populates="user")
    usage_logs = relationship("UsageLog", back_populates="user")
