# hazardscan/db/models/usage.py
from sqlalchemy import Column, String, ForeignKey, Integer, Boolean, Numeric, DateTime, Uuid
from sqlalchemy.orm import relationship
import uuid
from hazardscan.db.base import Base, utcnow


class UsageLog(Base):
    """Append-only telemetry row, one per pipeline invocation"""
    __tablename__ = "usage_logs"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=True, index=True)

    endpoint = Column(String(100), nullable=False)
    tokens_used = Column(Integer, nullable=True)
    api_cost = Column(Numeric(10, 6), nullable=True)  # USD
    response_time = Column(Integer, nullable=True)  # milliseconds
    success = Column(Boolean, default=True, nullable=False)
    error_type = Column(String(50), nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)

    # Relationships
    user = relationship("User", back_populates="usage_logs")
