# hazardscan/db/models/setting.py
from sqlalchemy import Column, String, Text, DateTime, Uuid
import uuid
from hazardscan.db.base import Base, utcnow


class Setting(Base):
    """Admin-editable key/value settings (limits, feature flags)"""
    __tablename__ = "settings"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    key = Column(String(100), unique=True, nullable=False, index=True)
    value = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
