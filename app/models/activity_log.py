from sqlalchemy import Column, String, DateTime, Integer, Text, JSON
from sqlalchemy.sql import func

from app.core.config import DB_SCHEMA
from .base import Base


class ActivityLog(Base):
    __tablename__ = "activity_log"
    __table_args__ = {'schema': DB_SCHEMA}

    id = Column(Integer, primary_key=True, index=True)
    actor = Column(String, nullable=True)
    action = Column(String, nullable=False, index=True)
    entity_type = Column(String, nullable=False, index=True)
    entity_id = Column(String, nullable=True)
    details = Column(JSON, nullable=True)
    ip_address = Column(String, nullable=True)
    user_agent = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
