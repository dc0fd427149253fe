from sqlalchemy import Column, String, DateTime, Integer, Boolean
from sqlalchemy.sql import func

from app.core.config import DB_SCHEMA
from .base import Base
from .entity_registry import register_entity


# Lookup target for ``model`` fields only; schools carry no custom field values.
@register_entity("School")
class School(Base):
    __tablename__ = "school"
    __table_args__ = {'schema': DB_SCHEMA}

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    code = Column(String(50), nullable=True)
    city = Column(String(100), nullable=True)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
