from sqlalchemy import Column, String, Text, DateTime, Integer, Boolean
from sqlalchemy.sql import func

from app.core.config import DB_SCHEMA
from .base import Base
from .entity_registry import register_entity
from .mixins import HasCustomFields


@register_entity("Category")
class Category(HasCustomFields, Base):
    __tablename__ = "category"
    __table_args__ = {'schema': DB_SCHEMA}

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, nullable=True)
    description = Column(Text, nullable=True)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
