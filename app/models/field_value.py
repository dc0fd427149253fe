from sqlalchemy import Column, String, DateTime, ForeignKey, Integer, JSON, UniqueConstraint, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.config import DB_SCHEMA
from .base import Base


class FieldValue(Base):
    """
    One stored answer for one field against one addressable entity.

    ``entity_type``/``entity_id`` form a weak reference: nothing here checks
    that the entity exists. ``value`` is always a JSON list, even for
    single-valued fields.
    """
    __tablename__ = "field_value"
    __table_args__ = (
        UniqueConstraint('custom_field_id', 'entity_type', 'entity_id', name='uq_field_value_field_entity'),
        Index('ix_field_value_entity', 'entity_type', 'entity_id'),
        {'schema': DB_SCHEMA},
    )

    id = Column(Integer, primary_key=True, index=True)
    custom_field_id = Column(
        Integer, ForeignKey(f'{DB_SCHEMA}.custom_field.id', ondelete='CASCADE'), nullable=False
    )
    entity_type = Column(String(100), nullable=False)
    entity_id = Column(String(64), nullable=False)
    value = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    custom_field = relationship("CustomField", back_populates="values")
