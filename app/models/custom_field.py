from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Integer, Boolean, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.config import DB_SCHEMA
from .base import Base


class CustomField(Base):
    __tablename__ = "custom_field"
    __table_args__ = {'schema': DB_SCHEMA}

    id = Column(Integer, primary_key=True, index=True)
    field_group_id = Column(
        Integer, ForeignKey(f'{DB_SCHEMA}.field_group.id', ondelete='CASCADE'), nullable=False, index=True
    )
    label = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    key = Column(String(255), unique=True, nullable=False, index=True)
    type = Column(String(50), nullable=False)  # see FieldType
    instructions = Column(Text, nullable=True)
    required = Column(Boolean, nullable=False, default=False)
    default_value = Column(JSON, nullable=True)
    placeholder = Column(String(255), nullable=True)
    choices = Column(JSON, nullable=True)  # ordered {value: label}
    multiple = Column(Boolean, nullable=False, default=False)
    model_type = Column(String(100), nullable=True)
    conditional_logic = Column(JSON, nullable=True)
    wrapper = Column(JSON, nullable=True)  # width, class, id
    order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    field_group = relationship("FieldGroup", back_populates="fields")
    values = relationship("FieldValue", back_populates="custom_field", cascade="all, delete-orphan")
