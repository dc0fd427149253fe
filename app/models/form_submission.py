from sqlalchemy import Column, String, DateTime, ForeignKey, Integer, Text, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.config import DB_SCHEMA
from .base import Base


class FormSubmission(Base):
    __tablename__ = "form_submission"
    __table_args__ = {'schema': DB_SCHEMA}

    id = Column(Integer, primary_key=True, index=True)
    field_group_id = Column(
        Integer, ForeignKey(f'{DB_SCHEMA}.field_group.id', ondelete='CASCADE'), nullable=False, index=True
    )
    # snapshot keyed by field key; not linked to live field rows
    data = Column(JSON, nullable=False, default=dict)
    ip_address = Column(String(45), nullable=True)
    user_agent = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    field_group = relationship("FieldGroup", back_populates="submissions")
