from sqlalchemy import Column, String, Text, DateTime, Integer, Boolean, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.config import DB_SCHEMA
from .base import Base


class FieldGroup(Base):
    __tablename__ = "field_group"
    __table_args__ = {'schema': DB_SCHEMA}

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    key = Column(String(255), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    location = Column(JSON, nullable=True)  # attach rules, stored as-is
    position = Column(Integer, nullable=False, default=0)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    fields = relationship(
        "CustomField",
        back_populates="field_group",
        order_by="(CustomField.order, CustomField.id)",
        cascade="all, delete-orphan",
    )
    submissions = relationship(
        "FormSubmission",
        back_populates="field_group",
        cascade="all, delete-orphan",
    )

    @property
    def public_url(self) -> str:
        return f"/form/{self.key}"
