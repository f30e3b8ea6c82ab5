"""Freelancer profile model: the business owner issuing invoices."""

import uuid

from sqlalchemy import Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from backend.app.core.time import utc_now
from backend.app.db.base_class import Base


class Freelancer(Base):
    __tablename__ = "freelancers"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    address = Column(Text, nullable=False)
    phone = Column(String(50), nullable=True)
    website = Column(String(512), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    user = relationship("User", back_populates="freelancer")
    clients = relationship("Client", back_populates="freelancer", cascade="all, delete-orphan", passive_deletes=True)
    invoices = relationship("Invoice", back_populates="freelancer", cascade="all, delete-orphan", passive_deletes=True)
