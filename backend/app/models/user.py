import uuid

from sqlalchemy import Boolean, Column, DateTime, String, func
from sqlalchemy.orm import relationship

from backend.app.db.base_class import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    last_login = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    freelancer = relationship("Freelancer", back_populates="user", uselist=False)
