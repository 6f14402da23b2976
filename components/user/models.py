"""User model for the database."""

from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import relationship

from components.core.database import Base
from components.core.utils import new_id, utcnow


class User(Base):
    """Credential record of a registered user."""
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=new_id)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password = Column(String(255), nullable=False)  # Hashed password
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    # Relationship with Plans
    plans = relationship("Plan", back_populates="user", passive_deletes=True)
