"""Plan model for the database."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.dialects import mysql
from sqlalchemy.orm import relationship

from components.core.database import Base
from components.core.utils import new_id, utcnow


Timestamp = DateTime().with_variant(mysql.DATETIME(fsp=6), "mysql")


class Plan(Base):
    """Plan model for storing a debt or receivable payment plan."""
    __tablename__ = "plans"

    id = Column(String(64), primary_key=True, default=new_id)
    user_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    plan_name = Column(String(255), nullable=False)
    total_amount = Column(Numeric(14, 2, asdecimal=False), nullable=False)
    number_of_months = Column(Integer, nullable=True)  # NULL while the schedule is undecided
    monthly_payment = Column(Numeric(14, 2, asdecimal=False), nullable=False)
    debt_owner = Column(String(10), nullable=False, default="self")
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(Timestamp, nullable=False, default=utcnow)
    updated_at = Column(Timestamp, nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    user = relationship("User", back_populates="plans")
    payment_statuses = relationship("PaymentStatus", back_populates="plan", passive_deletes=True)
    payment_totals = relationship("PaymentTotals", back_populates="plan", uselist=False, passive_deletes=True)
