"""Payment models for the database."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import relationship

from components.core.database import Base


class PaymentStatus(Base):
    """One month's payment record within a plan."""
    __tablename__ = "payment_statuses"
    __table_args__ = (UniqueConstraint("plan_id", "month_index", name="uq_payment_status_month"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    plan_id = Column(String(64), ForeignKey("plans.id", ondelete="CASCADE"), nullable=False, index=True)
    month_index = Column(Integer, nullable=False)
    status = Column(String(50), nullable=False)
    amount = Column(Numeric(14, 2, asdecimal=False), nullable=False)
    paid_at = Column(DateTime, nullable=True)  # NULL while unpaid

    plan = relationship("Plan", back_populates="payment_statuses")


class PaymentTotals(Base):
    """Cached totals snapshot for a plan."""
    __tablename__ = "payment_totals"

    id = Column(Integer, primary_key=True, autoincrement=True)
    plan_id = Column(String(64), ForeignKey("plans.id", ondelete="CASCADE"), nullable=False, unique=True)
    total_paid = Column(Numeric(14, 2, asdecimal=False), nullable=False, default=0)
    remaining = Column(Numeric(14, 2, asdecimal=False), nullable=False, default=0)

    plan = relationship("Plan", back_populates="payment_totals")
