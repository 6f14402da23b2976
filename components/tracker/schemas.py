"""Schemas for aggregated payment figures."""

from pydantic import Field

from components.core.schemas import CamelModel


class DebtSummary(CamelModel):
    total: float = 0
    paid: float = 0
    remaining: float = 0


class ReceivableSummary(CamelModel):
    total: float = 0
    received: float = 0
    pending: float = 0


class Overview(CamelModel):
    """Totals across every plan, split into my debts and money owed to me."""
    total_plans: int = 0
    total_debt: float = 0
    total_paid: float = 0
    remaining: float = 0
    my_debts: DebtSummary = Field(default_factory=DebtSummary)
    receivables: ReceivableSummary = Field(default_factory=ReceivableSummary)
