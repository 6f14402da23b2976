"""Payment tracking and totals on top of a storage backend."""

import logging
from datetime import datetime
from typing import Dict, List, Optional

from components.core.exceptions import DebtLiteError, ValidationError
from components.core.utils import utcnow
from components.payment.schemas import PaymentStatusEntry, PaymentTotals
from components.plan.schemas import Plan
from components.storage.interface import StorageService
from components.tracker.notifier import LoggingNotifier, Notifier
from components.tracker.schemas import DebtSummary, Overview, ReceivableSummary
from components.tracker.utils import installment_amounts

logger = logging.getLogger(__name__)

PAID = "paid"
UNPAID = "unpaid"


def calculate_totals(plan: Plan, entries: List[PaymentStatusEntry]) -> PaymentTotals:
    """Sum the paid entries of a plan; remaining never goes below zero."""
    paid = round(sum(entry.amount for entry in entries if entry.is_paid), 2)
    remaining = round(max(plan.total_amount - paid, 0), 2)
    return PaymentTotals(total_paid=paid, remaining=remaining)


class PaymentsService:
    """Marks installments paid or unpaid and keeps the totals snapshot fresh."""

    def __init__(self, storage: StorageService, notifier: Optional[Notifier] = None):
        self.storage = storage
        self.notifier = notifier or LoggingNotifier()

    calculate_totals = staticmethod(calculate_totals)

    async def get_plan_totals(self, plan: Plan) -> PaymentTotals:
        """Cached totals snapshot of a plan, recomputed from its entries when absent."""
        cached = await self.storage.get_payment_totals(plan.id)
        if cached is not None:
            return cached
        entries = await self.storage.get_payment_status(plan.id)
        return calculate_totals(plan, entries)

    async def get_paid_months_count(self, plan_id: str) -> int:
        entries = await self.storage.get_payment_status(plan_id)
        return sum(1 for entry in entries if entry.is_paid)

    async def mark_month(
        self,
        plan: Plan,
        month_index: int,
        paid: bool = True,
        paid_at: Optional[datetime] = None,
    ) -> PaymentTotals:
        """
        Record one installment as paid or unpaid and refresh the totals.

        Args:
            plan: Plan the installment belongs to
            month_index: Zero based installment index within the schedule
            paid: New state of the installment
            paid_at: Payment time; defaults to now when marking paid

        Returns:
            The recomputed totals snapshot
        """
        amounts = installment_amounts(plan.total_amount, plan.number_of_months, plan.monthly_payment)
        try:
            if month_index < 0 or month_index >= len(amounts):
                raise ValidationError(violations=[{
                    "field": "monthIndex",
                    "message": f"Month index must be between 0 and {len(amounts) - 1}",
                }])
            entries: Dict[int, PaymentStatusEntry] = {
                entry.month_index: entry for entry in await self.storage.get_payment_status(plan.id)
            }
            entries[month_index] = PaymentStatusEntry(
                month_index=month_index,
                status=PAID if paid else UNPAID,
                amount=amounts[month_index],
                paid_at=(paid_at or utcnow()) if paid else None,
            )
            saved = await self.storage.save_payment_status(plan.id, list(entries.values()))
            totals = await self.storage.save_payment_totals(plan.id, calculate_totals(plan, saved))
        except DebtLiteError as exc:
            self.notifier.error(exc.message)
            raise

        logger.debug("Plan %s month %d marked %s", plan.id, month_index, PAID if paid else UNPAID)
        return totals

    async def clear_payment_records(self, plan_id: str) -> None:
        await self.storage.delete_payment_data(plan_id)
        self.notifier.info("Payment records cleared")

    async def get_overview(self, plans: List[Plan]) -> Overview:
        """Aggregate totals over ``plans``, split by who owes the money."""
        my_debts = DebtSummary()
        receivables = ReceivableSummary()
        for plan in plans:
            totals = await self.get_plan_totals(plan)
            if plan.debt_owner == "other":
                receivables.total += plan.total_amount
                receivables.received += totals.total_paid
            else:
                my_debts.total += plan.total_amount
                my_debts.paid += totals.total_paid
        my_debts.remaining = my_debts.total - my_debts.paid
        receivables.pending = receivables.total - receivables.received

        total_debt = my_debts.total + receivables.total
        total_paid = my_debts.paid + receivables.received
        return Overview(
            total_plans=len(plans),
            total_debt=total_debt,
            total_paid=total_paid,
            remaining=total_debt - total_paid,
            my_debts=my_debts,
            receivables=receivables,
        )
