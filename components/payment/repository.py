"""Repository for payment status and totals."""

import logging
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.exceptions import NotFoundError, StorageUnavailableError
from components.payment.models import PaymentStatus, PaymentTotals
from components.payment import schemas
from components.plan.models import Plan

logger = logging.getLogger(__name__)


class PaymentRepository:
    """Repository for the payment data of plans owned by one user."""

    def __init__(self, session: AsyncSession, user_id: str):
        self.session = session
        self.user_id = user_id

    async def _ensure_plan(self, plan_id: str) -> None:
        """Verify plan belongs to user."""
        result = await self.session.execute(
            select(Plan.id).where(Plan.id == plan_id, Plan.user_id == self.user_id)
        )
        if result.scalar_one_or_none() is None:
            raise NotFoundError("Plan not found")

    async def _commit(self, action: str) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.error("Failed to %s: %s", action, exc, exc_info=True)
            raise StorageUnavailableError(f"Failed to {action}") from exc

    async def get_status(self, plan_id: str) -> List[PaymentStatus]:
        """Get the payment entries of a plan ordered by month."""
        await self._ensure_plan(plan_id)
        result = await self.session.execute(
            select(PaymentStatus)
            .where(PaymentStatus.plan_id == plan_id)
            .order_by(PaymentStatus.month_index)
        )
        return list(result.scalars().all())

    async def replace_status(
        self, plan_id: str, entries: List[schemas.PaymentStatusEntry]
    ) -> List[PaymentStatus]:
        """Replace the whole payment entry collection of a plan."""
        await self._ensure_plan(plan_id)
        await self.session.execute(delete(PaymentStatus).where(PaymentStatus.plan_id == plan_id))
        rows = [
            PaymentStatus(
                plan_id=plan_id,
                month_index=entry.month_index,
                status=entry.status,
                amount=entry.amount,
                paid_at=entry.paid_at,
            )
            for entry in sorted(entries, key=lambda e: e.month_index)
        ]
        self.session.add_all(rows)
        await self._commit("save payment status")
        return rows

    async def get_totals(self, plan_id: str) -> Optional[PaymentTotals]:
        """Get the cached totals snapshot of a plan, if any."""
        await self._ensure_plan(plan_id)
        result = await self.session.execute(
            select(PaymentTotals).where(PaymentTotals.plan_id == plan_id)
        )
        return result.scalar_one_or_none()

    async def save_totals(self, plan_id: str, totals: schemas.PaymentTotals) -> PaymentTotals:
        """Insert or overwrite the totals snapshot of a plan."""
        db_totals = await self.get_totals(plan_id)
        if db_totals is None:
            db_totals = PaymentTotals(plan_id=plan_id)
            self.session.add(db_totals)
        db_totals.total_paid = totals.total_paid
        db_totals.remaining = totals.remaining
        await self._commit("save payment totals")
        return db_totals

    async def delete_payment_data(self, plan_id: str) -> None:
        """Delete payment entries and totals of a plan."""
        await self._ensure_plan(plan_id)
        await self.session.execute(delete(PaymentStatus).where(PaymentStatus.plan_id == plan_id))
        await self.session.execute(delete(PaymentTotals).where(PaymentTotals.plan_id == plan_id))
        await self._commit("delete payment data")
