"""Repository for plan operations."""

import logging
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.exceptions import ConflictError, NotFoundError, StorageUnavailableError
from components.payment.models import PaymentStatus, PaymentTotals
from components.plan.models import Plan
from components.plan import schemas

logger = logging.getLogger(__name__)


class PlanRepository:
    """Repository for plan operations, scoped to a single owner."""

    def __init__(self, session: AsyncSession, user_id: str):
        """Initialize repository with database session and owner id."""
        self.session = session
        self.user_id = user_id

    async def _find(self, plan_id: str) -> Optional[Plan]:
        result = await self.session.execute(
            select(Plan).where(Plan.id == plan_id, Plan.user_id == self.user_id)
        )
        return result.scalar_one_or_none()

    async def _commit(self, action: str) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.error("Failed to %s for user %s: %s", action, self.user_id, exc, exc_info=True)
            raise StorageUnavailableError(f"Failed to {action}") from exc

    async def get_all(self) -> List[Plan]:
        """Get all plans of the owner, oldest first."""
        result = await self.session.execute(
            select(Plan)
            .where(Plan.user_id == self.user_id)
            .order_by(Plan.created_at)
        )
        return list(result.scalars().all())

    async def get(self, plan_id: str) -> Plan:
        """Get plan by ID."""
        plan = await self._find(plan_id)
        if plan is None:
            raise NotFoundError("Plan not found")
        return plan

    async def create(self, plan_in: schemas.PlanCreate) -> Plan:
        """Create a new plan."""
        db_plan = Plan(**plan_in.model_dump(), user_id=self.user_id)
        self.session.add(db_plan)
        await self._commit("create plan")
        await self.session.refresh(db_plan)
        logger.debug("Created plan %s", db_plan.id)
        return db_plan

    async def update(self, plan_id: str, plan_in: schemas.PlanUpdate) -> Plan:
        """Apply the fields present in ``plan_in`` to an existing plan."""
        db_plan = await self.get(plan_id)
        for key, value in plan_in.model_dump(exclude_unset=True).items():
            setattr(db_plan, key, value)
        await self._commit("update plan")
        await self.session.refresh(db_plan)
        return db_plan

    async def delete(self, plan_id: str) -> None:
        """Delete a plan together with its payment data."""
        db_plan = await self.get(plan_id)
        await self.session.execute(delete(PaymentStatus).where(PaymentStatus.plan_id == plan_id))
        await self.session.execute(delete(PaymentTotals).where(PaymentTotals.plan_id == plan_id))
        await self.session.delete(db_plan)
        await self._commit("delete plan")
        logger.debug("Deleted plan %s", plan_id)

    async def bulk_save(self, plans_in: List[schemas.BulkPlanItem]) -> List[Plan]:
        """
        Upsert a batch of plans in one transaction.

        Entries carrying an id update the owner's plan with that id, or insert
        it under that id when absent. Entries without an id are inserted.
        Either every entry is persisted or none is.
        """
        saved: List[Plan] = []
        try:
            for item in plans_in:
                data = item.model_dump(exclude={"id"})
                db_plan = await self._find(item.id) if item.id else None
                if db_plan is not None:
                    for key, value in data.items():
                        setattr(db_plan, key, value)
                else:
                    if item.id and await self.session.get(Plan, item.id) is not None:
                        raise ConflictError(f"Plan id {item.id} is already taken")
                    db_plan = Plan(**data, user_id=self.user_id)
                    if item.id:
                        db_plan.id = item.id
                    self.session.add(db_plan)
                # Flush per entry so created_at follows input order
                await self.session.flush()
                saved.append(db_plan)
        except ConflictError:
            await self.session.rollback()
            raise
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.error("Bulk save failed for user %s: %s", self.user_id, exc, exc_info=True)
            raise StorageUnavailableError("Failed to save plans") from exc

        await self._commit("save plans")
        for db_plan in saved:
            await self.session.refresh(db_plan)
        logger.info("Bulk saved %d plans for user %s", len(saved), self.user_id)
        return saved
