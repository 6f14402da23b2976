"""Plan management on top of a storage backend."""

import logging
from typing import Any, Dict, List, Optional

from components.core.config import Settings, get_settings
from components.core.exceptions import DebtLiteError, NotFoundError, ValidationError
from components.core.validation import validate_payload
from components.plan.schemas import Plan, PlanCreate, PlanUpdate
from components.storage.interface import StorageService
from components.tracker.notifier import LoggingNotifier, Notifier
from components.tracker.utils import calculate_monthly_payment, sanitize_plan_name

logger = logging.getLogger(__name__)


class PlansService:
    """
    Creates, edits and switches between plans.

    At most one plan is flagged active; the active id kept by the storage
    backend always names it.
    """

    def __init__(
        self,
        storage: StorageService,
        notifier: Optional[Notifier] = None,
        settings: Optional[Settings] = None,
    ):
        self.storage = storage
        self.notifier = notifier or LoggingNotifier()
        self.settings = settings or get_settings()

    def _check_limits(self, total_amount: Optional[float], number_of_months: Optional[int]) -> None:
        violations = []
        if total_amount is not None and total_amount > self.settings.MAX_PLAN_AMOUNT:
            violations.append({
                "field": "totalAmount",
                "message": f"Amount is too large (maximum: {self.settings.MAX_PLAN_AMOUNT:,.0f})",
            })
        if number_of_months is not None and number_of_months > self.settings.MAX_PLAN_MONTHS:
            violations.append({
                "field": "numberOfMonths",
                "message": f"Number of months cannot exceed {self.settings.MAX_PLAN_MONTHS}",
            })
        if violations:
            raise ValidationError(violations=violations)

    @staticmethod
    def _clean_name(plan_name: str) -> str:
        cleaned = sanitize_plan_name(plan_name)
        if not cleaned:
            raise ValidationError(violations=[{"field": "planName", "message": "Plan name is required"}])
        return cleaned

    async def get_all_plans(self) -> List[Plan]:
        return await self.storage.list_plans()

    async def get_active_plan(self) -> Optional[Plan]:
        return await self.storage.get_active_plan()

    async def get_plan(self, plan_id: str) -> Plan:
        return await self.storage.get_plan(plan_id)

    async def create_plan(
        self,
        plan_name: str,
        total_amount: float,
        number_of_months: Optional[int] = None,
        debt_owner: str = "self",
        monthly_payment: Optional[float] = None,
    ) -> Plan:
        """
        Create a plan and make it the active one.

        The monthly payment is derived from the amount and month count when not
        given. Every other plan is deactivated in the same bulk save.

        Raises:
            ValidationError: If the data is invalid or MAX_PLANS is reached
        """
        try:
            if monthly_payment is None and isinstance(total_amount, (int, float)):
                monthly_payment = calculate_monthly_payment(total_amount, number_of_months)
            plan_in = validate_payload(PlanCreate, {
                "planName": plan_name,
                "totalAmount": total_amount,
                "numberOfMonths": number_of_months,
                "monthlyPayment": monthly_payment,
                "debtOwner": debt_owner,
                "isActive": True,
            })
            self._check_limits(plan_in.total_amount, plan_in.number_of_months)
            plan_in.plan_name = self._clean_name(plan_in.plan_name)

            existing = await self.storage.list_plans()
            if len(existing) >= self.settings.MAX_PLANS:
                raise ValidationError(
                    f"Maximum number of plans ({self.settings.MAX_PLANS}) reached. "
                    "Please delete a plan before creating a new one."
                )

            deactivated = [
                plan.model_copy(update={"is_active": False}) for plan in existing if plan.is_active
            ]
            saved = await self.storage.save_plans(deactivated + [Plan(**plan_in.model_dump())])
            new_plan = saved[-1]
            await self.storage.set_active_plan_id(new_plan.id)
        except DebtLiteError as exc:
            self.notifier.error(exc.message)
            raise

        logger.info("Created plan %s", new_plan.id)
        self.notifier.success(f"Plan \"{new_plan.plan_name}\" created")
        return new_plan

    async def update_plan(self, plan_id: str, updates: Dict[str, Any]) -> Plan:
        """Apply a partial camelCase update to a plan."""
        try:
            changes = validate_payload(PlanUpdate, updates).model_dump(exclude_unset=True)
            if "plan_name" in changes:
                changes["plan_name"] = self._clean_name(changes["plan_name"])
            self._check_limits(changes.get("total_amount"), changes.get("number_of_months"))

            current = await self.storage.get_plan(plan_id)
            updated = validate_payload(Plan, {**current.model_dump(), **changes})
            saved = await self.storage.save_plan(updated)
        except DebtLiteError as exc:
            self.notifier.error(exc.message)
            raise

        self.notifier.success("Plan updated")
        return saved

    async def delete_plan(self, plan_id: str) -> None:
        """
        Delete a plan and its payment data.

        When the deleted plan was the active one, the most recently created
        remaining plan becomes active; with no plans left the active id is
        cleared.
        """
        try:
            active_id = await self.storage.get_active_plan_id()
            await self.storage.delete_plan(plan_id)

            if active_id == plan_id:
                remaining = await self.storage.list_plans()
                if remaining:
                    await self.switch_to_plan(remaining[-1].id)
                else:
                    await self.storage.clear_active_plan_id()
        except DebtLiteError as exc:
            self.notifier.error(exc.message)
            raise

        self.notifier.success("Plan deleted")

    async def switch_to_plan(self, plan_id: str) -> Plan:
        """Flag ``plan_id`` as the only active plan and remember it."""
        plans = await self.storage.list_plans()
        target = next((plan for plan in plans if plan.id == plan_id), None)
        if target is None:
            raise NotFoundError(f"Plan with ID {plan_id} not found")

        changed = [
            plan.model_copy(update={"is_active": plan.id == plan_id})
            for plan in plans
            if plan.is_active != (plan.id == plan_id)
        ]
        if changed:
            await self.storage.save_plans(changed)
        await self.storage.set_active_plan_id(plan_id)
        return target.model_copy(update={"is_active": True})
