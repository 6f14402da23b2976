"""Storage contract shared by the local, API and Firestore backends."""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Protocol

from components.core.validation import validate_payload
from components.payment.schemas import PaymentStatusEntry, PaymentStatusUpdate, PaymentTotals
from components.plan.schemas import Plan
from components.storage.keyvalue import InMemoryKeyValueArea, KeyValueArea

logger = logging.getLogger(__name__)

ACTIVE_PLAN_ID_KEY = "debtLiteActivePlanId"


class StorageService(Protocol):
    """Operations the client services need from a plan store."""

    async def list_plans(self) -> List[Plan]:
        ...

    async def get_plan(self, plan_id: str) -> Plan:
        ...

    async def save_plan(self, plan: Plan) -> Plan:
        ...

    async def save_plans(self, plans: List[Plan]) -> List[Plan]:
        ...

    async def delete_plan(self, plan_id: str) -> None:
        ...

    async def get_payment_status(self, plan_id: str) -> List[PaymentStatusEntry]:
        ...

    async def save_payment_status(
        self, plan_id: str, entries: List[PaymentStatusEntry]
    ) -> List[PaymentStatusEntry]:
        ...

    async def get_payment_totals(self, plan_id: str) -> Optional[PaymentTotals]:
        ...

    async def save_payment_totals(self, plan_id: str, totals: PaymentTotals) -> PaymentTotals:
        ...

    async def delete_payment_data(self, plan_id: str) -> None:
        ...

    async def get_active_plan_id(self) -> Optional[str]:
        ...

    async def set_active_plan_id(self, plan_id: str) -> None:
        ...

    async def clear_active_plan_id(self) -> None:
        ...

    async def get_active_plan(self) -> Optional[Plan]:
        ...

    def set_session(self, token: Optional[str] = None, user_id: Optional[str] = None) -> None:
        ...


def resolve_active_plan(plans: List[Plan], active_plan_id: Optional[str]) -> Optional[Plan]:
    """
    Pick the plan the UI should show.

    The stored id wins when it still names a plan. Otherwise the first plan
    flagged active is used, then the most recently created one.
    """
    if active_plan_id:
        for plan in plans:
            if plan.id == active_plan_id:
                return plan
    for plan in plans:
        if plan.is_active:
            return plan
    if plans:
        return plans[-1]
    return None


class BaseStorageService(ABC):
    """Active plan bookkeeping shared by every backend."""

    def __init__(self, key_value_area: Optional[KeyValueArea] = None):
        self.area = key_value_area if key_value_area is not None else InMemoryKeyValueArea()

    def set_session(self, token: Optional[str] = None, user_id: Optional[str] = None) -> None:
        """Attach the signed in user; backends without accounts ignore it."""

    @abstractmethod
    async def list_plans(self) -> List[Plan]:
        ...

    @staticmethod
    def validate_entries(entries: List[PaymentStatusEntry]) -> List[PaymentStatusEntry]:
        """Reject a payment status collection that repeats a month index."""
        return validate_payload(PaymentStatusUpdate, {"status": entries}).status

    async def get_active_plan_id(self) -> Optional[str]:
        return self.area.get_item(ACTIVE_PLAN_ID_KEY)

    async def set_active_plan_id(self, plan_id: str) -> None:
        self.area.set_item(ACTIVE_PLAN_ID_KEY, plan_id)

    async def clear_active_plan_id(self) -> None:
        self.area.remove_item(ACTIVE_PLAN_ID_KEY)

    async def get_active_plan(self) -> Optional[Plan]:
        plans = await self.list_plans()
        active_id = await self.get_active_plan_id()
        plan = resolve_active_plan(plans, active_id)
        if active_id and (plan is None or plan.id != active_id):
            logger.debug("Stored active plan %s no longer exists", active_id)
        return plan
