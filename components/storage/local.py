"""Storage backend over a browser-style key-value area."""

import json
import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from components.core.exceptions import NotFoundError, StorageUnavailableError
from components.core.utils import new_id, utcnow
from components.payment.schemas import PaymentStatusEntry, PaymentTotals
from components.plan.schemas import Plan
from components.storage.interface import BaseStorageService
from components.storage.keyvalue import KeyValueArea

logger = logging.getLogger(__name__)

PLANS_KEY = "debtLitePlans"
PAYMENT_STATUS_PREFIX = "paymentStatus_"
PAYMENT_TOTALS_PREFIX = "paymentTotals_"
MAX_DATA_SIZE = 5 * 1024 * 1024


def payment_status_key(plan_id: str) -> str:
    return f"{PAYMENT_STATUS_PREFIX}{plan_id}"


def payment_totals_key(plan_id: str) -> str:
    return f"{PAYMENT_TOTALS_PREFIX}{plan_id}"


class LocalStorageService(BaseStorageService):
    """
    Keeps plans and payment data as JSON strings under fixed keys.

    Plans live in one array under ``debtLitePlans`` in creation order. Payment
    data lives under per-plan keys. Every public coroutine reads, mutates and
    writes without awaiting in between, so interleaved calls on one event loop
    cannot lose updates.
    """

    def __init__(self, key_value_area: Optional[KeyValueArea] = None):
        super().__init__(key_value_area)

    def _read_json(self, key: str) -> Any:
        raw = self.area.get_item(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError as exc:
            logger.error("Corrupt data under %s: %s", key, exc)
            raise StorageUnavailableError(f"Stored data under {key} is corrupt") from exc

    def _write_json(self, key: str, value: Any) -> None:
        serialized = json.dumps(value)
        if len(serialized.encode("utf-8")) > MAX_DATA_SIZE:
            raise StorageUnavailableError("Data too large for local storage (max 5MB)")
        self.area.set_item(key, serialized)

    def _read_records(self) -> List[Dict[str, Any]]:
        records = self._read_json(PLANS_KEY)
        if records is None:
            return []
        if not isinstance(records, list):
            raise StorageUnavailableError("Stored plans are not a list")
        return records

    def _to_plan(self, record: Dict[str, Any]) -> Plan:
        try:
            return Plan.model_validate(record)
        except PydanticValidationError as exc:
            raise StorageUnavailableError("Stored plan is invalid") from exc

    def _to_record(self, plan: Plan) -> Dict[str, Any]:
        return plan.model_dump(mode="json", by_alias=True)

    def _index_of(self, records: List[Dict[str, Any]], plan_id: str) -> int:
        for index, record in enumerate(records):
            if record.get("id") == plan_id:
                return index
        return -1

    def _ensure_plan(self, plan_id: str) -> None:
        if self._index_of(self._read_records(), plan_id) < 0:
            raise NotFoundError("Plan not found")

    def _merge(self, records: List[Dict[str, Any]], plan: Plan) -> Plan:
        """Insert or overwrite ``plan`` inside ``records``; returns the stored plan."""
        index = self._index_of(records, plan.id) if plan.id else -1
        if index >= 0:
            stored = self._to_plan(records[index])
            saved = plan.model_copy(update={"created_at": plan.created_at or stored.created_at})
            records[index] = self._to_record(saved)
        else:
            saved = plan.model_copy(update={
                "id": plan.id or new_id(),
                "created_at": plan.created_at or utcnow(),
            })
            records.append(self._to_record(saved))
        return saved

    async def list_plans(self) -> List[Plan]:
        return [self._to_plan(record) for record in self._read_records()]

    async def get_plan(self, plan_id: str) -> Plan:
        records = self._read_records()
        index = self._index_of(records, plan_id)
        if index < 0:
            raise NotFoundError("Plan not found")
        return self._to_plan(records[index])

    async def save_plan(self, plan: Plan) -> Plan:
        records = self._read_records()
        if plan.id and self._index_of(records, plan.id) < 0:
            raise NotFoundError("Plan not found")
        saved = self._merge(records, plan)
        self._write_json(PLANS_KEY, records)
        return saved

    async def save_plans(self, plans: List[Plan]) -> List[Plan]:
        records = self._read_records()
        saved = [self._merge(records, plan) for plan in plans]
        self._write_json(PLANS_KEY, records)
        logger.info("Saved %d plans to local storage", len(saved))
        return saved

    async def delete_plan(self, plan_id: str) -> None:
        records = self._read_records()
        index = self._index_of(records, plan_id)
        if index < 0:
            raise NotFoundError("Plan not found")
        del records[index]
        self._write_json(PLANS_KEY, records)
        self.area.remove_item(payment_status_key(plan_id))
        self.area.remove_item(payment_totals_key(plan_id))

    async def get_payment_status(self, plan_id: str) -> List[PaymentStatusEntry]:
        self._ensure_plan(plan_id)
        entries = self._read_json(payment_status_key(plan_id)) or []
        try:
            return [PaymentStatusEntry.model_validate(entry) for entry in entries]
        except PydanticValidationError as exc:
            raise StorageUnavailableError("Stored payment status is invalid") from exc

    async def save_payment_status(
        self, plan_id: str, entries: List[PaymentStatusEntry]
    ) -> List[PaymentStatusEntry]:
        entries = self.validate_entries(entries)
        self._ensure_plan(plan_id)
        ordered = sorted(entries, key=lambda entry: entry.month_index)
        self._write_json(
            payment_status_key(plan_id),
            [entry.model_dump(mode="json", by_alias=True) for entry in ordered],
        )
        return ordered

    async def get_payment_totals(self, plan_id: str) -> Optional[PaymentTotals]:
        self._ensure_plan(plan_id)
        totals = self._read_json(payment_totals_key(plan_id))
        if totals is None:
            return None
        try:
            return PaymentTotals.model_validate(totals)
        except PydanticValidationError as exc:
            raise StorageUnavailableError("Stored payment totals are invalid") from exc

    async def save_payment_totals(self, plan_id: str, totals: PaymentTotals) -> PaymentTotals:
        self._ensure_plan(plan_id)
        self._write_json(payment_totals_key(plan_id), totals.model_dump(mode="json", by_alias=True))
        return totals

    async def delete_payment_data(self, plan_id: str) -> None:
        self._ensure_plan(plan_id)
        self.area.remove_item(payment_status_key(plan_id))
        self.area.remove_item(payment_totals_key(plan_id))
