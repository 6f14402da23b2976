"""Storage backend talking to the DebtLite REST API."""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from components.core.exceptions import (
    ConflictError,
    NotFoundError,
    StorageUnavailableError,
    UnauthorizedError,
    ValidationError,
)
from components.payment.schemas import PaymentStatusEntry, PaymentTotals
from components.plan.schemas import Plan
from components.storage.interface import BaseStorageService
from components.storage.keyvalue import KeyValueArea

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0

PLAN_FIELDS = {"plan_name", "total_amount", "number_of_months", "monthly_payment", "debt_owner", "is_active"}


class ApiStorageService(BaseStorageService):
    """
    Forwards every storage operation to the backend over HTTP.

    Responses use the ``{success, data, error, message}`` envelope; ``data`` is
    unwrapped and failures are mapped onto the shared error types. A fresh
    ``httpx.AsyncClient`` is opened per call, so constructing the service does
    no I/O. Tests pass ``transport`` to route requests into an ASGI app.
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        key_value_area: Optional[KeyValueArea] = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(key_value_area)
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.transport = transport

    def set_session(self, token: Optional[str] = None, user_id: Optional[str] = None) -> None:
        self.token = token

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _request(self, method: str, path: str, payload: Optional[Any] = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.request(method, url, json=payload, headers=self._headers())
        except httpx.HTTPError as exc:
            logger.error("%s %s failed: %s", method, url, exc)
            raise StorageUnavailableError(f"Network error: {exc}") from exc

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.is_success:
            if not isinstance(body, dict):
                raise StorageUnavailableError(f"Unexpected response from {method} {path}")
            return body.get("data")

        message = None
        violations = None
        if isinstance(body, dict):
            message = body.get("message") or body.get("error")
            violations = body.get("errors")

        status = response.status_code
        logger.warning("%s %s returned %d: %s", method, path, status, message)
        if status == 404:
            raise NotFoundError(message)
        if status == 401:
            raise UnauthorizedError(message)
        if status == 409:
            raise ConflictError(message)
        if status == 400:
            raise ValidationError(message, violations=violations)
        raise StorageUnavailableError(message or f"HTTP error! status: {status}")

    @staticmethod
    def _plan_path(plan_id: str, suffix: str = "") -> str:
        return f"/plans/{quote(plan_id, safe='')}{suffix}"

    @staticmethod
    def _plan_body(plan: Plan, include_id: bool = False) -> Dict[str, Any]:
        fields = PLAN_FIELDS | {"id"} if include_id and plan.id else PLAN_FIELDS
        return plan.model_dump(mode="json", by_alias=True, include=fields)

    async def list_plans(self) -> List[Plan]:
        data = await self._request("GET", "/plans")
        return [Plan.model_validate(item) for item in data or []]

    async def get_plan(self, plan_id: str) -> Plan:
        data = await self._request("GET", self._plan_path(plan_id))
        return Plan.model_validate(data)

    async def save_plan(self, plan: Plan) -> Plan:
        if plan.id:
            data = await self._request("PUT", self._plan_path(plan.id), self._plan_body(plan))
        else:
            data = await self._request("POST", "/plans", self._plan_body(plan))
        return Plan.model_validate(data)

    async def save_plans(self, plans: List[Plan]) -> List[Plan]:
        payload = {"plans": [self._plan_body(plan, include_id=True) for plan in plans]}
        data = await self._request("POST", "/plans/bulk", payload)
        return [Plan.model_validate(item) for item in data or []]

    async def delete_plan(self, plan_id: str) -> None:
        await self._request("DELETE", self._plan_path(plan_id))

    async def get_payment_status(self, plan_id: str) -> List[PaymentStatusEntry]:
        data = await self._request("GET", self._plan_path(plan_id, "/payments"))
        return [PaymentStatusEntry.model_validate(item) for item in data or []]

    async def save_payment_status(
        self, plan_id: str, entries: List[PaymentStatusEntry]
    ) -> List[PaymentStatusEntry]:
        entries = self.validate_entries(entries)
        payload = {"status": [entry.model_dump(mode="json", by_alias=True) for entry in entries]}
        data = await self._request("PUT", self._plan_path(plan_id, "/payments"), payload)
        return [PaymentStatusEntry.model_validate(item) for item in data or []]

    async def get_payment_totals(self, plan_id: str) -> Optional[PaymentTotals]:
        data = await self._request("GET", self._plan_path(plan_id, "/totals"))
        if data is None:
            return None
        return PaymentTotals.model_validate(data)

    async def save_payment_totals(self, plan_id: str, totals: PaymentTotals) -> PaymentTotals:
        data = await self._request(
            "PUT", self._plan_path(plan_id, "/totals"), totals.model_dump(mode="json", by_alias=True)
        )
        return PaymentTotals.model_validate(data)

    async def delete_payment_data(self, plan_id: str) -> None:
        await self._request("DELETE", self._plan_path(plan_id, "/payments"))
