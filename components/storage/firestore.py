"""Storage backend on Cloud Firestore via the Firebase Admin SDK."""

import logging
import os
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

import firebase_admin
from firebase_admin import credentials, firestore_async
from google.api_core import exceptions as google_exceptions

from components.core.exceptions import (
    ConflictError,
    DebtLiteError,
    NotFoundError,
    StorageConfigurationError,
    StorageUnavailableError,
    UnauthorizedError,
)
from components.core.utils import new_id, utcnow
from components.payment.schemas import PaymentStatusEntry, PaymentTotals
from components.plan.schemas import Plan
from components.storage.interface import BaseStorageService
from components.storage.keyvalue import KeyValueArea

logger = logging.getLogger(__name__)

_firebase_app: Optional[firebase_admin.App] = None


def get_async_firestore_client(project_id: str, credentials_path: Optional[str] = None):
    """Initialize the default Firebase app once and return an async Firestore client."""
    global _firebase_app
    if _firebase_app is None:
        try:
            _firebase_app = firebase_admin.get_app()
        except ValueError:
            if credentials_path:
                if not os.path.exists(credentials_path):
                    raise StorageConfigurationError(
                        f"Firebase credentials file not found at: {credentials_path}"
                    )
                cred = credentials.Certificate(credentials_path)
            else:
                cred = credentials.ApplicationDefault()
            _firebase_app = firebase_admin.initialize_app(cred, {"projectId": project_id})
            logger.info("Firebase initialized for project %s", project_id)
    return firestore_async.client(_firebase_app)


@asynccontextmanager
async def translate_errors(action: str) -> AsyncIterator[None]:
    """Map Google API failures raised inside the block onto the shared error types."""
    try:
        yield
    except DebtLiteError:
        raise
    except google_exceptions.NotFound as exc:
        raise NotFoundError("Plan not found") from exc
    except (google_exceptions.Unauthenticated, google_exceptions.PermissionDenied) as exc:
        raise UnauthorizedError(str(exc.message)) from exc
    except google_exceptions.AlreadyExists as exc:
        raise ConflictError(str(exc.message)) from exc
    except google_exceptions.GoogleAPIError as exc:
        logger.error("Firestore failed to %s: %s", action, exc, exc_info=True)
        raise StorageUnavailableError(f"Failed to {action}") from exc


class FirestoreStorageService(BaseStorageService):
    """
    Keeps each user's data under ``users/{userId}``.

    Plans are documents of the ``plans`` sub-collection keyed by plan id.
    Payment data of a plan is one document of the ``payments`` sub-collection
    with a ``status`` array and an optional ``totals`` map. The client is
    created on first use so construction never touches the network.
    """

    def __init__(
        self,
        project_id: Optional[str] = None,
        credentials_path: Optional[str] = None,
        user_id: Optional[str] = None,
        key_value_area: Optional[KeyValueArea] = None,
        client: Any = None,
    ):
        super().__init__(key_value_area)
        self.project_id = project_id
        self.credentials_path = credentials_path
        self.user_id = user_id
        self._client = client

    def set_session(self, token: Optional[str] = None, user_id: Optional[str] = None) -> None:
        self.user_id = user_id

    @property
    def client(self):
        if self._client is None:
            if not self.project_id:
                raise StorageConfigurationError("FIREBASE_PROJECT_ID is required for firestore storage")
            self._client = get_async_firestore_client(self.project_id, self.credentials_path)
        return self._client

    def _user_document(self):
        if not self.user_id:
            raise UnauthorizedError("No authenticated user")
        return self.client.collection("users").document(self.user_id)

    def _plans(self):
        return self._user_document().collection("plans")

    def _payments(self):
        return self._user_document().collection("payments")

    @staticmethod
    def _to_plan(snapshot) -> Plan:
        return Plan.model_validate({**snapshot.to_dict(), "id": snapshot.id})

    @staticmethod
    def _to_document(plan: Plan) -> Dict[str, Any]:
        return plan.model_dump(exclude={"id"})

    async def _get_snapshot(self, plan_id: str):
        snapshot = await self._plans().document(plan_id).get()
        if not snapshot.exists:
            raise NotFoundError("Plan not found")
        return snapshot

    async def _payment_fields(self, plan_id: str) -> Dict[str, Any]:
        await self._get_snapshot(plan_id)
        snapshot = await self._payments().document(plan_id).get()
        if not snapshot.exists:
            return {}
        return snapshot.to_dict() or {}

    async def list_plans(self) -> List[Plan]:
        async with translate_errors("list plans"):
            query = self._plans().order_by("created_at")
            return [self._to_plan(snapshot) async for snapshot in query.stream()]

    async def get_plan(self, plan_id: str) -> Plan:
        async with translate_errors("get plan"):
            return self._to_plan(await self._get_snapshot(plan_id))

    async def save_plan(self, plan: Plan) -> Plan:
        async with translate_errors("save plan"):
            if plan.id:
                existing = self._to_plan(await self._get_snapshot(plan.id))
                saved = plan.model_copy(update={"created_at": plan.created_at or existing.created_at})
            else:
                saved = plan.model_copy(update={"id": new_id(), "created_at": utcnow()})
            await self._plans().document(saved.id).set(self._to_document(saved))
            return saved

    async def save_plans(self, plans: List[Plan]) -> List[Plan]:
        async with translate_errors("save plans"):
            saved: List[Plan] = []
            for plan in plans:
                created_at = plan.created_at
                if plan.id and created_at is None:
                    snapshot = await self._plans().document(plan.id).get()
                    if snapshot.exists:
                        created_at = self._to_plan(snapshot).created_at
                saved.append(plan.model_copy(update={
                    "id": plan.id or new_id(),
                    "created_at": created_at or utcnow(),
                }))
            batch = self.client.batch()
            for plan in saved:
                batch.set(self._plans().document(plan.id), self._to_document(plan))
            await batch.commit()
            logger.info("Saved %d plans to Firestore for user %s", len(saved), self.user_id)
            return saved

    async def delete_plan(self, plan_id: str) -> None:
        async with translate_errors("delete plan"):
            await self._get_snapshot(plan_id)
            batch = self.client.batch()
            batch.delete(self._plans().document(plan_id))
            batch.delete(self._payments().document(plan_id))
            await batch.commit()

    async def get_payment_status(self, plan_id: str) -> List[PaymentStatusEntry]:
        async with translate_errors("get payment status"):
            fields = await self._payment_fields(plan_id)
            entries = [PaymentStatusEntry.model_validate(item) for item in fields.get("status") or []]
            return sorted(entries, key=lambda entry: entry.month_index)

    async def save_payment_status(
        self, plan_id: str, entries: List[PaymentStatusEntry]
    ) -> List[PaymentStatusEntry]:
        entries = self.validate_entries(entries)
        async with translate_errors("save payment status"):
            await self._get_snapshot(plan_id)
            ordered = sorted(entries, key=lambda entry: entry.month_index)
            await self._payments().document(plan_id).set(
                {"status": [entry.model_dump() for entry in ordered]}, merge=True
            )
            return ordered

    async def get_payment_totals(self, plan_id: str) -> Optional[PaymentTotals]:
        async with translate_errors("get payment totals"):
            totals = (await self._payment_fields(plan_id)).get("totals")
            if totals is None:
                return None
            return PaymentTotals.model_validate(totals)

    async def save_payment_totals(self, plan_id: str, totals: PaymentTotals) -> PaymentTotals:
        async with translate_errors("save payment totals"):
            await self._get_snapshot(plan_id)
            await self._payments().document(plan_id).set({"totals": totals.model_dump()}, merge=True)
            return totals

    async def delete_payment_data(self, plan_id: str) -> None:
        async with translate_errors("delete payment data"):
            await self._get_snapshot(plan_id)
            await self._payments().document(plan_id).delete()
