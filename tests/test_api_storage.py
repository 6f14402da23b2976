import unittest

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
from components.storage.api import ApiStorageService
from tests.support import AsyncApiTestCase


def make_plan(name="Laptop", **overrides) -> Plan:
    data = {"plan_name": name, "total_amount": 1200, "number_of_months": 12, "monthly_payment": 100}
    data.update(overrides)
    return Plan(**data)


class ApiStorageServiceTests(AsyncApiTestCase):
    async def asyncSetUp(self):
        await super().asyncSetUp()
        token = await self.register()
        self.storage = ApiStorageService("http://testserver/api", token=token, transport=self.transport)

    async def test_plan_crud(self):
        created = await self.storage.save_plan(make_plan(number_of_months=None))
        self.assertTrue(created.id)
        self.assertIsNotNone(created.created_at)
        self.assertIsNone(created.number_of_months)

        fetched = await self.storage.get_plan(created.id)
        self.assertEqual(fetched, created)

        updated = await self.storage.save_plan(created.model_copy(update={"plan_name": "Phone"}))
        self.assertEqual(updated.plan_name, "Phone")
        self.assertEqual([p.id for p in await self.storage.list_plans()], [created.id])

        await self.storage.delete_plan(created.id)
        with self.assertRaises(NotFoundError):
            await self.storage.delete_plan(created.id)
        with self.assertRaises(NotFoundError):
            await self.storage.get_plan(created.id)

    async def test_bulk_upsert_keeps_input_order(self):
        existing = await self.storage.save_plan(make_plan("Existing"))
        saved = await self.storage.save_plans([
            make_plan("New"),
            existing.model_copy(update={"plan_name": "Renamed"}),
            make_plan("Imported", id="imported-1"),
        ])
        self.assertEqual([p.plan_name for p in saved], ["New", "Renamed", "Imported"])
        self.assertEqual(saved[1].id, existing.id)
        self.assertEqual(saved[2].id, "imported-1")
        self.assertEqual(len(await self.storage.list_plans()), 3)

    async def test_payment_data(self):
        plan = await self.storage.save_plan(make_plan())
        self.assertEqual(await self.storage.get_payment_status(plan.id), [])
        self.assertIsNone(await self.storage.get_payment_totals(plan.id))

        entries = [PaymentStatusEntry(month_index=1, status="paid", amount=100),
                   PaymentStatusEntry(month_index=0, status="pending", amount=100)]
        saved = await self.storage.save_payment_status(plan.id, entries)
        self.assertEqual([e.month_index for e in saved], [0, 1])

        totals = await self.storage.save_payment_totals(plan.id, PaymentTotals(total_paid=100, remaining=1100))
        self.assertEqual(await self.storage.get_payment_totals(plan.id), totals)

        await self.storage.delete_payment_data(plan.id)
        self.assertEqual(await self.storage.get_payment_status(plan.id), [])
        with self.assertRaises(NotFoundError):
            await self.storage.get_payment_status("missing")

    async def test_plans_are_scoped_to_user(self):
        plan = await self.storage.save_plan(make_plan())
        other = ApiStorageService(
            "http://testserver/api",
            token=await self.register("other@example.com"),
            transport=self.transport,
        )
        self.assertEqual(await other.list_plans(), [])
        with self.assertRaises(NotFoundError):
            await other.get_plan(plan.id)
        with self.assertRaises(ConflictError):
            await other.save_plans([make_plan(id=plan.id)])

    async def test_missing_or_bad_token(self):
        self.storage.set_session(token=None)
        with self.assertRaises(UnauthorizedError):
            await self.storage.list_plans()
        self.storage.set_session(token="not-a-token")
        with self.assertRaises(UnauthorizedError):
            await self.storage.list_plans()


class ApiErrorMappingTests(unittest.IsolatedAsyncioTestCase):
    def service_returning(self, status_code, **kwargs):
        transport = httpx.MockTransport(lambda request: httpx.Response(status_code, **kwargs))
        return ApiStorageService("http://api.test/api", token="t", transport=transport)

    async def test_status_codes(self):
        cases = [
            (404, NotFoundError),
            (401, UnauthorizedError),
            (409, ConflictError),
            (400, ValidationError),
            (500, StorageUnavailableError),
            (503, StorageUnavailableError),
        ]
        for status_code, error in cases:
            with self.subTest(status_code=status_code):
                storage = self.service_returning(status_code, json={"success": False, "message": "boom"})
                with self.assertRaises(error) as ctx:
                    await storage.get_plan("p1")
                self.assertEqual(ctx.exception.message, "boom")

    async def test_validation_violations_are_kept(self):
        storage = self.service_returning(400, json={
            "success": False,
            "message": "Validation error",
            "errors": [{"field": "totalAmount", "message": "must be positive"}],
        })
        with self.assertRaises(ValidationError) as ctx:
            await storage.save_plan(make_plan())
        self.assertEqual(ctx.exception.violations[0]["field"], "totalAmount")

    async def test_non_json_body_is_storage_unavailable(self):
        storage = self.service_returning(200, text="<html>proxy</html>")
        with self.assertRaises(StorageUnavailableError):
            await storage.list_plans()

    async def test_transport_error_is_storage_unavailable(self):
        def fail(request):
            raise httpx.ConnectError("connection refused", request=request)

        storage = ApiStorageService("http://api.test/api", transport=httpx.MockTransport(fail))
        with self.assertRaises(StorageUnavailableError):
            await storage.list_plans()

    async def test_request_shape(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"success": True, "data": None})

        storage = ApiStorageService("http://api.test/api/", token="abc", transport=httpx.MockTransport(handler))
        await storage.delete_payment_data("plan/1")
        self.assertEqual(seen[0].method, "DELETE")
        self.assertEqual(seen[0].url.raw_path, b"/api/plans/plan%2F1/payments")
        self.assertEqual(seen[0].headers["Authorization"], "Bearer abc")


if __name__ == "__main__":
    unittest.main()
