import unittest

from tests.support import ApiTestCase

PLAN = {"planName": "Laptop", "totalAmount": 1200, "numberOfMonths": 12, "monthlyPayment": 100}


class HealthCheckTests(ApiTestCase):
    def test_health_check(self):
        response = self.client.get("/health_check/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "healthy")


class AuthApiTests(ApiTestCase):
    def test_register_returns_user_and_token(self):
        data = self.register("new@example.com")
        self.assertEqual(data["user"]["email"], "new@example.com")
        self.assertIn("createdAt", data["user"])
        self.assertNotIn("password", data["user"])
        self.assertTrue(data["token"])

    def test_duplicate_email_is_conflict(self):
        self.register("dup@example.com")
        response = self.client.post("/api/auth/register", json={"email": "dup@example.com", "password": "secret123"})
        self.assertEqual(response.status_code, 409)
        self.assertFalse(response.json()["success"])

    def test_invalid_registration_lists_violations(self):
        response = self.client.post("/api/auth/register", json={"email": "bad", "password": "1"})
        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertFalse(body["success"])
        self.assertEqual({e["field"] for e in body["errors"]}, {"email", "password"})

    def test_login(self):
        self.register("login@example.com", "secret123")
        response = self.client.post("/api/auth/login", json={"email": "login@example.com", "password": "secret123"})
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["data"]["token"])

    def test_login_failures_share_one_message(self):
        self.register("login@example.com", "secret123")
        wrong_password = self.client.post("/api/auth/login", json={"email": "login@example.com", "password": "nope"})
        unknown_email = self.client.post("/api/auth/login", json={"email": "who@example.com", "password": "secret123"})
        self.assertEqual(wrong_password.status_code, 401)
        self.assertEqual(unknown_email.status_code, 401)
        self.assertEqual(wrong_password.json()["message"], "Invalid email or password")
        self.assertEqual(wrong_password.json(), unknown_email.json())

    def test_plans_require_token(self):
        response = self.client.get("/api/plans")
        self.assertEqual(response.status_code, 401)
        response = self.client.get("/api/plans", headers={"Authorization": "Bearer invalid"})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["message"], "Invalid or expired token")


class PlansApiTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.headers = self.auth_headers()

    def create_plan(self, **overrides):
        response = self.client.post("/api/plans", json={**PLAN, **overrides}, headers=self.headers)
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()["data"]

    def test_create_and_get(self):
        plan = self.create_plan()
        self.assertTrue(plan["id"])
        self.assertEqual(plan["debtOwner"], "self")
        self.assertTrue(plan["isActive"])

        response = self.client.get(f"/api/plans/{plan['id']}", headers=self.headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"], plan)

    def test_create_rejects_invalid_payload(self):
        response = self.client.post("/api/plans", json={**PLAN, "totalAmount": -5}, headers=self.headers)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["errors"][0]["field"], "totalAmount")
        self.assertEqual(self.client.get("/api/plans", headers=self.headers).json()["data"], [])

    def test_partial_update(self):
        plan = self.create_plan()
        response = self.client.put(f"/api/plans/{plan['id']}", json={"monthlyPayment": 100.5}, headers=self.headers)
        self.assertEqual(response.status_code, 200)
        updated = response.json()["data"]
        self.assertEqual(updated["monthlyPayment"], 100.5)
        self.assertEqual(updated["planName"], "Laptop")

        response = self.client.put(f"/api/plans/{plan['id']}", json={}, headers=self.headers)
        self.assertEqual(response.status_code, 200)

        response = self.client.put("/api/plans/missing", json={}, headers=self.headers)
        self.assertEqual(response.status_code, 404)

    def test_delete_twice(self):
        plan = self.create_plan()
        self.assertEqual(self.client.delete(f"/api/plans/{plan['id']}", headers=self.headers).status_code, 200)
        second = self.client.delete(f"/api/plans/{plan['id']}", headers=self.headers)
        self.assertEqual(second.status_code, 404)
        self.assertEqual(second.json()["message"], "Plan not found")

    def test_bulk(self):
        existing = self.create_plan(planName="Existing")
        response = self.client.post("/api/plans/bulk", json={"plans": [
            {**PLAN, "planName": "New"},
            {**PLAN, "planName": "Renamed", "id": existing["id"]},
        ]}, headers=self.headers)
        self.assertEqual(response.status_code, 201)
        data = response.json()["data"]
        self.assertEqual([p["planName"] for p in data], ["New", "Renamed"])
        self.assertEqual(data[1]["id"], existing["id"])

    def test_bulk_is_all_or_nothing(self):
        response = self.client.post("/api/plans/bulk", json={"plans": [
            PLAN,
            {**PLAN, "monthlyPayment": 0},
        ]}, headers=self.headers)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(self.client.get("/api/plans", headers=self.headers).json()["data"], [])

    def test_csv_import(self):
        content = (
            "planName,totalAmount,numberOfMonths,monthlyPayment,debtOwner\n"
            "Car,36000,36,1000,self\n"
            "Loan to Ana,500,,500,other\n"
        )
        response = self.client.post(
            "/api/plans/import",
            files={"file": ("plans.csv", content, "text/csv")},
            headers=self.headers,
        )
        self.assertEqual(response.status_code, 201, response.text)
        data = response.json()["data"]
        self.assertEqual([p["planName"] for p in data], ["Car", "Loan to Ana"])
        self.assertIsNone(data[1]["numberOfMonths"])

    def test_csv_import_rejects_bad_rows(self):
        content = "planName,totalAmount,monthlyPayment\nCar,abc,1000\nBike,100,10\n"
        response = self.client.post(
            "/api/plans/import",
            files={"file": ("plans.csv", content, "text/csv")},
            headers=self.headers,
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["errors"][0]["field"], "row 2")
        self.assertEqual(self.client.get("/api/plans", headers=self.headers).json()["data"], [])

    def test_csv_import_requires_csv_extension(self):
        response = self.client.post(
            "/api/plans/import",
            files={"file": ("plans.xlsx", b"data", "application/octet-stream")},
            headers=self.headers,
        )
        self.assertEqual(response.status_code, 400)


class PaymentsApiTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.headers = self.auth_headers()
        response = self.client.post("/api/plans", json=PLAN, headers=self.headers)
        self.plan_id = response.json()["data"]["id"]

    def test_payment_status_round_trip(self):
        url = f"/api/plans/{self.plan_id}/payments"
        self.assertEqual(self.client.get(url, headers=self.headers).json()["data"], [])

        body = {"status": [
            {"monthIndex": 1, "status": "paid", "amount": 100, "paidAt": "2024-03-01T10:00:00+02:00"},
            {"monthIndex": 0, "status": "paid", "amount": 100, "paidAt": None},
        ]}
        response = self.client.put(url, json=body, headers=self.headers)
        self.assertEqual(response.status_code, 200)
        data = self.client.get(url, headers=self.headers).json()["data"]
        self.assertEqual([e["monthIndex"] for e in data], [0, 1])
        self.assertEqual(data[1]["paidAt"], "2024-03-01T08:00:00")

        self.assertEqual(self.client.delete(url, headers=self.headers).status_code, 200)
        self.assertEqual(self.client.get(url, headers=self.headers).json()["data"], [])

    def test_duplicate_month_index_rejected(self):
        entry = {"monthIndex": 0, "status": "paid", "amount": 100}
        response = self.client.put(
            f"/api/plans/{self.plan_id}/payments", json={"status": [entry, entry]}, headers=self.headers
        )
        self.assertEqual(response.status_code, 400)

    def test_totals(self):
        url = f"/api/plans/{self.plan_id}/totals"
        self.assertIsNone(self.client.get(url, headers=self.headers).json()["data"])
        response = self.client.put(url, json={"totalPaid": 100, "remaining": 1100}, headers=self.headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.client.get(url, headers=self.headers).json()["data"], {"totalPaid": 100, "remaining": 1100})

        response = self.client.put(url, json={"totalPaid": -1, "remaining": 10}, headers=self.headers)
        self.assertEqual(response.status_code, 400)

    def test_other_users_plan_is_not_found(self):
        other = self.auth_headers("other@example.com")
        response = self.client.get(f"/api/plans/{self.plan_id}/payments", headers=other)
        self.assertEqual(response.status_code, 404)


if __name__ == "__main__":
    unittest.main()
