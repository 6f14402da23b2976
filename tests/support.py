"""Shared fixtures for API level tests."""

import unittest

import httpx
from fastapi.testclient import TestClient

from components.core import init_db
from components.core.database import DatabaseManager
from restapi.router import create_app

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"


def use_fresh_database() -> DatabaseManager:
    """Point the app at a new, empty in-memory database."""
    init_db.db_manager = DatabaseManager(url=TEST_DB_URL)
    return init_db.db_manager


class ApiTestCase(unittest.TestCase):
    """Runs the app with its lifespan, so tables exist before the first request."""

    def setUp(self):
        use_fresh_database()
        self.client = TestClient(create_app())
        self.client.__enter__()
        self.addCleanup(self.client.__exit__, None, None, None)

    def register(self, email="user@example.com", password="secret123"):
        response = self.client.post("/api/auth/register", json={"email": email, "password": password})
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()["data"]

    def auth_headers(self, email="user@example.com", password="secret123"):
        token = self.register(email, password)["token"]
        return {"Authorization": f"Bearer {token}"}


class AsyncApiTestCase(unittest.IsolatedAsyncioTestCase):
    """Serves the app through an in-process ASGI transport."""

    async def asyncSetUp(self):
        self.db_manager = use_fresh_database()
        await init_db.init_db()
        self.app = create_app()
        self.transport = httpx.ASGITransport(app=self.app)

    async def asyncTearDown(self):
        await self.db_manager.dispose()

    async def register(self, email="user@example.com", password="secret123") -> str:
        async with httpx.AsyncClient(transport=self.transport, base_url="http://testserver") as client:
            response = await client.post("/api/auth/register", json={"email": email, "password": password})
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()["data"]["token"]
