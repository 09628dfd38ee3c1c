"""
Root conftest for the pytest test suite.

Every test gets a fresh in-memory SQLite database with the full schema and
two accounts already in it: an admin and a staff user. HTTP tests talk to the
FastAPI app in-process through ``httpx.AsyncClient`` with the production
lifespan disabled, so no mail settings or real database are needed.

Key Fixtures:
- `initialize_test_db`: (autouse) Creates a fresh DB schema for each test.
- `fake_mailer`: Records sent messages instead of talking to SMTP.
- `app_for_testing`: The FastAPI app with a no-op lifespan and the fake mailer.
- `async_client`: A non-authenticated client.
- `admin_token` / `staff_token`: Bearer tokens for the fixture accounts.
- `admin_client` / `staff_client`: Clients that send those tokens.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Generator, Optional

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from tortoise import Tortoise

from stockroom.features.auth.security import create_access_token, get_password_hash
from stockroom.features.auth.service import create_user
from stockroom.features.reports.delivery import get_mailer
from stockroom.main import app as actual_app

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "adminpassword123"
STAFF_EMAIL = "staff@example.com"
STAFF_PASSWORD = "staffpassword123"

TEST_DB_CONFIG = {
    "connections": {"default": "sqlite://:memory:"},
    "apps": {
        "models": {
            "models": [
                "stockroom.features.auth.models",
                "stockroom.features.inventory.models",
                "stockroom.features.customers.models",
                "stockroom.features.sales.models",
                "aerich.models",
            ],
            "default_connection": "default",
        }
    },
    "use_tz": True,
    "timezone": "UTC",
}


class FakeMailer:
    """Collects messages; set ``fail_with`` to make the next send raise."""

    def __init__(self):
        self.sent: list[dict] = []
        self.fail_with: Optional[Exception] = None

    async def send(self, to, subject, body, attachment, filename, media_type):
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append(
            {
                "to": to,
                "subject": subject,
                "body": body,
                "attachment": attachment,
                "filename": filename,
                "media_type": media_type,
            }
        )


@pytest_asyncio.fixture(scope="function", autouse=True)
async def initialize_test_db() -> AsyncGenerator[None, None]:
    """
    Initializes the database for each test function.

    This async, autouse fixture creates a fresh in-memory database and schema
    for each test and tears it down afterwards.
    """
    await Tortoise.init(config=TEST_DB_CONFIG)
    await Tortoise.generate_schemas()
    await create_user(ADMIN_EMAIL, get_password_hash(ADMIN_PASSWORD), role="admin")
    await create_user(STAFF_EMAIL, get_password_hash(STAFF_PASSWORD), role="staff")

    yield

    await Tortoise.close_connections()


@pytest.fixture
def fake_mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture(scope="function")
def app_for_testing(fake_mailer: FakeMailer) -> Generator[FastAPI, Any, None]:
    """
    Provides the FastAPI application with its production lifespan disabled,
    so the test DB fixture owns the database connection.
    """
    original_lifespan = actual_app.router.lifespan_context

    @asynccontextmanager
    async def dummy_lifespan(app: FastAPI):
        yield

    actual_app.router.lifespan_context = dummy_lifespan
    actual_app.dependency_overrides[get_mailer] = lambda: fake_mailer

    yield actual_app

    actual_app.dependency_overrides.clear()
    actual_app.router.lifespan_context = original_lifespan


@pytest_asyncio.fixture(scope="function")
async def async_client(app_for_testing: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app_for_testing)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def admin_token() -> str:
    return create_access_token(subject=ADMIN_EMAIL)


@pytest.fixture
def staff_token() -> str:
    return create_access_token(subject=STAFF_EMAIL)


@pytest_asyncio.fixture(scope="function")
async def admin_client(app_for_testing: FastAPI, admin_token: str) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app_for_testing)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        headers={"Authorization": f"Bearer {admin_token}"},
    ) as ac:
        yield ac


@pytest_asyncio.fixture(scope="function")
async def staff_client(app_for_testing: FastAPI, staff_token: str) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app_for_testing)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        headers={"Authorization": f"Bearer {staff_token}"},
    ) as ac:
        yield ac
