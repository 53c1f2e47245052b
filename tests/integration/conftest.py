"""Integration test fixtures: the app wired to the test database."""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from nz_payroll.api.app import create_app
from nz_payroll.api.dependencies import get_policy_schedule, get_session_factory


@pytest.fixture
async def client(session_factory, schedule) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against an app using the SQLite test database."""
    app = create_app()
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_policy_schedule] = lambda: schedule

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
