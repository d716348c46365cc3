from typing import AsyncGenerator
from unittest.mock import patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from opsboard.server.services.report_service import ReportService


@pytest.fixture
def report_service(repos, functions_client, report_config, runner) -> ReportService:
    """Report service wired to the test database and the fake function gateway."""
    return ReportService(repos, functions_client, config=report_config, runner=runner)


@pytest_asyncio.fixture(name="client")
async def client_fixture(report_service: ReportService) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client with mocked lifespan and overridden dependencies."""
    from opsboard.server.main import app
    from opsboard.server.services.report_service import get_report_service

    app.dependency_overrides[get_report_service] = lambda: report_service

    # Mock the lifespan to prevent database initialization during tests
    async def mock_lifespan(app):
        yield

    with patch("opsboard.server.main.lifespan", mock_lifespan):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
            yield client

    app.dependency_overrides.clear()
