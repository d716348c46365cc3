"""Shared fixtures for unit tests of the report pipeline and its API.

`FakeGateway` stands in for the BaaS serverless-function endpoint: it serves
Bacula job payloads for ``bacula-proxy`` and acknowledges
``send-whatsapp-message`` calls, recording every invocation.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Set, Tuple
from unittest.mock import AsyncMock

import httpx
import pytest
import pytest_asyncio

from opsboard.core.database.entities import Integration, MessageTemplate, ScheduledReport
from opsboard.core.database.repositories import ReportRepoBundle
from opsboard.functions import FunctionsClient
from opsboard.reports import BaculaDailyReportRunner, TTLCache
from opsboard.server.core.config import ReportConfig

# 09:00 in Sao Paulo; the reporting window is 2026-03-09 local time
FIXED_NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)

DEFAULT_BODY = (
    "*Bacula {{date}}*\n"
    "Total: {{total_jobs}}, Errors: {{error_jobs}} ({{error_rate}}%)\n"
    "{{#if has_errors}}Failed:\n{{#each error_details}}{{index}}. {{job_name}} ({{client}})\n{{/each}}"
    "{{else}}All good{{/if}}"
)


def bacula_job(jobid: int, status: str, *, client: str = "srv-01", starttime: str = "2026-03-09 10:00:00", **extra):
    job = {
        "jobid": jobid,
        "name": f"backup-{jobid}",
        "client": client,
        "level": "I",
        "type": "B",
        "jobstatus": status,
        "jobbytes": 1024,
        "jobfiles": 10,
        "starttime": starttime,
    }
    job.update(extra)
    return job


class FakeGateway:
    """Programmable stand-in for the serverless-function endpoint."""

    def __init__(self) -> None:
        self.jobs: List[Dict[str, Any]] = []
        self.payloads: Dict[str, Any] = {}
        self.failing_endpoints: Set[str] = set()
        self.failing_phones: Set[str] = set()
        self.calls: List[Tuple[str, Dict[str, Any]]] = []

    def calls_to(self, function: str) -> List[Dict[str, Any]]:
        return [body for name, body in self.calls if name == function]

    def handler(self, request: httpx.Request) -> httpx.Response:
        name = request.url.path.rsplit("/", 1)[-1]
        body = json.loads(request.content or b"{}")
        self.calls.append((name, body))
        if name == "bacula-proxy":
            endpoint = body.get("endpoint")
            if endpoint in self.failing_endpoints:
                return httpx.Response(502, json={"error": "bad gateway"})
            return httpx.Response(200, json=self.payloads.get(endpoint, {"jobs": self.jobs}))
        if name == "send-whatsapp-message":
            phone = body.get("phoneNumber")
            if phone in self.failing_phones:
                return httpx.Response(500, json={"error": "instance disconnected"})
            return httpx.Response(200, json={"key": {"id": f"msg-{phone}"}, "status": "PENDING"})
        return httpx.Response(404, json={"error": f"unknown function {name}"})


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest_asyncio.fixture
async def functions_client(gateway: FakeGateway):
    client = FunctionsClient(
        "http://mock/functions/v1",
        service_key="service-key",
        client=httpx.AsyncClient(transport=httpx.MockTransport(gateway.handler)),
    )
    yield client
    await client._http.aclose()


@pytest.fixture
def report_config() -> ReportConfig:
    return ReportConfig(fetch_backoff_seconds=0.5)


@pytest.fixture
def fake_sleep() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def runner(repos: ReportRepoBundle, functions_client: FunctionsClient, report_config: ReportConfig, fake_sleep):
    return BaculaDailyReportRunner(
        repos,
        functions_client,
        config=report_config,
        cache=TTLCache(ttl_seconds=report_config.cache_ttl_seconds),
        clock=lambda: FIXED_NOW,
        sleep=fake_sleep,
    )


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def make_job():
    return bacula_job


class Seeder:
    """Creates report rows in the test database."""

    def __init__(self, repos: ReportRepoBundle) -> None:
        self.repos = repos

    async def template(
        self,
        *,
        body: str = DEFAULT_BODY,
        is_active: bool = True,
        template_type: str = "bacula_daily",
        name: str = "Bacula daily",
    ) -> MessageTemplate:
        return await self.repos.templates.create(
            MessageTemplate(name=name, subject="Backups", body=body, template_type=template_type, is_active=is_active)
        )

    async def messaging_integration(self, *, instance_name: Optional[str] = "ops_instance") -> Integration:
        return await self.repos.integrations.create(
            Integration(
                name="WhatsApp",
                type="evolution_api",
                base_url="http://mock/evolution",
                instance_name=instance_name,
            )
        )

    async def recipient(
        self,
        template: MessageTemplate,
        phone: str,
        *,
        is_active: bool = True,
        next_execution: Optional[datetime] = None,
        cron_expression: str = "0 8 * * *",
    ) -> ScheduledReport:
        return await self.repos.schedules.create(
            ScheduledReport(
                name=f"Daily to {phone}",
                report_type=template.id,
                phone_number=phone,
                cron_expression=cron_expression,
                is_active=is_active,
                next_execution=next_execution,
            )
        )


@pytest.fixture
def seed(repos: ReportRepoBundle) -> Seeder:
    return Seeder(repos)
