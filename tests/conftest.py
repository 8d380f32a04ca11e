"""Pytest configuration - loads .env for integration tests and provides a fake transport."""

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest
from dotenv import load_dotenv

from kontent_management import ManagementClient
from kontent_management.core.client import RetryPolicy

# Load .env from project root
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(env_path)

FIXTURES = Path(__file__).parent / "fixtures"

BASE_URL = "https://manage.test/v2"
SUBSCRIPTION_ID = "9f8a1c2e-5b8d-4b3a-9a7e-1c2d3e4f5a6b"
ENVIRONMENT_ID = "7a4c2b1e-0d9f-4e3c-8b2a-6f5e4d3c2b1a"
SUBSCRIPTION_ENDPOINT = f"{BASE_URL}/subscriptions/{SUBSCRIPTION_ID}"
ENVIRONMENT_ENDPOINT = f"{BASE_URL}/projects/{ENVIRONMENT_ID}"


def load_fixture(name: str) -> str:
    return (FIXTURES / name).read_text(encoding="utf-8")


def load_fixture_json(name: str) -> Any:
    return json.loads(load_fixture(name))


@dataclass
class SentRequest:
    method: str
    url: str
    body: str | None
    headers: dict[str, str]

    @property
    def json(self) -> Any:
        return json.loads(self.body) if self.body else None


@dataclass
class FakeTransport:
    """
    Transport returning queued responses and recording every request.

    Each queued response is ``(status, body)`` or an exception instance to
    raise. When the queue runs dry the last response is repeated.
    """

    responses: list[Any] = field(default_factory=list)
    calls: list[SentRequest] = field(default_factory=list)

    def queue(self, status: int, body: Any = None) -> "FakeTransport":
        if body is not None and not isinstance(body, str):
            body = json.dumps(body)
        self.responses.append((status, body))
        return self

    def queue_error(self, error: BaseException) -> "FakeTransport":
        self.responses.append(error)
        return self

    async def send(
        self,
        method: str,
        path: str,
        body: str | None,
        headers: Mapping[str, str],
    ) -> tuple[int, str | None]:
        self.calls.append(SentRequest(method, path, body, dict(headers)))
        if not self.responses:
            raise AssertionError(f"Unexpected request: {method} {path}")
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, BaseException):
            raise response
        return response


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def fast_retry() -> RetryPolicy:
    return RetryPolicy(max_attempts=3, base_delay=0, max_delay=0)


@pytest.fixture
def client(transport: FakeTransport, fast_retry: RetryPolicy) -> ManagementClient:
    return ManagementClient(
        api_key="test-api-key",
        subscription_id=SUBSCRIPTION_ID,
        environment_id=ENVIRONMENT_ID,
        base_url=BASE_URL,
        retry_policy=fast_retry,
        transport=transport,
    )
