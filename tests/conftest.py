"""The pytest configuration for BookStack MCP testing.

Provides settings, a fake clock for the rate limiter, and a stubbed
BookStack API served through ``httpx.MockTransport`` so no test touches
the network.
"""

import asyncio
import os

import httpx
import pytest
import pytest_asyncio

from bookstack_mcp.config import Settings
from bookstack_mcp.config import reset_settings
from bookstack_mcp.context import create_context
from bookstack_mcp.rate_limit import RateLimiter
from bookstack_mcp.server import build_dispatcher

BASE_URL = "http://bookstack.test/api"
API_TOKEN = "test-id:test-secret"


@pytest.fixture(scope="session", autouse=True)
def disable_metrics_for_tests():
    """Keep OpenTelemetry out of the test run."""
    original_value = os.environ.get("MCP_METRICS_ENABLED")
    os.environ["MCP_METRICS_ENABLED"] = "false"
    yield
    if original_value is not None:
        os.environ["MCP_METRICS_ENABLED"] = original_value
    else:
        os.environ.pop("MCP_METRICS_ENABLED", None)


@pytest.fixture(autouse=True)
def fresh_settings():
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def make_settings():
    """Factory for settings isolated from any local .env file."""

    def _make(**overrides) -> Settings:
        values = {
            "bookstack_base_url": BASE_URL,
            "bookstack_api_token": API_TOKEN,
            "environment": "test",
            "log_level": "DEBUG",
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _make


@pytest.fixture
def settings(make_settings):
    return make_settings()


class FakeClock:
    """Manually advanced monotonic clock whose sleep just moves time forward."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        await asyncio.sleep(0)
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


class BookStackStub:
    """In-memory stand-in for the BookStack API.

    Routes are keyed by method and path relative to ``/api``. A route can
    hold a single response or a list consumed one per request. Unknown
    routes answer 404 like BookStack does. Setting ``clock`` records the
    time each request reached the transport in ``request_times``.
    """

    def __init__(self):
        self.routes: dict[tuple[str, str], list[dict]] = {}
        self.requests: list[httpx.Request] = []
        self.clock = None
        self.request_times: list[float] = []

    def add(self, method: str, path: str, status: int = 200, json=None, text=None, content=None, headers=None):
        if json is not None:
            canned = {"json": json}
        elif text is not None:
            canned = {"text": text}
        else:
            canned = {"content": content or b""}
        canned.update(status_code=status, headers=headers)
        self.routes.setdefault((method.upper(), path), []).append(canned)
        return self

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.clock is not None:
            self.request_times.append(self.clock())
        path = request.url.path.removeprefix("/api")
        queue = self.routes.get((request.method, path))
        if not queue:
            return httpx.Response(404, json={"error": {"code": 404, "message": "Not found"}})
        canned = queue.pop(0) if len(queue) > 1 else queue[0]
        return httpx.Response(**canned)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def bookstack():
    return BookStackStub()


@pytest_asyncio.fixture
async def app_context(settings, bookstack):
    ctx = create_context(
        settings,
        transport=bookstack.transport,
        rate_limiter=RateLimiter(requests_per_minute=6000, burst_limit=100),
    )
    yield ctx
    await ctx.aclose()


@pytest.fixture
def dispatcher(app_context):
    return build_dispatcher(app_context)


def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "integration: drives the MCP server through an in-memory client session")
    config.addinivalue_line("filterwarnings", "ignore:shutdown can only be called once:UserWarning")
