import sys
from pathlib import Path
from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient

sys.path.append(str(Path(__file__).resolve().parents[1]))

from insta_scheduler.config import Settings  # noqa: E402
from insta_scheduler.graph_client import GraphClient  # noqa: E402
from insta_scheduler.main import create_app  # noqa: E402
from insta_scheduler.store import JsonStore  # noqa: E402

UNSUPPORTED = {
    "error": {
        "message": "Unsupported get request.",
        "type": "GraphMethodException",
        "code": 100,
    }
}


class FakeGraph:
    """Graph API stand-in keyed by (path, fields or grant_type, access_token)."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str | None, str | None], tuple[int, Any]] = {}
        self.calls: list[tuple[str, dict[str, str]]] = []

    def add(
        self,
        path: str,
        body: Any,
        selector: str | None = None,
        token: str | None = None,
        status: int = 200,
    ) -> None:
        self.routes[(path, selector, token)] = (status, body)

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.split("/", 2)[2]
        params = dict(request.url.params)
        self.calls.append((path, params))
        selector = params.get("fields") or params.get("grant_type")
        for key in ((path, selector, params.get("access_token")), (path, selector, None)):
            if key in self.routes:
                status, body = self.routes[key]
                return httpx.Response(status, json=body)
        return httpx.Response(400, json=UNSUPPORTED)

    def client(self) -> GraphClient:
        return GraphClient("v17.0", transport=httpx.MockTransport(self.handler))

    def paths(self) -> list[str]:
        return [path for path, _ in self.calls]


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        fb_app_id="app-123",
        fb_app_secret="secret-456",
        cors_origin="http://localhost:3000",
        data_dir=tmp_path,
    )


@pytest.fixture
def store(settings: Settings) -> JsonStore:
    return JsonStore(settings.accounts_path, settings.schedule_path)


@pytest.fixture
def graph() -> FakeGraph:
    fake = FakeGraph()
    fake.add("oauth/access_token", {"access_token": "short-token", "token_type": "bearer"})
    fake.add(
        "oauth/access_token",
        {"access_token": "long-lived-token", "token_type": "bearer", "expires_in": 5183944},
        selector="fb_exchange_token",
    )
    return fake


@pytest.fixture
def client(settings: Settings, graph: FakeGraph):
    app = create_app(settings, graph_client_factory=graph.client)
    with TestClient(app) as test_client:
        yield test_client
