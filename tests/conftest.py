import json

import httpx
import pytest

from es_mcp.engine import EsMcpEngine
from es_mcp.models import EsMcpConfig


class RecordingBackend:
    """Fake Elasticsearch: records requests and answers from a route table."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.routes: dict[tuple[str, str], tuple[int, object]] = {}
        self.error: Exception | None = None

    def route(self, method: str, path: str, json_body=None, status_code: int = 200) -> None:
        self.routes[(method, path)] = (status_code, json_body)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"error": "no route"})
        status_code, json_body = route
        return httpx.Response(status_code, json=json_body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self):
        return json.loads(self.last_request.content)


@pytest.fixture
def backend() -> RecordingBackend:
    return RecordingBackend()


@pytest.fixture
def make_engine(backend):
    """Build an engine whose clients all talk to the fake backend."""

    def _make(**config) -> EsMcpEngine:
        config.setdefault("url", "http://es.local:9200")
        return EsMcpEngine.from_config(
            EsMcpConfig.model_validate(config), transport=backend.transport
        )

    return _make
