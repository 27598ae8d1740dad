import ssl

import httpx
import pytest
from starlette.datastructures import Headers

from es_mcp.elasticsearch import EsClientProvider, fix_authorization
from es_mcp.elasticsearch import client as client_module
from es_mcp.elasticsearch.client import ElasticsearchClient
from es_mcp.elasticsearch.provider import EffectiveClient


@pytest.fixture
def default_client() -> ElasticsearchClient:
    return ElasticsearchClient.build("http://default:9200", authorization="ApiKey default")


@pytest.fixture
def provider(default_client) -> EsClientProvider:
    return EsClientProvider(default_client, ssl_skip_verify=True)


# ============ AUTHORIZATION FIX-UP ============


@pytest.mark.parametrize(
    "value,expected",
    [
        ("Bearer ApiKey abc==", "ApiKey abc=="),
        ("Bearer Basic ZWxhc3RpYzpwd2Q=", "Basic ZWxhc3RpYzpwd2Q="),
        ("Bearer token", "Bearer token"),
        ("ApiKey abc", "ApiKey abc"),
        ("Basic abc", "Basic abc"),
        ("Bearer ApiKeyabc", "Bearer ApiKeyabc"),
        ("bearer ApiKey abc", "bearer ApiKey abc"),
    ],
)
def test_fix_authorization(value, expected):
    assert fix_authorization(value) == expected


# ============ RESOLUTION ============


@pytest.mark.parametrize("headers", [None, {}, {"Content-Type": "application/json"}])
def test_no_override_returns_default_client(provider, default_client, headers):
    effective = provider.resolve(headers)
    assert effective.client is default_client
    assert effective.owned is False


def test_url_override(provider):
    effective = provider.resolve({"X-Elasticsearch-URL": "https://other.example.com:9243"})
    assert effective.owned is True
    assert effective.client.url == "https://other.example.com:9243"
    # Credentials of the default client are not carried to another cluster
    assert effective.client.authorization is None


def test_url_and_authorization_override(provider):
    effective = provider.resolve(
        {"x-elasticsearch-url": "http://other:9200", "authorization": "Bearer ApiKey xyz"}
    )
    assert effective.client.url == "http://other:9200"
    assert effective.client.authorization == "ApiKey xyz"


def test_url_override_inherits_user_agent(provider, default_client):
    effective = provider.resolve({"X-Elasticsearch-URL": "http://other:9200"})
    assert effective.client.user_agent == default_client.user_agent


def test_authorization_only_override(provider, default_client):
    effective = provider.resolve({"Authorization": "Basic abc"})
    assert effective.owned is True
    assert effective.client is not default_client
    assert effective.client.url == default_client.url
    assert effective.client.authorization == "Basic abc"
    # The default client is untouched
    assert default_client.authorization == "ApiKey default"


@pytest.mark.parametrize("bad_url", ["not a url", "ftp://other:21", "http://"])
def test_invalid_url_falls_back_to_authorization(provider, default_client, bad_url):
    effective = provider.resolve({"X-Elasticsearch-URL": bad_url, "Authorization": "ApiKey k"})
    assert effective.client.url == default_client.url
    assert effective.client.authorization == "ApiKey k"


def test_invalid_url_without_authorization_falls_back_to_default(provider, default_client, caplog):
    effective = provider.resolve({"X-Elasticsearch-URL": "not a url"})
    assert effective.client is default_client
    assert effective.owned is False
    assert "Falling back to default configuration" in caplog.text


def test_client_construction_failure_falls_back(provider, default_client, monkeypatch):
    def fail(*args, **kwargs):
        raise OSError("cannot load certificates")

    monkeypatch.setattr(ElasticsearchClient, "build", fail)
    effective = provider.resolve({"X-Elasticsearch-URL": "http://other:9200"})
    assert effective.client is default_client


def test_starlette_request_headers(provider):
    headers = Headers(
        raw=[
            (b"x-elasticsearch-url", b"http://other:9200"),
            (b"x-user-note", "café".encode("utf-8")),
        ]
    )
    effective = provider.resolve(headers)
    assert effective.client.url == "http://other:9200"


def test_non_ascii_unrelated_header_is_ignored(provider, default_client):
    effective = provider.resolve({"x-user-note": "cafÃ©"})
    assert effective.client is default_client
    assert effective.owned is False


@pytest.mark.parametrize("name", ["X-Elasticsearch-URL", "Authorization"])
def test_non_ascii_override_is_ignored(provider, default_client, caplog, name):
    effective = provider.resolve({name: "ApiKey cafÃ©"})
    assert effective.client is default_client
    assert f"Ignoring {name} header" in caplog.text


def test_url_override_inherits_ca_cert(default_client, monkeypatch):
    context = ssl.create_default_context()
    cafiles = []

    def create_default_context(cafile=None):
        cafiles.append(cafile)
        return context

    monkeypatch.setattr(client_module.ssl, "create_default_context", create_default_context)
    provider = EsClientProvider(default_client, ca_cert="/certs/ca.pem")

    effective = provider.resolve({"X-Elasticsearch-URL": "https://other:9200"})
    assert effective.owned is True
    assert effective.client.url == "https://other:9200"
    assert cafiles == ["/certs/ca.pem"]


def test_unreadable_ca_cert_falls_back(default_client, tmp_path):
    provider = EsClientProvider(default_client, ca_cert=str(tmp_path / "missing.pem"))
    effective = provider.resolve({"X-Elasticsearch-URL": "https://other:9200"})
    assert effective.client is default_client


# ============ LIFECYCLE ============


@pytest.mark.asyncio
async def test_owned_client_is_closed_after_use(provider):
    async with provider.resolve({"X-Elasticsearch-URL": "http://other:9200"}) as client:
        pass
    assert client._http.is_closed


@pytest.mark.asyncio
async def test_shared_pool_is_not_closed(provider, default_client):
    async with provider.resolve({"Authorization": "ApiKey k"}) as client:
        assert client is not default_client
    async with provider.resolve(None) as client:
        assert client is default_client
    assert not default_client._http.is_closed


@pytest.mark.asyncio
async def test_override_client_sends_to_override_url():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={})

    transport = httpx.MockTransport(handler)
    default = ElasticsearchClient.build("http://default:9200", transport=transport)
    provider = EsClientProvider(default, transport=transport)

    async with provider.resolve(
        {"X-Elasticsearch-URL": "http://other:9200", "Authorization": "Bearer Basic abc"}
    ) as client:
        await client.cat_shards()

    assert seen[0].url.host == "other"
    assert seen[0].headers["Authorization"] == "Basic abc"


def test_effective_client_defaults_to_shared(default_client):
    assert EffectiveClient(default_client).owned is False
