"""Elasticsearch HTTP client.

`ElasticsearchClient` wraps a single `httpx.AsyncClient` pointed at one
cluster URL. The wrapper carries the effective credentials so that a client
for another user can share the connection pool of the default client.
"""

import base64
import logging
import ssl
from typing import Any
from urllib.parse import quote

import httpx

from .. import __version__
from ..errors import ConfigurationError
from ..models import EsMcpConfig
from .localhost import rewrite_localhost

logger = logging.getLogger(__name__)

USER_AGENT = f"elastic-mcp/{__version__}"

# Backend calls are bounded, but ES|QL and searches can be slow on large clusters
DEFAULT_TIMEOUT = httpx.Timeout(60.0, connect=10.0)


def parse_url(url_str: str) -> httpx.URL:
    """Parse an absolute http(s) URL, raising ValueError if it is not one."""
    try:
        url = httpx.URL(url_str.strip())
    except httpx.InvalidURL as e:
        raise ValueError(f"invalid URL '{url_str}': {e}") from e
    if url.scheme not in ("http", "https") or not url.host:
        raise ValueError(f"invalid URL '{url_str}': expected an absolute http(s) URL")
    return url


def ssl_verify(ssl_skip_verify: bool = False, ca_cert: str | None = None) -> bool | ssl.SSLContext:
    """TLS verification setting for httpx: disabled, a custom CA, or the default.

    Raises:
        OSError: the CA certificate file cannot be read
        ssl.SSLError: the CA certificate file is not a valid certificate
    """
    if ssl_skip_verify:
        return False
    if ca_cert:
        return ssl.create_default_context(cafile=ca_cert)
    return True


def api_key_authorization(api_key: str) -> str:
    return f"ApiKey {api_key}"


def basic_authorization(username: str, password: str) -> str:
    token = base64.b64encode(f"{username}:{password}".encode()).decode("ascii")
    return f"Basic {token}"


class ElasticsearchClient:
    """Elasticsearch REST calls used by the tools.

    Each call returns the awaitable `httpx.Response`; callers pass it through
    `es_mcp.elasticsearch.responses` to map failures to MCP errors.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        *,
        authorization: str | None = None,
        owns_http: bool = True,
    ):
        self._http = http
        self._authorization = authorization
        self._owns_http = owns_http

    @classmethod
    def build(
        cls,
        url: httpx.URL | str,
        *,
        authorization: str | None = None,
        ssl_skip_verify: bool = False,
        ca_cert: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "ElasticsearchClient":
        """Create a client with its own connection pool."""
        headers = {"User-Agent": USER_AGENT}
        if authorization:
            headers["Authorization"] = authorization
        http = httpx.AsyncClient(
            base_url=url,
            headers=headers,
            verify=ssl_verify(ssl_skip_verify, ca_cert),
            timeout=DEFAULT_TIMEOUT,
            transport=transport,
        )
        return cls(http)

    @property
    def url(self) -> str:
        return str(self._http.base_url).rstrip("/")

    @property
    def authorization(self) -> str | None:
        if self._authorization is not None:
            return self._authorization
        return self._http.headers.get("Authorization")

    @property
    def user_agent(self) -> str | None:
        return self._http.headers.get("User-Agent")

    def with_authorization(self, authorization: str) -> "ElasticsearchClient":
        """A client sharing this client's connection pool with other credentials."""
        return ElasticsearchClient(self._http, authorization=authorization, owns_http=False)

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def perform(
        self,
        method: str,
        path: str,
        *,
        body: Any = None,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        headers = {"Accept": "application/json"}
        if self._authorization is not None:
            headers["Authorization"] = self._authorization
        return await self._http.request(method, path, json=body, params=params, headers=headers)

    # ============ ENDPOINTS ============

    async def esql_query(self, query: str, params: list[dict[str, Any]] | None = None) -> httpx.Response:
        body: dict[str, Any] = {"query": query}
        if params:
            body["params"] = params
        return await self.perform("POST", "/_query", body=body, params={"format": "json"})

    async def search(self, index: str, body: dict[str, Any]) -> httpx.Response:
        return await self.perform("POST", f"/{_path(index)}/_search", body=body)

    async def search_template(self, body: dict[str, Any]) -> httpx.Response:
        return await self.perform("POST", "/_search/template", body=body)

    async def cat_indices(self, index_pattern: str) -> httpx.Response:
        return await self.perform(
            "GET",
            f"/_cat/indices/{_path(index_pattern)}",
            params={"format": "json", "h": "index,health,status,docs.count"},
        )

    async def get_mapping(self, index: str) -> httpx.Response:
        return await self.perform("GET", f"/{_path(index)}/_mapping")

    async def cat_shards(self, index: str | None = None) -> httpx.Response:
        path = f"/_cat/shards/{_path(index)}" if index else "/_cat/shards"
        return await self.perform(
            "GET",
            path,
            params={"format": "json", "h": "index,shard,prirep,state,docs,store,node"},
        )


def _path(segment: str) -> str:
    # Index names and patterns may contain '*' and ',' which are valid in paths
    return quote(segment, safe="*,-_.")


def build_default_client(
    config: EsMcpConfig,
    container_mode: bool = False,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ElasticsearchClient:
    """Build the default client from configuration.

    Raises:
        ConfigurationError: missing password, missing or malformed URL
    """
    if config.api_key:
        authorization = api_key_authorization(config.api_key)
    elif config.username:
        if not config.password:
            raise ConfigurationError("missing password")
        authorization = basic_authorization(config.username, config.password)
    else:
        authorization = None

    if config.url is None:
        raise ConfigurationError(
            "Elasticsearch URL is not configured and no default is available"
        )
    if not config.url.strip():
        raise ConfigurationError("Elasticsearch URL is empty")

    try:
        url = parse_url(config.url)
    except ValueError as e:
        raise ConfigurationError(str(e)) from e

    if container_mode:
        url = rewrite_localhost(url)

    logger.info(f"Default Elasticsearch URL: {url}")
    if authorization:
        logger.info("Using configured authentication credentials")
    else:
        logger.info(
            "No default authentication configured (can be provided dynamically via headers)"
        )
    if config.ca_cert and not config.ssl_skip_verify:
        logger.info(f"Verifying Elasticsearch certificates with CA file {config.ca_cert}")

    try:
        return ElasticsearchClient.build(
            url,
            authorization=authorization,
            ssl_skip_verify=config.ssl_skip_verify,
            ca_cert=config.ca_cert,
            transport=transport,
        )
    except (httpx.HTTPError, ValueError, OSError) as e:
        raise ConfigurationError(f"Cannot create Elasticsearch client: {e}") from e
