"""Per-request Elasticsearch client resolution.

An MCP HTTP request can target another cluster, or another user, with two
headers:
- X-Elasticsearch-URL: URL of the cluster to use for this request
- Authorization: credentials to use for this request

Requests without these headers use the default client built at startup.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass

import httpx

from .client import ElasticsearchClient, parse_url

logger = logging.getLogger(__name__)

URL_HEADER = "X-Elasticsearch-URL"
AUTHORIZATION_HEADER = "Authorization"

# Some MCP clients (e.g. the MCP inspector) only send bearer tokens and
# prepend "Bearer " to the value provided by the user.
_BEARER_PREFIXED = ("Bearer ApiKey ", "Bearer Basic ")


def fix_authorization(value: str) -> str:
    """Strip a spurious "Bearer " prefix from ApiKey and Basic credentials."""
    if value.startswith(_BEARER_PREFIXED):
        return value[len("Bearer ") :]
    return value


def _header(headers: Mapping[str, str] | None, name: str) -> str | None:
    """Case-insensitive lookup of an override header.

    Other headers are left alone. A value that cannot be sent on to
    Elasticsearch (not ASCII) is ignored.
    """
    if not headers:
        return None
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() != wanted or not value:
            continue
        if not value.isascii():
            logger.warning(f"Ignoring {name} header: value is not ASCII")
            return None
        return value
    return None


@dataclass(frozen=True)
class EffectiveClient:
    """The client to use for one request.

    Either the shared default client (`owned=False`) or a client created for
    this request only (`owned=True`), closed when the request scope ends:

        async with provider.resolve(headers) as client:
            ...
    """

    client: ElasticsearchClient
    owned: bool = False

    async def aclose(self) -> None:
        if self.owned:
            await self.client.aclose()

    async def __aenter__(self) -> ElasticsearchClient:
        return self.client

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


class EsClientProvider:
    """Provides a client configured for a given request (credentials and URL)."""

    def __init__(
        self,
        client: ElasticsearchClient,
        ssl_skip_verify: bool = False,
        ca_cert: str | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._client = client
        # TLS settings of the default client, inherited by URL override clients
        self._ssl_skip_verify = ssl_skip_verify
        self._ca_cert = ca_cert
        # Only set in tests, to route override clients to a mock transport
        self._transport = transport

    @property
    def default(self) -> ElasticsearchClient:
        return self._client

    @property
    def ssl_skip_verify(self) -> bool:
        return self._ssl_skip_verify

    def resolve(self, headers: Mapping[str, str] | None = None) -> EffectiveClient:
        """Return the client to use for a request with these transport headers.

        Never raises: a malformed URL override falls back to the authorization
        override, if any, and then to the default client.
        """
        custom_url = _header(headers, URL_HEADER)
        auth = _header(headers, AUTHORIZATION_HEADER)

        if custom_url is None and auth is None:
            logger.debug("Using default Elasticsearch client configuration")
            return EffectiveClient(self._client)

        logger.debug(
            f"Dynamic configuration detected: custom_url={custom_url is not None}, "
            f"has_auth={auth is not None}"
        )

        if auth is not None:
            auth = fix_authorization(auth)

        if custom_url is not None:
            try:
                client = self._build_client_with_url(custom_url, auth)
            except (ValueError, httpx.HTTPError, OSError) as e:
                logger.error(
                    f"Failed to create client with custom URL '{custom_url}': {e}. "
                    "Falling back to default configuration."
                )
            else:
                logger.info(f"Using dynamic Elasticsearch URL: {custom_url}")
                return EffectiveClient(client, owned=True)

        if auth is not None:
            logger.debug("Using dynamic authentication with default URL")
            return EffectiveClient(self._client.with_authorization(auth), owned=True)

        return EffectiveClient(self._client)

    def _build_client_with_url(self, url_str: str, auth: str | None) -> ElasticsearchClient:
        url = parse_url(url_str)
        return ElasticsearchClient.build(
            url,
            authorization=auth,
            ssl_skip_verify=self._ssl_skip_verify,
            ca_cert=self._ca_cert,
            transport=self._transport,
        )
