"""Elasticsearch access: clients, per-request resolution and response mapping."""

from .client import USER_AGENT, ElasticsearchClient, build_default_client, parse_url
from .localhost import rewrite_localhost
from .provider import EffectiveClient, EsClientProvider, fix_authorization
from .responses import handle_error, read_json, read_text

__all__ = [
    "USER_AGENT",
    "ElasticsearchClient",
    "build_default_client",
    "parse_url",
    "rewrite_localhost",
    "EffectiveClient",
    "EsClientProvider",
    "fix_authorization",
    "handle_error",
    "read_json",
    "read_text",
]
