"""Container mode: rewrite `localhost` URLs to the container host.

Inside a container, `localhost` is the container itself. The host name that
maps to the machine running the container depends on the OCI runtime, so a
fixed list of well-known aliases is probed in order.
"""

import logging
import socket

import httpx

logger = logging.getLogger(__name__)

CONTAINER_HOST_ALIASES = (
    "host.docker.internal",  # Docker
    "host.containers.internal",  # Podman, maybe others
)


def _resolves(host: str) -> bool:
    try:
        return bool(socket.getaddrinfo(host, 80))
    except (OSError, UnicodeError):
        return False


def rewrite_localhost(url: httpx.URL) -> httpx.URL:
    """Return `url` with a `localhost` host replaced by the first resolvable alias.

    Non-localhost URLs, and localhost URLs with no resolvable alias, are
    returned unchanged.
    """
    if url.host != "localhost":
        return url

    for alias in CONTAINER_HOST_ALIASES:
        if _resolves(alias):
            logger.info(f"Container mode: using '{alias}' instead of 'localhost'")
            return url.copy_with(host=alias)

    logger.warning("Container mode: could not find a replacement for 'localhost'")
    return url
