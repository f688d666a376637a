"""Categorical inference for server_type and hosting_type from type hints."""

from typing import Any, Iterable

from registry_loader.models.row import HostingType, ServerType

# Hints that mean the server runs locally over stdio; matched as whole hints
_LOCAL_HINTS = frozenset({"LOCAL", "LOCAL_STDIO", "STDIO"})

# Hint substring -> server type, checked in order after the local hints;
# first match wins.
_SERVER_TYPE_MAP: list[tuple[tuple[str, ...], ServerType]] = [
    (("HTTP_SSE", "REMOTE_HTTP", "STREAMABLE", "HTTP_STREAM"), ServerType.HTTP_STREAM),
    (("SSE",), ServerType.SSE),
]

# Unrecognized or missing hints
DEFAULT_SERVER_TYPE = ServerType.LOCAL

_FIRST_PARTY_MARKERS: tuple[str, ...] = (
    "REMOTE_HTTP",
    "SANDBOXED",
    "DOCKER",
    "OMNI",
    "FIRST_PARTY",
    "STREAMABLE",
)


def type_hints(decoded: Any) -> list[str]:
    """Normalize a decoded hint value to a list of upper-case strings."""
    if decoded is None:
        return []
    if isinstance(decoded, str):
        decoded = [decoded]
    if not isinstance(decoded, (list, tuple)):
        return []
    return [h.strip().upper() for h in decoded if isinstance(h, str) and h.strip()]


def _any_contains(hints: Iterable[str], markers: tuple[str, ...]) -> bool:
    return any(marker in hint for hint in hints for marker in markers)


def infer_server_type(hints: list[str]) -> ServerType:
    """Map type hints to a server_type, local first, then streaming, then SSE."""
    # A record that can run locally stays LOCAL even when it also advertises remote transports
    if any(hint in _LOCAL_HINTS for hint in hints):
        return ServerType.LOCAL
    for markers, server_type in _SERVER_TYPE_MAP:
        if _any_contains(hints, markers):
            return server_type
    return DEFAULT_SERVER_TYPE


def infer_hosting_type(hints: list[str]) -> HostingType:
    """FIRST_PARTY_HOSTED when any hint implies remote, sandboxed or managed execution."""
    if _any_contains(hints, _FIRST_PARTY_MARKERS):
        return HostingType.FIRST_PARTY_HOSTED
    return HostingType.EXTERNAL
