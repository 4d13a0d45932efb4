"""Per-call context and the options accepted by clients and handlers."""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field

DEFAULT_READ_MAX_BYTES = 4 * 1024 * 1024


@dataclass
class Context:
    """Request-scoped values passed to every RPC.

    On the client side, timeout (seconds) and headers apply to the outgoing
    request. On the server side, handlers fill them in from the incoming one.
    """

    timeout: float | None = None
    headers: dict[str, str] = field(default_factory=dict)


@dataclass
class CallConfig:
    """Settings a client call is made with, after applying CallOptions."""

    timeout: float | None = None
    headers: dict[str, str] = field(default_factory=dict)


@dataclass
class HandlerConfig:
    """Settings a handler serves with, after applying HandlerOptions."""

    read_max_bytes: int = DEFAULT_READ_MAX_BYTES


CallOption = Callable[[CallConfig], None]
HandlerOption = Callable[[HandlerConfig], None]


def with_timeout(seconds: float) -> CallOption:
    """Bound the duration of each call."""

    def apply(config: CallConfig) -> None:
        config.timeout = seconds

    return apply


def with_headers(headers: Mapping[str, str]) -> CallOption:
    """Send extra HTTP headers with each call."""

    def apply(config: CallConfig) -> None:
        config.headers.update(headers)

    return apply


def with_read_max_bytes(limit: int) -> HandlerOption:
    """Reject request bodies larger than limit bytes."""
    if limit <= 0:
        raise ValueError(f"read limit must be positive, got {limit}")

    def apply(config: HandlerConfig) -> None:
        config.read_max_bytes = limit

    return apply
