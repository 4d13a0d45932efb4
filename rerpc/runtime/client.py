"""Client side of a single unary RPC."""

import logging
from collections.abc import Mapping
from typing import Any, Protocol

import httpx
from google.protobuf.message import DecodeError, Message

from .errors import Code, Error
from .options import CallConfig, CallOption, Context

CONTENT_TYPE = "application/proto"
TIMEOUT_HEADER = "Rerpc-Timeout-Ms"

logger = logging.getLogger(__name__)


class Doer(Protocol):
    """Anything that can POST a request the way httpx.Client does."""

    def post(
        self,
        url: str,
        *,
        content: bytes,
        headers: Mapping[str, str],
        timeout: Any,
    ) -> httpx.Response: ...


class Client:
    """Calls one procedure. Generated clients hold one of these per method.

    Options passed to the constructor apply to every call; options passed to
    call() apply to that call only and are applied last.
    """

    def __init__(
        self,
        doer: Doer,
        url: str,
        method: str,
        service: str,
        package: str,
        *opts: CallOption,
    ) -> None:
        self.url = url
        self.method = method
        self.service = service
        self.package = package
        self._doer = doer
        self._opts = opts

    def call(self, ctx: Context, req: Message, res: Message, *opts: CallOption) -> None:
        """Send req and merge the response into res. Raises Error on failure."""
        config = CallConfig()
        for opt in (*self._opts, *opts):
            opt(config)

        timeout = ctx.timeout if ctx.timeout is not None else config.timeout
        headers = {"Content-Type": CONTENT_TYPE, "Accept": CONTENT_TYPE}
        headers.update(config.headers)
        headers.update(ctx.headers)
        if timeout is not None:
            headers[TIMEOUT_HEADER] = str(max(1, int(timeout * 1000)))

        logger.debug("calling %s at %s", self.method, self.url)
        try:
            response = self._doer.post(
                self.url,
                content=req.SerializeToString(),
                headers=headers,
                timeout=timeout if timeout is not None else httpx.USE_CLIENT_DEFAULT,
            )
        except httpx.TimeoutException as exc:
            raise Error(Code.DEADLINE_EXCEEDED, str(exc)) from exc
        except httpx.TransportError as exc:
            raise Error(Code.UNAVAILABLE, str(exc)) from exc

        if response.status_code != 200:
            raise Error.from_response(response.status_code, response.content)

        try:
            res.ParseFromString(response.content)
        except DecodeError as exc:
            raise Error(Code.INTERNAL, f"unmarshal {self.method} response: {exc}") from exc
