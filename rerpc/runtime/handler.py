"""Server side: per-procedure handlers and a WSGI router to mount them."""

import logging
from collections.abc import Callable, Iterable
from http import HTTPStatus
from typing import Any

from google.protobuf.message import DecodeError, Message

from .client import CONTENT_TYPE, TIMEOUT_HEADER
from .errors import Code, Error
from .options import Context, HandlerConfig, HandlerOption

UnaryImplementation = Callable[[Context, Message], Message]

logger = logging.getLogger(__name__)

_Response = tuple[int, list[tuple[str, str]], bytes]


def _error_response(err: Error, status: int | None = None) -> _Response:
    body = err.to_json()
    headers = [("Content-Type", "application/json"), ("Content-Length", str(len(body)))]
    return (status or err.code.http_status, headers, body)


def _status_line(status: int) -> str:
    try:
        phrase = HTTPStatus(status).phrase
    except ValueError:
        phrase = "Unknown"
    return f"{int(status)} {phrase}"


def _request_headers(environ: dict[str, Any]) -> dict[str, str]:
    headers = {}
    for key, value in environ.items():
        if key.startswith("HTTP_"):
            headers[key[5:].replace("_", "-").title()] = value
    if environ.get("CONTENT_TYPE"):
        headers["Content-Type"] = environ["CONTENT_TYPE"]
    return headers


def _request_timeout(headers: dict[str, str]) -> float | None:
    raw = headers.get(TIMEOUT_HEADER)
    if raw is None:
        return None
    try:
        return int(raw) / 1000
    except ValueError as exc:
        raise Error(Code.INVALID_ARGUMENT, f"invalid {TIMEOUT_HEADER} header {raw!r}") from exc


class Handler:
    """Serves one procedure by delegating to a unary implementation.

    request_type is the message class request bodies are decoded into before
    the implementation sees them.
    """

    def __init__(
        self,
        method: str,
        service: str,
        package: str,
        implementation: UnaryImplementation,
        request_type: type[Message],
        *opts: HandlerOption,
    ) -> None:
        self.method = method
        self.service = service
        self.package = package
        self.request_type = request_type
        self.config = HandlerConfig()
        for opt in opts:
            opt(self.config)
        self._implementation = implementation

    def call(self, ctx: Context, req: Message) -> Message:
        """Run the implementation. Anything other than an Error becomes UNKNOWN."""
        try:
            return self._implementation(ctx, req)
        except Error:
            raise
        except Exception as exc:
            logger.exception("%s raised an unexpected error", self.method)
            raise Error(Code.UNKNOWN, str(exc)) from exc

    def serve(self, environ: dict[str, Any]) -> _Response:
        """Handle one WSGI request, returning (status, headers, body)."""
        if environ.get("REQUEST_METHOD", "GET") != "POST":
            status, headers, body = _error_response(
                Error(Code.UNIMPLEMENTED, f"{self.method} only accepts POST"),
                HTTPStatus.METHOD_NOT_ALLOWED,
            )
            headers.append(("Allow", "POST"))
            return status, headers, body

        content_type = environ.get("CONTENT_TYPE", "").split(";")[0].strip()
        if content_type != CONTENT_TYPE:
            return _error_response(
                Error(Code.INVALID_ARGUMENT, f"unsupported content type {content_type!r}"),
                HTTPStatus.UNSUPPORTED_MEDIA_TYPE,
            )

        raw_length = environ.get("CONTENT_LENGTH") or "0"
        try:
            length = int(raw_length)
        except ValueError:
            length = -1
        if length < 0:
            return _error_response(
                Error(Code.INVALID_ARGUMENT, f"invalid Content-Length {raw_length!r}"),
                HTTPStatus.BAD_REQUEST,
            )
        if length > self.config.read_max_bytes:
            return _error_response(
                Error(
                    Code.RESOURCE_EXHAUSTED,
                    f"request size {length} exceeds limit {self.config.read_max_bytes}",
                ),
                HTTPStatus.REQUEST_ENTITY_TOO_LARGE,
            )

        payload = environ["wsgi.input"].read(length) if length else b""
        try:
            headers = _request_headers(environ)
            ctx = Context(timeout=_request_timeout(headers), headers=headers)
            req = self.request_type()
            try:
                req.ParseFromString(payload)
            except DecodeError as exc:
                raise Error(Code.INVALID_ARGUMENT, f"unmarshal {self.method} request: {exc}") from exc
            res = self.call(ctx, req)
            if not isinstance(res, Message):
                raise Error(
                    Code.INTERNAL,
                    f"{self.method} returned {type(res).__name__}, not a message",
                )
        except Error as err:
            logger.debug("%s failed: %s", self.method, err)
            return _error_response(err)

        body = res.SerializeToString()
        return (
            HTTPStatus.OK,
            [("Content-Type", CONTENT_TYPE), ("Content-Length", str(len(body)))],
            body,
        )


class ServeMux:
    """Routes requests to handlers by exact path. A WSGI application.

    The lookup path is SCRIPT_NAME + PATH_INFO, so the mux keeps working when a
    parent application strips its mount prefix.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, Handler] = {}

    def handle(self, path: str, handler: Handler) -> None:
        if path in self._handlers:
            raise ValueError(f"multiple registrations for {path}")
        self._handlers[path] = handler

    def lookup(self, path: str) -> Handler | None:
        return self._handlers.get(path)

    def paths(self) -> list[str]:
        """Registered paths, in registration order."""
        return list(self._handlers)

    def __call__(
        self, environ: dict[str, Any], start_response: Callable[..., Any]
    ) -> Iterable[bytes]:
        path = environ.get("SCRIPT_NAME", "") + environ.get("PATH_INFO", "")
        handler = self._handlers.get(path)
        if handler is None:
            status, headers, body = _error_response(
                Error(Code.NOT_FOUND, f"no handler for {path}"), HTTPStatus.NOT_FOUND
            )
        else:
            status, headers, body = handler.serve(environ)

        start_response(_status_line(status), headers)
        return [body]
