"""Error codes and the error type shared by reRPC clients and handlers."""

import json
from enum import IntEnum
from typing import Self


class Code(IntEnum):
    """RPC status codes. The numbering matches gRPC."""

    OK = 0
    CANCELED = 1
    UNKNOWN = 2
    INVALID_ARGUMENT = 3
    DEADLINE_EXCEEDED = 4
    NOT_FOUND = 5
    ALREADY_EXISTS = 6
    PERMISSION_DENIED = 7
    RESOURCE_EXHAUSTED = 8
    FAILED_PRECONDITION = 9
    ABORTED = 10
    OUT_OF_RANGE = 11
    UNIMPLEMENTED = 12
    INTERNAL = 13
    UNAVAILABLE = 14
    DATA_LOSS = 15
    UNAUTHENTICATED = 16

    @property
    def wire_name(self) -> str:
        """Name used in JSON error bodies, e.g. "deadline_exceeded"."""
        return self.name.lower()

    @property
    def http_status(self) -> int:
        """HTTP status a handler responds with for this code."""
        return _HTTP_STATUS[self]

    @classmethod
    def from_wire_name(cls, name: str) -> "Code":
        """Parse a JSON error code name. Unknown names map to UNKNOWN."""
        try:
            return cls[name.upper()]
        except KeyError:
            return cls.UNKNOWN

    @classmethod
    def from_http_status(cls, status: int) -> "Code":
        """Infer a code from a bare HTTP status (no error body)."""
        return _STATUS_CODE.get(status, cls.UNKNOWN)


_HTTP_STATUS = {
    Code.OK: 200,
    Code.CANCELED: 499,
    Code.UNKNOWN: 500,
    Code.INVALID_ARGUMENT: 400,
    Code.DEADLINE_EXCEEDED: 504,
    Code.NOT_FOUND: 404,
    Code.ALREADY_EXISTS: 409,
    Code.PERMISSION_DENIED: 403,
    Code.RESOURCE_EXHAUSTED: 429,
    Code.FAILED_PRECONDITION: 400,
    Code.ABORTED: 409,
    Code.OUT_OF_RANGE: 400,
    Code.UNIMPLEMENTED: 501,
    Code.INTERNAL: 500,
    Code.UNAVAILABLE: 503,
    Code.DATA_LOSS: 500,
    Code.UNAUTHENTICATED: 401,
}

# Same fallback table gRPC clients use for responses without an error body.
_STATUS_CODE = {
    400: Code.INTERNAL,
    401: Code.UNAUTHENTICATED,
    403: Code.PERMISSION_DENIED,
    404: Code.UNIMPLEMENTED,
    429: Code.UNAVAILABLE,
    502: Code.UNAVAILABLE,
    503: Code.UNAVAILABLE,
    504: Code.UNAVAILABLE,
}


class Error(RuntimeError):
    """Raised by clients, handlers and generated code for any failed RPC."""

    def __init__(self, code: Code, message: str = "") -> None:
        super().__init__(f"{code.wire_name}: {message}" if message else code.wire_name)
        self.code = code
        self.message = message

    def to_json(self) -> bytes:
        """Encode the error as the JSON body a handler writes."""
        return json.dumps({"code": self.code.wire_name, "message": self.message}).encode("utf-8")

    @classmethod
    def from_response(cls, status: int, body: bytes) -> Self:
        """Decode the error carried by a non-200 response."""
        try:
            data = json.loads(body)
        except ValueError:
            data = None

        if isinstance(data, dict) and isinstance(data.get("code"), str):
            return cls(Code.from_wire_name(data["code"]), str(data.get("message", "")))

        return cls(Code.from_http_status(status), f"HTTP status {status}")


def errorf(code: Code, template: str, *args: object) -> Error:
    """Build an Error, %-formatting the message when arguments are given."""
    return Error(code, template % args if args else template)
