# Code generated by protoc-gen-python-rerpc. DO NOT EDIT.
# versions:
# - protoc-gen-python-rerpc v0.1.0
# - protoc                  (unknown)
# source: echo.proto

from __future__ import annotations

import abc
import typing

import rerpc
from google.protobuf import wrappers_pb2 as google_dot_protobuf_dot_wrappers__pb2

__all__ = [
    "EchoClientReRPC",
    "NewEchoClientReRPC",
    "EchoServerReRPC",
    "NewEchoHandlerReRPC",
    "UnimplementedEchoServerReRPC",
]

# This is a compile-time assertion to ensure that this generated file and the
# rerpc package are compatible. If you get an error that this constant isn't
# defined, this code was generated with a version of rerpc newer than the one
# installed. You can fix the problem by either regenerating this code with an
# older version of rerpc or updating the installed rerpc.
_ = rerpc.SUPPORTS_CODEGEN_V0  # requires rerpc v0.1.0 or later


class EchoClientReRPC(typing.Protocol):
    """EchoClientReRPC is a client for the echo.v1.Echo service."""

    # Echo returns the request unchanged.
    def Echo(
        self,
        ctx: rerpc.Context,
        req: google_dot_protobuf_dot_wrappers__pb2.StringValue,
        *opts: rerpc.CallOption,
    ) -> google_dot_protobuf_dot_wrappers__pb2.StringValue: ...

    # Count returns the length of the request.
    def Count(
        self,
        ctx: rerpc.Context,
        req: google_dot_protobuf_dot_wrappers__pb2.StringValue,
        *opts: rerpc.CallOption,
    ) -> google_dot_protobuf_dot_wrappers__pb2.Int64Value: ...


class echoClientReRPC:
    def __init__(
        self,
        echo: rerpc.Client,
        count: rerpc.Client,
    ) -> None:
        self._echo = echo
        self._count = count

    def Echo(
        self,
        ctx: rerpc.Context,
        req: google_dot_protobuf_dot_wrappers__pb2.StringValue,
        *opts: rerpc.CallOption,
    ) -> google_dot_protobuf_dot_wrappers__pb2.StringValue:
        """Echo calls echo.v1.Echo.Echo. Call options passed here apply only to
        this call.
        """
        res = google_dot_protobuf_dot_wrappers__pb2.StringValue()
        self._echo.call(ctx, req, res, *opts)
        return res

    def Count(
        self,
        ctx: rerpc.Context,
        req: google_dot_protobuf_dot_wrappers__pb2.StringValue,
        *opts: rerpc.CallOption,
    ) -> google_dot_protobuf_dot_wrappers__pb2.Int64Value:
        """Count calls echo.v1.Echo.Count. Call options passed here apply only
        to this call.
        """
        res = google_dot_protobuf_dot_wrappers__pb2.Int64Value()
        self._count.call(ctx, req, res, *opts)
        return res


def NewEchoClientReRPC(
    base_url: str, doer: rerpc.Doer, *opts: rerpc.CallOption
) -> EchoClientReRPC:
    """NewEchoClientReRPC constructs a client for the echo.v1.Echo service.
    Call options passed here apply to all calls made with this client.

    The URL supplied here should be the base URL for the reRPC server (e.g.,
    https://api.acme.com or https://acme.com/api/rerpc).
    """
    base_url = base_url.rstrip("/")
    return echoClientReRPC(
        echo=rerpc.Client(
            doer,
            base_url + "/echo.v1.Echo/Echo",  # complete URL to call method
            "echo.v1.Echo.Echo",  # fully-qualified protobuf method
            "echo.v1.Echo",  # fully-qualified protobuf service
            "echo.v1",  # fully-qualified protobuf package
            *opts,
        ),
        count=rerpc.Client(
            doer,
            base_url + "/echo.v1.Echo/Count",  # complete URL to call method
            "echo.v1.Echo.Count",  # fully-qualified protobuf method
            "echo.v1.Echo",  # fully-qualified protobuf service
            "echo.v1",  # fully-qualified protobuf package
            *opts,
        ),
    )


class EchoServerReRPC(abc.ABC):
    """EchoServerReRPC is a server for the echo.v1.Echo service. To make sure
    that adding methods to this protobuf service doesn't break all
    implementations of this interface, all implementations must inherit from
    UnimplementedEchoServerReRPC.

    A class that doesn't can't be instantiated:
    mustEmbedUnimplementedEchoServerReRPC stays abstract.
    """

    # Echo returns the request unchanged.
    @abc.abstractmethod
    def Echo(
        self, ctx: rerpc.Context, req: google_dot_protobuf_dot_wrappers__pb2.StringValue
    ) -> google_dot_protobuf_dot_wrappers__pb2.StringValue: ...

    # Count returns the length of the request.
    @abc.abstractmethod
    def Count(
        self, ctx: rerpc.Context, req: google_dot_protobuf_dot_wrappers__pb2.StringValue
    ) -> google_dot_protobuf_dot_wrappers__pb2.Int64Value: ...

    @abc.abstractmethod
    def mustEmbedUnimplementedEchoServerReRPC(self) -> None: ...


def NewEchoHandlerReRPC(
    svc: EchoServerReRPC, *opts: rerpc.HandlerOption
) -> tuple[str, rerpc.ServeMux]:
    """NewEchoHandlerReRPC wraps the service implementation in an HTTP handler.
    It returns the path on which to mount it and the handler.
    """
    mux = rerpc.ServeMux()

    def _echo(ctx: rerpc.Context, req: rerpc.Message) -> rerpc.Message:
        if not isinstance(req, google_dot_protobuf_dot_wrappers__pb2.StringValue):
            raise rerpc.errorf(
                rerpc.Code.INTERNAL,
                "error in generated code: expected req to be a StringValue, got a %s",
                type(req).__name__,
            )
        return svc.Echo(ctx, req)

    mux.handle(
        "/echo.v1.Echo/Echo",
        rerpc.Handler(
            "echo.v1.Echo.Echo",  # fully-qualified protobuf method
            "echo.v1.Echo",  # fully-qualified protobuf service
            "echo.v1",  # fully-qualified protobuf package
            _echo,
            google_dot_protobuf_dot_wrappers__pb2.StringValue,
            *opts,
        ),
    )

    def _count(ctx: rerpc.Context, req: rerpc.Message) -> rerpc.Message:
        if not isinstance(req, google_dot_protobuf_dot_wrappers__pb2.StringValue):
            raise rerpc.errorf(
                rerpc.Code.INTERNAL,
                "error in generated code: expected req to be a StringValue, got a %s",
                type(req).__name__,
            )
        return svc.Count(ctx, req)

    mux.handle(
        "/echo.v1.Echo/Count",
        rerpc.Handler(
            "echo.v1.Echo.Count",  # fully-qualified protobuf method
            "echo.v1.Echo",  # fully-qualified protobuf service
            "echo.v1",  # fully-qualified protobuf package
            _count,
            google_dot_protobuf_dot_wrappers__pb2.StringValue,
            *opts,
        ),
    )

    return "/echo.v1.Echo/", mux


class UnimplementedEchoServerReRPC(EchoServerReRPC):
    """UnimplementedEchoServerReRPC raises an UNIMPLEMENTED error from all
    methods. To maintain forward compatibility, all implementations of
    EchoServerReRPC must inherit from UnimplementedEchoServerReRPC.
    """

    def Echo(
        self, ctx: rerpc.Context, req: google_dot_protobuf_dot_wrappers__pb2.StringValue
    ) -> google_dot_protobuf_dot_wrappers__pb2.StringValue:
        raise rerpc.errorf(rerpc.Code.UNIMPLEMENTED, "method Echo not implemented")

    def Count(
        self, ctx: rerpc.Context, req: google_dot_protobuf_dot_wrappers__pb2.StringValue
    ) -> google_dot_protobuf_dot_wrappers__pb2.Int64Value:
        raise rerpc.errorf(rerpc.Code.UNIMPLEMENTED, "method Count not implemented")

    def mustEmbedUnimplementedEchoServerReRPC(self) -> None:
        pass


_check_UnimplementedEchoServerReRPC: EchoServerReRPC = UnimplementedEchoServerReRPC()  # verify interface implementation
