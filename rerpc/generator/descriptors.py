"""Builds the descriptor model from the FileDescriptorProtos protoc sends."""

import logging
from collections.abc import Iterable

from google.protobuf.descriptor_pb2 import DescriptorProto, FileDescriptorProto

from .types import (
    FileDescriptor,
    MessageRef,
    MethodDescriptor,
    ServiceDescriptor,
    SourceLocation,
    pb2_module,
)

# Field numbers making up SourceCodeInfo paths.
FILE_SERVICE_FIELD = 6
SERVICE_METHOD_FIELD = 2

logger = logging.getLogger(__name__)


def qualify(scope: str, name: str) -> str:
    return f"{scope}.{name}" if scope else name


class TypeIndex:
    """Every message reachable from a request, keyed by full name."""

    def __init__(self) -> None:
        self._refs: dict[str, MessageRef] = {}

    def __contains__(self, full_name: str) -> bool:
        return full_name in self._refs

    def add(self, ref: MessageRef) -> None:
        self._refs[ref.full_name] = ref

    def add_file(self, proto: FileDescriptorProto) -> None:
        module = pb2_module(proto.name)
        for message in proto.message_type:
            self._add_message(message, proto.package, "", module)

    def _add_message(self, message: DescriptorProto, scope: str, py_scope: str, module: str) -> None:
        full_name = qualify(scope, message.name)
        py_name = qualify(py_scope, message.name)
        self.add(MessageRef(full_name=full_name, py_module=module, py_name=py_name))
        for nested in message.nested_type:
            if nested.options.map_entry:
                continue
            self._add_message(nested, full_name, py_name, module)

    def resolve(self, type_name: str, default_module: str) -> MessageRef:
        """Look up a fully-qualified type name such as ".acme.v1.Ping".

        protoc always sends the files a request depends on, so a miss means
        the request is incomplete. Generation goes on with a guess that the
        type lives in default_module.
        """
        full_name = type_name.lstrip(".")
        ref = self._refs.get(full_name)
        if ref is not None:
            return ref

        logger.warning("unknown message type %s, assuming it is defined in %s", full_name, default_module)
        return MessageRef(
            full_name=full_name,
            py_module=default_module,
            py_name=full_name.rsplit(".", 1)[-1],
        )


def _locations(proto: FileDescriptorProto) -> dict[tuple[int, ...], SourceLocation]:
    locations = {}
    for location in proto.source_code_info.location:
        locations[tuple(location.path)] = SourceLocation(
            path=list(location.path),
            span=list(location.span),
            leading_comments=(
                location.leading_comments if location.HasField("leading_comments") else None
            ),
            trailing_comments=(
                location.trailing_comments if location.HasField("trailing_comments") else None
            ),
        )
    return locations


def file_descriptor(proto: FileDescriptorProto, index: TypeIndex) -> FileDescriptor:
    """Convert one FileDescriptorProto. Options left unset read as defaults."""
    module = pb2_module(proto.name)
    locations = _locations(proto)
    services = []

    for s, service in enumerate(proto.service):
        service_name = qualify(proto.package, service.name)
        methods = [
            MethodDescriptor(
                name=method.name,
                full_name=f"{service_name}.{method.name}",
                input=index.resolve(method.input_type, module),
                output=index.resolve(method.output_type, module),
                client_streaming=method.client_streaming,
                server_streaming=method.server_streaming,
                deprecated=method.options.deprecated,
                location=locations.get((FILE_SERVICE_FIELD, s, SERVICE_METHOD_FIELD, m)),
            )
            for m, method in enumerate(service.method)
        ]
        services.append(
            ServiceDescriptor(
                name=service.name,
                full_name=service_name,
                package=proto.package,
                methods=methods,
                deprecated=service.options.deprecated,
                location=locations.get((FILE_SERVICE_FIELD, s)),
            )
        )

    return FileDescriptor(
        path=proto.name,
        package=proto.package,
        services=services,
        deprecated=proto.options.deprecated,
    )


def build_files(protos: Iterable[FileDescriptorProto], names: Iterable[str]) -> list[FileDescriptor]:
    """Build descriptors for the named files, resolving types across all protos."""
    protos = list(protos)
    index = TypeIndex()
    for proto in protos:
        index.add_file(proto)

    by_name = {proto.name: proto for proto in protos}
    return [file_descriptor(by_name[name], index) for name in names]
