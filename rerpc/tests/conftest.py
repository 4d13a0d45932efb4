"""Unit tests configuration file."""

from pathlib import Path

import pytest
from google.protobuf import empty_pb2
from google.protobuf.descriptor_pb2 import FileDescriptorProto

PROTOS_DIR = Path(__file__).parent / "generator" / "protos"


def pytest_configure(config):
    """Disable verbose output when running tests."""
    terminal = config.pluginmanager.getplugin("terminal")
    if terminal:
        terminal.TerminalReporter.showfspath = False


@pytest.fixture
def protos_dir():
    """Directory holding the .proto files the generator tests read."""
    return PROTOS_DIR


@pytest.fixture
def greeter_proto():
    """FileDescriptorProto for a small service, as protoc would send it."""

    proto = FileDescriptorProto(
        name="acme/greeter/v1/greeter.proto",
        package="acme.greeter.v1",
        dependency=["google/protobuf/empty.proto"],
        syntax="proto3",
    )
    request = proto.message_type.add(name="GreetRequest")
    request.nested_type.add(name="Honorific")
    entry = request.nested_type.add(name="LabelsEntry")
    entry.options.map_entry = True
    proto.message_type.add(name="GreetReply")

    service = proto.service.add(name="Greeter")
    service.method.add(
        name="Greet",
        input_type=".acme.greeter.v1.GreetRequest",
        output_type=".acme.greeter.v1.GreetReply",
    )
    service.method.add(
        name="Chat",
        input_type=".acme.greeter.v1.GreetRequest",
        output_type=".acme.greeter.v1.GreetReply",
        server_streaming=True,
    )
    shout = service.method.add(
        name="Shout",
        input_type=".acme.greeter.v1.GreetRequest.Honorific",
        output_type=".google.protobuf.Empty",
    )
    shout.options.deprecated = True

    location = proto.source_code_info.location.add(path=[6, 0], span=[9, 0, 20, 1])
    location.leading_comments = " Greeter says hello.\n"
    location = proto.source_code_info.location.add(path=[6, 0, 2, 0], span=[11, 2, 47])
    location.leading_comments = " Greet greets.\n Twice.\n"
    location.trailing_comments = " unary\n"
    return proto


@pytest.fixture
def empty_proto():
    """FileDescriptorProto of google/protobuf/empty.proto."""
    proto = FileDescriptorProto()
    empty_pb2.DESCRIPTOR.CopyToProto(proto)
    return proto
