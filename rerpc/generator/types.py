"""Descriptor model consumed by the stub generator, and its output types."""

from dataclasses import dataclass, field

from dataclasses_json import DataClassJsonMixin

__all__ = [
    "pb2_module",
    "SourceLocation",
    "MessageRef",
    "MethodDescriptor",
    "ServiceDescriptor",
    "FileDescriptor",
    "CompilerVersion",
    "Annotation",
    "GeneratedFile",
]


def pb2_module(path: str) -> str:
    """Module --python_out generates for a .proto path: "a/b/c.proto" -> "a.b.c_pb2"."""
    return path.removesuffix(".proto").replace("-", "_").replace("/", ".") + "_pb2"


@dataclass
class SourceLocation(DataClassJsonMixin):
    """Where a descriptor was declared in its .proto file.

    path and span follow google.protobuf.SourceCodeInfo.Location: path is the
    field-number path to the element (e.g. [6, 0, 2, 1] for the second method
    of the first service), span is [start_line, start_col, end_line, end_col]
    or [start_line, start_col, end_col], zero-based.
    """

    path: list[int]
    span: list[int] = field(default_factory=list)
    leading_comments: str | None = None
    trailing_comments: str | None = None


@dataclass
class MessageRef(DataClassJsonMixin):
    """Reference to a protobuf message class generated by --python_out."""

    full_name: str
    py_module: str
    py_name: str


@dataclass
class MethodDescriptor(DataClassJsonMixin):
    """A single RPC of a service."""

    name: str
    full_name: str
    input: MessageRef
    output: MessageRef
    client_streaming: bool = False
    server_streaming: bool = False
    deprecated: bool = False
    location: SourceLocation | None = None


@dataclass
class ServiceDescriptor(DataClassJsonMixin):
    """A service and its methods, in declaration order."""

    name: str
    full_name: str
    package: str
    methods: list[MethodDescriptor]
    deprecated: bool = False
    location: SourceLocation | None = None


@dataclass
class FileDescriptor(DataClassJsonMixin):
    """One .proto document and the services it declares."""

    path: str
    package: str
    services: list[ServiceDescriptor]
    deprecated: bool = False

    @property
    def py_module(self) -> str:
        return pb2_module(self.path)

    @property
    def output_name(self) -> str:
        """Name of the generated stub file, e.g. "a/b/c_rerpc.py"."""
        return self.path.removesuffix(".proto").replace("-", "_") + "_rerpc.py"


@dataclass
class CompilerVersion(DataClassJsonMixin):
    """Version of the protoc that invoked the plugin."""

    major: int
    minor: int
    patch: int
    suffix: str = ""

    def __str__(self) -> str:
        out = f"v{self.major}.{self.minor}.{self.patch}"
        if self.suffix:
            out += f"-{self.suffix}"
        return out


@dataclass
class Annotation(DataClassJsonMixin):
    """Links a generated symbol to the descriptor it came from.

    begin and end are UTF-8 byte offsets of the identifier in the generated
    file; path and source_file identify the originating declaration.
    """

    symbol: str
    path: list[int]
    source_file: str
    begin: int
    end: int


@dataclass
class GeneratedFile(DataClassJsonMixin):
    """A rendered stub module."""

    name: str
    content: str
    annotations: list[Annotation] = field(default_factory=list)
