"""Standalone .proto reader using Lark, for generating stubs without protoc."""

import importlib
import os
import re
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeVar

from google.protobuf.descriptor import Descriptor
from lark import Lark, Token
from lark.tree import Meta
from lark.visitors import Transformer, v_args

from .descriptors import FILE_SERVICE_FIELD, SERVICE_METHOD_FIELD, qualify
from .types import (
    FileDescriptor,
    MessageRef,
    MethodDescriptor,
    ServiceDescriptor,
    SourceLocation,
    pb2_module,
)

_g_parser: Lark | None = None

# Strings are matched so that comment markers inside them are skipped.
_COMMENT = re.compile(
    r"""("(?:\\.|[^"\\\n])*"|'(?:\\.|[^'\\\n])*')|//[^\n]*|/\*.*?\*/""", re.DOTALL
)


class ValidationError(RuntimeError):
    """Raised when a .proto file can't be turned into service descriptors."""


@dataclass
class ParsedRpc:
    name: str
    input_type: str
    output_type: str
    client_streaming: bool
    server_streaming: bool
    deprecated: bool
    span: list[int]
    leading_comments: str | None = None


@dataclass
class ParsedService:
    name: str
    rpcs: list[ParsedRpc]
    deprecated: bool
    span: list[int]
    leading_comments: str | None = None


@dataclass
class ParsedFile:
    """Everything stub generation needs from one .proto file."""

    path: str
    package: str
    imports: list[str]
    messages: list[MessageRef]
    services: list[ParsedService]
    deprecated: bool


@dataclass
class _Package:
    value: str


@dataclass
class _Import:
    value: str


@dataclass
class _String:
    value: str


@dataclass
class _TypeName:
    value: str


@dataclass
class _Option:
    name: str
    value: str | None


@dataclass
class _Message:
    name: str
    nested: list["_Message"]


TFilter = TypeVar("TFilter", bound=object)


def _filter(args: list[Any], class_type: type[TFilter]) -> list[TFilter]:
    return [v for v in args if isinstance(v, class_type)]


def _find_one(args: list[Any], class_type: type[object]) -> Any:
    filtered = _filter(args, class_type)
    if len(filtered) == 0:
        return None
    if len(filtered) > 1:
        raise RuntimeError(f"Found more than one {class_type}")
    return filtered[0].value


def _first_token(args: list[Any], token_type: str) -> str:
    return next(str(v) for v in args if isinstance(v, Token) and v.type == token_type)


def _is_deprecated(args: list[Any]) -> bool:
    return any(o.name == "deprecated" and o.value == "true" for o in _filter(args, _Option))


def _span(meta: Meta) -> list[int]:
    """Lark positions (one-based) as a SourceCodeInfo span (zero-based)."""
    if meta.empty:
        return []
    if meta.line == meta.end_line:
        return [meta.line - 1, meta.column - 1, meta.end_column - 1]
    return [meta.line - 1, meta.column - 1, meta.end_line - 1, meta.end_column - 1]


@dataclass
class _Comment:
    value: str
    line: int
    own_line: bool


def _comment_text(token: str) -> str:
    """Comment contents the way protoc reports them, delimiters removed."""
    if token.startswith("//"):
        return token[2:] + "\n"
    first, *rest = token[2:-2].split("\n")
    return "\n".join([first, *(re.sub(r"^[ \t]*\*?", "", line) for line in rest)])


def _scan_comments(text: str) -> dict[int, _Comment]:
    """Every comment in text, keyed by the (one-based) line it ends on."""
    comments: dict[int, _Comment] = {}
    for match in _COMMENT.finditer(text):
        if match.group(1):
            continue
        token = match.group()
        start = match.start()
        line = text.count("\n", 0, start) + 1
        line_start = text.rfind("\n", 0, start) + 1
        comments[line + token.count("\n")] = _Comment(
            value=_comment_text(token),
            line=line,
            own_line=not text[line_start:start].strip(),
        )
    return comments


def _leading_comments(comments: dict[int, _Comment], meta: Meta) -> str | None:
    """The comment block directly above a declaration, if any.

    Only comments on lines of their own count, and a blank line ends the
    block, as with protoc's leading_comments.
    """
    if meta.empty:
        return None

    block: list[_Comment] = []
    line = meta.line
    while line - 1 in comments and comments[line - 1].own_line:
        block.append(comments[line - 1])
        line = comments[line - 1].line

    if not block:
        return None

    text = ""
    for comment in reversed(block):
        if text and not text.endswith("\n"):
            text += "\n"
        text += comment.value
    return text


class TreeTransformer(Transformer):
    """Transform the parse tree into a ParsedFile. Unhandled rules stay trees."""

    def __init__(self, path: str, comments: dict[int, _Comment] | None = None) -> None:
        super().__init__()
        self.path = path
        self.comments = comments or {}

    def string(self, args: list[Any]) -> _String:
        return _String(value="".join(str(s)[1:-1] for s in args))

    def package(self, args: list[Any]) -> _Package:
        return _Package(value=str(args[0]))

    def import_(self, args: list[Any]) -> _Import:
        return _Import(value=_find_one(args, _String))

    def type_name(self, args: list[Any]) -> _TypeName:
        return _TypeName(value=str(args[0]))

    def option(self, args: list[Any]) -> _Option:
        value = args[1]
        if isinstance(value, Token):
            return _Option(name=str(args[0]), value=str(value))
        if isinstance(value, _String):
            return _Option(name=str(args[0]), value=value.value)
        return _Option(name=str(args[0]), value=None)

    def message(self, args: list[Any]) -> _Message:
        return _Message(name=_first_token(args, "IDENT"), nested=_filter(args, _Message))

    @v_args(meta=True)
    def rpc(self, meta: Meta, args: list[Any]) -> ParsedRpc:
        types: list[tuple[str, bool]] = []
        streaming = False
        for arg in args:
            if isinstance(arg, Token) and arg.type == "STREAM":
                streaming = True
            elif isinstance(arg, _TypeName):
                types.append((arg.value, streaming))
                streaming = False

        (input_type, client_streaming), (output_type, server_streaming) = types
        return ParsedRpc(
            name=_first_token(args, "IDENT"),
            input_type=input_type,
            output_type=output_type,
            client_streaming=client_streaming,
            server_streaming=server_streaming,
            deprecated=_is_deprecated(args),
            span=_span(meta),
            leading_comments=_leading_comments(self.comments, meta),
        )

    @v_args(meta=True)
    def service(self, meta: Meta, args: list[Any]) -> ParsedService:
        return ParsedService(
            name=_first_token(args, "IDENT"),
            rpcs=_filter(args, ParsedRpc),
            deprecated=_is_deprecated(args),
            span=_span(meta),
            leading_comments=_leading_comments(self.comments, meta),
        )

    def start(self, args: list[Any]) -> ParsedFile:
        package = _find_one(args, _Package) or ""
        module = pb2_module(self.path)
        messages: list[MessageRef] = []

        def collect(message: _Message, scope: str, py_scope: str) -> None:
            full_name = qualify(scope, message.name)
            py_name = qualify(py_scope, message.name)
            messages.append(MessageRef(full_name=full_name, py_module=module, py_name=py_name))
            for nested in message.nested:
                collect(nested, full_name, py_name)

        for message in _filter(args, _Message):
            collect(message, package, "")

        return ParsedFile(
            path=self.path,
            package=package,
            imports=[i.value for i in _filter(args, _Import)],
            messages=messages,
            services=_filter(args, ParsedService),
            deprecated=_is_deprecated(args),
        )


def validate(parsed: ParsedFile) -> None:
    """Validate parsed services."""
    names: set[str] = set()
    for service in parsed.services:
        if service.name in names:
            raise ValidationError(f"{parsed.path}: service {service.name} is declared twice")
        names.add(service.name)

        methods: set[str] = set()
        for rpc in service.rpcs:
            if rpc.name in methods:
                raise ValidationError(
                    f"{parsed.path}: method {rpc.name} is declared twice in service {service.name}"
                )
            methods.add(rpc.name)


def parse(text: str, path: str = "<string>.proto") -> ParsedFile:
    """Parse the text of a .proto file. path is its name relative to the include root."""
    global _g_parser

    if not _g_parser:
        with open(f"{os.path.dirname(__file__)}/proto.lark", encoding="utf-8") as f:
            grammar = f.read()

        _g_parser = Lark(grammar, propagate_positions=True)

    tree = _g_parser.parse(text)
    parsed = TreeTransformer(path, _scan_comments(text)).transform(tree)
    validate(parsed)
    return parsed


def _resolve(name: str, scope: str, index: dict[str, MessageRef]) -> MessageRef:
    """Resolve a type name the way protoc does, innermost scope first."""
    if name.startswith("."):
        candidates = [name[1:]]
    else:
        parts = scope.split(".") if scope else []
        candidates = [".".join([*parts[:i], name]) for i in range(len(parts), -1, -1)]

    for candidate in candidates:
        if candidate in index:
            return index[candidate]
    raise ValidationError(f"unknown message type {name} (looked for {', '.join(candidates)})")


def _compiled_messages(message: Descriptor, module: str, py_scope: str) -> list[MessageRef]:
    py_name = qualify(py_scope, message.name)
    refs = [MessageRef(full_name=message.full_name, py_module=module, py_name=py_name)]
    for nested in message.nested_types:
        if not nested.GetOptions().map_entry:
            refs.extend(_compiled_messages(nested, module, py_name))
    return refs


class Loader:
    """Parses a .proto file and the files it imports.

    Imports are looked up in include_paths first. An import that isn't found
    there is read from its compiled _pb2 module instead, which covers the
    well-known types shipped with protobuf.
    """

    def __init__(self, include_paths: Sequence[str | Path] = (".",)) -> None:
        self.include_paths = [Path(p) for p in include_paths]
        self.index: dict[str, MessageRef] = {}
        self._seen: set[str] = set()

    def proto_name(self, file: str | Path) -> str:
        """Name of a file relative to the first include path containing it.

        The name decides the module the file's messages are imported from, so a
        file outside every include path is rejected.
        """
        absolute = Path(file).resolve()
        for root in self.include_paths:
            if absolute.is_relative_to(root.resolve()):
                return absolute.relative_to(root.resolve()).as_posix()
        raise ValidationError(
            f"{file} is not inside any include path {[str(p) for p in self.include_paths]}"
        )

    def add(self, parsed: ParsedFile) -> None:
        self._seen.add(parsed.path)
        for ref in parsed.messages:
            self.index[ref.full_name] = ref
        for name in parsed.imports:
            self._import(name)

    def _import(self, name: str) -> None:
        if name in self._seen:
            return
        self._seen.add(name)

        for root in self.include_paths:
            candidate = root / name
            if candidate.is_file():
                self.add(parse(candidate.read_text(encoding="utf-8"), name))
                return

        module_name = pb2_module(name)
        try:
            module = importlib.import_module(module_name)
        except ImportError as exc:
            raise ValidationError(
                f"import {name} not found in {[str(p) for p in self.include_paths]} "
                f"or as module {module_name}"
            ) from exc

        for message in module.DESCRIPTOR.message_types_by_name.values():
            for ref in _compiled_messages(message, module_name, ""):
                self.index[ref.full_name] = ref

    def file_descriptor(self, parsed: ParsedFile) -> FileDescriptor:
        """Resolve a parsed file (already added) into the descriptor model."""
        services = []
        for s, service in enumerate(parsed.services):
            service_name = qualify(parsed.package, service.name)
            methods = [
                MethodDescriptor(
                    name=rpc.name,
                    full_name=f"{service_name}.{rpc.name}",
                    input=_resolve(rpc.input_type, parsed.package, self.index),
                    output=_resolve(rpc.output_type, parsed.package, self.index),
                    client_streaming=rpc.client_streaming,
                    server_streaming=rpc.server_streaming,
                    deprecated=rpc.deprecated,
                    location=SourceLocation(
                        path=[FILE_SERVICE_FIELD, s, SERVICE_METHOD_FIELD, m],
                        span=rpc.span,
                        leading_comments=rpc.leading_comments,
                    ),
                )
                for m, rpc in enumerate(service.rpcs)
            ]
            services.append(
                ServiceDescriptor(
                    name=service.name,
                    full_name=service_name,
                    package=parsed.package,
                    methods=methods,
                    deprecated=service.deprecated,
                    location=SourceLocation(
                        path=[FILE_SERVICE_FIELD, s],
                        span=service.span,
                        leading_comments=service.leading_comments,
                    ),
                )
            )

        return FileDescriptor(
            path=parsed.path,
            package=parsed.package,
            services=services,
            deprecated=parsed.deprecated,
        )


def load(file: str | Path, include_paths: Sequence[str | Path] = (".",)) -> FileDescriptor:
    """Parse a .proto file from disk, with its imports, into a FileDescriptor."""
    loader = Loader(include_paths)
    name = loader.proto_name(file)
    parsed = parse(Path(file).read_text(encoding="utf-8"), name)
    loader.add(parsed)
    return loader.file_descriptor(parsed)
