"""Python stub generator for reRPC services."""

import logging
import textwrap
from dataclasses import dataclass
from typing import Self

from jinja2 import Environment, PackageLoader

from ..runtime import VERSION
from .annotations import Annotator
from .naming import (
    adapter_name,
    client_constructor_name,
    client_field_name,
    client_name,
    client_param_name,
    concrete_client_name,
    handler_constructor_name,
    method_ident,
    method_path,
    module_alias,
    must_embed_name,
    route_path,
    server_name,
    service_path,
    unary_methods,
    unimplemented_name,
)
from .types import (
    CompilerVersion,
    FileDescriptor,
    GeneratedFile,
    MessageRef,
    MethodDescriptor,
    ServiceDescriptor,
    SourceLocation,
)

TOOL_NAME = "protoc-gen-python-rerpc"
LINE_WIDTH = 79
DEPRECATED = "# Deprecated: do not use."

HANDSHAKE = (
    "This is a compile-time assertion to ensure that this generated file and the "
    "rerpc package are compatible. If you get an error that this constant isn't "
    "defined, this code was generated with a version of rerpc newer than the one "
    "installed. You can fix the problem by either regenerating this code with an "
    "older version of rerpc or updating the installed rerpc."
)

logger = logging.getLogger(__name__)

# A "%" line statement also consumes the blank lines after it. Templates use
# "{% %}" tags where a blank line has to follow.
env = Environment(
    loader=PackageLoader("rerpc.generator", "templates"),
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    line_comment_prefix="%%",
    line_statement_prefix="%",
)

template = env.get_template("rerpc.py.j2")


@dataclass
class ServiceContext:
    """A service as the templates see it: names resolved, methods filtered once."""

    descriptor: ServiceDescriptor
    methods: list[MethodDescriptor]

    @classmethod
    def build(cls, service: ServiceDescriptor) -> Self:
        methods = unary_methods(service)
        skipped = len(service.methods) - len(methods)
        if skipped:
            logger.debug("%s: skipping %d streaming method(s)", service.full_name, skipped)
        return cls(descriptor=service, methods=methods)

    @property
    def full_name(self) -> str:
        return self.descriptor.full_name

    @property
    def package(self) -> str:
        return self.descriptor.package

    @property
    def deprecated(self) -> bool:
        return self.descriptor.deprecated

    @property
    def location(self) -> SourceLocation | None:
        return self.descriptor.location

    @property
    def client_name(self) -> str:
        return client_name(self.descriptor)

    @property
    def concrete_client_name(self) -> str:
        return concrete_client_name(self.descriptor)

    @property
    def client_constructor_name(self) -> str:
        return client_constructor_name(self.descriptor)

    @property
    def server_name(self) -> str:
        return server_name(self.descriptor)

    @property
    def unimplemented_name(self) -> str:
        return unimplemented_name(self.descriptor)

    @property
    def must_embed_name(self) -> str:
        return must_embed_name(self.descriptor)

    @property
    def handler_constructor_name(self) -> str:
        return handler_constructor_name(self.descriptor)

    @property
    def service_path(self) -> str:
        return service_path(self.descriptor)

    def method_path(self, method: MethodDescriptor) -> str:
        return method_path(self.descriptor, method)

    def route_path(self, method: MethodDescriptor) -> str:
        return route_path(self.descriptor, method)


def _py_type(ref: MessageRef) -> str:
    """Qualified name of a message class under its import alias."""
    return f"{module_alias(ref.py_module)}.{ref.py_name}"


def _import_line(module: str) -> str:
    package, _, name = module.rpartition(".")
    if package:
        return f"from {package} import {name} as {module_alias(module)}"
    return f"import {name} as {module_alias(module)}"


def _comment(text: str, indent: int = 0) -> str:
    """Wrap prose into "#" comment lines."""
    pad = " " * indent
    lines = textwrap.wrap(text, width=LINE_WIDTH - indent - 2)
    return "\n".join(f"{pad}# {line}" for line in lines)


def _leading_comments(location: SourceLocation | None, indent: int = 0) -> str:
    """Reproduce a descriptor's leading proto comments line by line."""
    if location is None or not location.leading_comments:
        return ""
    pad = " " * indent
    lines = location.leading_comments.rstrip("\n").split("\n")
    return "\n".join(f"{pad}#{line}".rstrip() for line in lines)


def _docstring(*paragraphs: str, indent: int = 0) -> str:
    """Format paragraphs as a docstring whose first line sits at indent."""
    width = LINE_WIDTH - indent
    if len(paragraphs) == 1 and len(paragraphs[0]) + 6 <= width:
        return f'"""{paragraphs[0]}"""'

    pad = " " * indent
    lines: list[str] = []
    for i, paragraph in enumerate(paragraphs):
        if i:
            lines.append("")
        lines.extend(textwrap.wrap(paragraph, width=width, initial_indent='"""' if i == 0 else ""))
    lines.append('"""')
    return "\n".join([lines[0]] + [f"{pad}{line}" if line else "" for line in lines[1:]])


def _imports(services: list[ServiceContext]) -> list[str]:
    modules = {
        ref.py_module
        for service in services
        for method in service.methods
        for ref in (method.input, method.output)
    }
    return sorted(modules)


def render(
    file: FileDescriptor,
    compiler_version: CompilerVersion | None = None,
) -> GeneratedFile | None:
    """Render the reRPC bindings for one .proto file.

    Returns None when the file declares no services. Rendering depends only on
    the arguments, so identical descriptors produce identical bytes.
    """
    if not file.services:
        return None

    annotator = Annotator(file.path)
    services = [ServiceContext.build(service) for service in file.services]

    text = template.render(
        file=file,
        services=services,
        imports=_imports(services),
        tool_name=TOOL_NAME,
        version=VERSION,
        compiler_version=str(compiler_version) if compiler_version else "(unknown)",
        handshake=HANDSHAKE,
        DEPRECATED=DEPRECATED,
        annotate=annotator.mark,
        py_type=_py_type,
        import_line=_import_line,
        comment=_comment,
        leading_comments=_leading_comments,
        docstring=_docstring,
        method_ident=method_ident,
        client_field_name=client_field_name,
        client_param_name=client_param_name,
        adapter_name=adapter_name,
    )
    content, annotations = annotator.finish(text)
    logger.debug("rendered %s with %d annotation(s)", file.output_name, len(annotations))

    return GeneratedFile(name=file.output_name, content=content, annotations=annotations)
