"""protoc plugin: protoc-gen-python-rerpc.

protoc runs the plugin with a CodeGeneratorRequest on stdin and reads a
CodeGeneratorResponse from stdout, so diagnostics go to stderr only.

    protoc --python_out=. --python-rerpc_out=. acme/greeter/v1/greeter.proto
    protoc --python-rerpc_out=annotate_code:. acme/greeter/v1/greeter.proto
"""

import logging
import sys
from dataclasses import dataclass
from typing import BinaryIO, Self

from google.protobuf.compiler.plugin_pb2 import CodeGeneratorRequest, CodeGeneratorResponse

from .annotations import to_generated_code_info
from .descriptors import build_files
from .python import TOOL_NAME, render
from .types import CompilerVersion

logger = logging.getLogger(__name__)


class PluginError(RuntimeError):
    """Raised when protoc passes a parameter the plugin doesn't understand."""


@dataclass
class PluginOptions:
    """Options protoc forwards from --python-rerpc_out=<options>:<dir>."""

    annotate_code: bool = False

    @classmethod
    def parse(cls, parameter: str) -> Self:
        options = cls()
        for item in parameter.split(","):
            item = item.strip()
            if not item:
                continue
            key, _, value = item.partition("=")
            if key == "annotate_code":
                options.annotate_code = value.lower() not in ("false", "0", "no")
            else:
                raise PluginError(f"unknown parameter {key!r}")
        return options


def compiler_version(request: CodeGeneratorRequest) -> CompilerVersion | None:
    if not request.HasField("compiler_version"):
        return None
    version = request.compiler_version
    return CompilerVersion(
        major=version.major,
        minor=version.minor,
        patch=version.patch,
        suffix=version.suffix,
    )


def generate(request: CodeGeneratorRequest) -> CodeGeneratorResponse:
    """Answer one request. Problems are reported in response.error."""
    response = CodeGeneratorResponse()
    response.supported_features = CodeGeneratorResponse.FEATURE_PROTO3_OPTIONAL

    try:
        options = PluginOptions.parse(request.parameter)
    except PluginError as exc:
        response.error = str(exc)
        return response

    version = compiler_version(request)
    for file in build_files(request.proto_file, request.file_to_generate):
        generated = render(file, version)
        if generated is None:
            logger.debug("%s declares no services, nothing to generate", file.path)
            continue

        out = response.file.add(name=generated.name, content=generated.content)
        if options.annotate_code:
            out.generated_code_info.CopyFrom(to_generated_code_info(generated.annotations))
        logger.info("generated %s", generated.name)

    return response


def run(stdin: BinaryIO, stdout: BinaryIO) -> None:
    request = CodeGeneratorRequest.FromString(stdin.read())
    stdout.write(generate(request).SerializeToString())
    stdout.flush()


def main() -> None:
    """Entry point for the protoc-gen-python-rerpc executable."""
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.WARNING,
        format=f"{TOOL_NAME}: %(levelname)s: %(message)s",
    )
    run(sys.stdin.buffer, sys.stdout.buffer)


if __name__ == "__main__":
    main()
