"""Traceability between generated symbols and the descriptors they came from."""

import re

from google.protobuf.descriptor_pb2 import GeneratedCodeInfo

from .types import Annotation, SourceLocation

# Control characters never appear in rendered Python source, so they can
# delimit identifiers in-band until the final text is assembled.
_OPEN = "\x00"
_SEP = "\x01"
_CLOSE = "\x02"
_MARKER = re.compile(f"{_OPEN}(\\d+){_SEP}(.*?){_CLOSE}", re.DOTALL)


class Annotator:
    """Collects annotations for one generated file.

    Templates call mark() on each identifier they want traced; it returns the
    identifier wrapped in a marker. finish() removes the markers and reports
    where each identifier ended up, as UTF-8 byte offsets.
    """

    def __init__(self, source_file: str) -> None:
        self.source_file = source_file
        self._symbols: list[tuple[str, SourceLocation | None]] = []

    def mark(self, text: str, symbol: str, location: SourceLocation | None) -> str:
        self._symbols.append((symbol, location))
        return f"{_OPEN}{len(self._symbols) - 1}{_SEP}{text}{_CLOSE}"

    def finish(self, rendered: str) -> tuple[str, list[Annotation]]:
        parts: list[str] = []
        annotations: list[Annotation] = []
        offset = 0
        last = 0

        for match in _MARKER.finditer(rendered):
            before = rendered[last : match.start()]
            parts.append(before)
            offset += len(before.encode("utf-8"))

            text = match.group(2)
            begin = offset
            parts.append(text)
            offset += len(text.encode("utf-8"))

            symbol, location = self._symbols[int(match.group(1))]
            # Descriptors built without source info have nothing to point at.
            if location is not None:
                annotations.append(
                    Annotation(
                        symbol=symbol,
                        path=list(location.path),
                        source_file=self.source_file,
                        begin=begin,
                        end=offset,
                    )
                )
            last = match.end()

        parts.append(rendered[last:])
        return "".join(parts), annotations


def to_generated_code_info(annotations: list[Annotation]) -> GeneratedCodeInfo:
    """Convert annotations to the message protoc plugins attach to files."""
    info = GeneratedCodeInfo()
    for annotation in annotations:
        info.annotation.add(
            path=annotation.path,
            source_file=annotation.source_file,
            begin=annotation.begin,
            end=annotation.end,
        )
    return info
