"""Command-line interface for reRPC code generation."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING

import click
from lark.exceptions import UnexpectedInput
from rich.console import Console
from rich.table import Table

from rerpc.generator.naming import (
    client_name,
    handler_constructor_name,
    route_path,
    server_name,
    service_path,
    unary_methods,
)
from rerpc.generator.parser import ValidationError, load
from rerpc.generator.python import render

if TYPE_CHECKING:
    from rerpc.generator.types import FileDescriptor, MethodDescriptor


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log generator progress to stderr")
def cli(verbose: bool) -> None:
    """reRPC stub generator."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _load(input_file: str, include_paths: tuple[str, ...]) -> FileDescriptor:
    roots = include_paths or (str(Path(input_file).parent),)
    try:
        return load(input_file, roots)
    except (ValidationError, UnexpectedInput) as exc:
        raise click.ClickException(f"{input_file}: {exc}") from exc


@cli.command()
@click.option(
    "--input",
    "-i",
    "input_file",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Input .proto file",
)
@click.option("--output", "-o", "output_file", required=True, help="Output file")
@click.option(
    "--proto-path",
    "-I",
    "include_paths",
    multiple=True,
    help="Directory in which to search for imports (default: the input's directory)",
)
def gen(input_file: str, output_file: str, include_paths: tuple[str, ...]) -> None:
    """Generate Python client and server stubs from a .proto file."""
    file = _load(input_file, include_paths)
    generated = render(file)

    if generated is None:
        print(f"{input_file} declares no services, nothing to generate")
        return

    with open(output_file, "w", encoding="utf-8") as f:
        f.write(generated.content)


@cli.command()
@click.option(
    "--input",
    "-i",
    "input_file",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Input .proto file",
)
@click.option("--proto-path", "-I", "include_paths", multiple=True, help="Import search path")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.option("--descriptor", is_flag=True, help="Dump the parsed descriptor model as JSON")
def info(input_file: str, include_paths: tuple[str, ...], output_json: bool, descriptor: bool) -> None:
    """Display the services of a .proto file and what gets generated for them."""
    file = _load(input_file, include_paths)

    if descriptor:
        print(file.to_json(indent=2))
    elif output_json:
        _output_json(file)
    else:
        _output_plain(file)


def _kind(method: MethodDescriptor) -> str:
    if method.client_streaming and method.server_streaming:
        return "bidi streaming"
    if method.client_streaming:
        return "client streaming"
    if method.server_streaming:
        return "server streaming"
    return "unary"


def _output_json(file: FileDescriptor) -> None:
    """Output service info as JSON."""
    data: dict = {
        "file": file.path,
        "package": file.package,
        "deprecated": file.deprecated,
        "services": [],
    }

    for service in file.services:
        unary = unary_methods(service)
        data["services"].append(
            {
                "name": service.full_name,
                "client": client_name(service),
                "server": server_name(service),
                "mount_path": service_path(service),
                "deprecated": service.deprecated,
                "methods": [
                    {
                        "name": method.name,
                        "kind": _kind(method),
                        "input": method.input.full_name,
                        "output": method.output.full_name,
                        "generated": method in unary,
                        "path": route_path(service, method) if method in unary else None,
                        "deprecated": method.deprecated,
                    }
                    for method in service.methods
                ],
            }
        )

    print(json.dumps(data, indent=2))


def _output_plain(file: FileDescriptor) -> None:
    """Output service info using rich text formatting."""
    console = Console()

    console.print(f"[bold cyan]{file.path}[/bold cyan]")
    file_table = Table(show_header=False, box=None, padding=(0, 2, 0, 2))
    file_table.add_column("Label", style="dim")
    file_table.add_column("Value", style="white")
    file_table.add_row("Package", file.package or "(none)")
    if file.deprecated:
        file_table.add_row("Deprecated", "yes")
    console.print(file_table)
    console.print()

    if not file.services:
        console.print("[dim]No services[/dim]")
        return

    for service in file.services:
        unary = unary_methods(service)
        title = f"[bold cyan]{service.full_name}[/bold cyan]"
        if service.deprecated:
            title += " [yellow](deprecated)[/yellow]"
        console.print(title)
        console.print(
            f"  [dim]{client_name(service)} / {handler_constructor_name(service)} "
            f"mounted at {service_path(service)}[/dim]"
        )

        method_table = Table(show_header=True, box=None, padding=(0, 2, 0, 2))
        method_table.add_column("Method", style="white")
        method_table.add_column("Kind", style="dim")
        method_table.add_column("Input -> Output", style="white")
        method_table.add_column("Path", style="green")

        for method in service.methods:
            name = method.name
            if method.deprecated:
                name += " [yellow](deprecated)[/yellow]"
            path = route_path(service, method) if method in unary else "[dim]skipped[/dim]"
            method_table.add_row(
                name,
                _kind(method),
                f"{method.input.full_name} -> {method.output.full_name}",
                path,
            )

        console.print(method_table)
        console.print()


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
