#!/usr/bin/env python3
"""
Command-line interface for epic-chronicles.

Provides commands to inspect serialization plans and convert JSON Lines
records into Chronicles text.

    chronicles plan mypkg.models:Person
    chronicles convert mypkg.models:Person people.jsonl -o people.txt
"""

from __future__ import annotations

import importlib
import json
import logging
import sys
import traceback
from collections.abc import Iterator
from pathlib import Path
from typing import Any, TextIO

import pydantic
import typer

from chronicles.cli.logger import CLILogger
from chronicles.exceptions import ChroniclesError
from chronicles.plan import describe_plan
from chronicles.serializer import ChroniclesSerializer

app = typer.Typer(
    name='chronicles',
    help='Convert marked Python objects into Epic Chronicles text',
    add_completion=False,
)


class TargetError(ValueError):
    """Raised when a module:Class target cannot be loaded."""


def load_target(target: str) -> type:
    """
    Import a class from a 'package.module:ClassName' reference.

    Raises:
        TargetError: If the reference is malformed or does not name a class
    """
    module_name, sep, qualname = target.partition(':')
    if not sep or not module_name or not qualname:
        raise TargetError(f"Target must look like 'package.module:ClassName', got {target!r}")

    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise TargetError(f'Cannot import module {module_name!r}: {e}') from e

    for part in qualname.split('.'):
        try:
            obj = getattr(obj, part)
        except AttributeError as e:
            raise TargetError(f'{module_name!r} has no attribute {qualname!r}') from e

    if not isinstance(obj, type):
        raise TargetError(f'{target!r} is not a class')
    return obj


def iter_jsonl(stream: TextIO) -> Iterator[tuple[int, Any]]:
    """Yield (line_number, decoded_record) for every non-blank line."""
    for line_num, line in enumerate(stream, start=1):
        line = line.strip()
        if line:
            try:
                yield line_num, json.loads(line)
            except json.JSONDecodeError as e:
                raise ValueError(f'Line {line_num}: invalid JSON ({e.msg})') from e


@app.command()
def plan(
    target: str = typer.Argument(..., help="Serializable class as 'package.module:ClassName'"),
) -> None:
    """Show the compiled serialization plan of a class."""
    try:
        cls = load_target(target)
        ChroniclesSerializer(cls)  # Rejects classes not marked serializable
        summary = describe_plan(cls)
    except (ChroniclesError, TargetError) as e:
        typer.secho(f'Error: {e}', fg=typer.colors.RED, err=True)
        raise typer.Exit(1)

    typer.secho(f"Plan: {summary['type_name']}", bold=True)
    typer.echo(f"  Members: {summary['total_members']}")
    for member in summary['members']:
        omit = ' (omit if empty)' if member['omit_if_empty'] else ''
        typer.echo(
            f"  {member['field']:>5}  {member['name']}  [{member['access']}, {member['kind']}]"
            f"  {member['value_type']}{omit}"
        )


@app.command()
def convert(
    target: str = typer.Argument(..., help="Serializable class as 'package.module:ClassName'"),
    input: str = typer.Argument(..., help="JSON Lines file, or '-' for stdin"),
    output: Path | None = typer.Option(None, '--output', '-o', help='Write Chronicles text here instead of stdout'),
    verbose: bool = typer.Option(False, '--verbose', '-v', help='Verbose output'),
) -> None:
    """Convert JSON Lines records into Chronicles text."""
    logger = CLILogger(verbose=verbose)
    if verbose:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr)

    try:
        cls = load_target(target)
        serializer = ChroniclesSerializer(cls)
        adapter = pydantic.TypeAdapter(cls)

        if input == '-':
            raw = list(iter_jsonl(sys.stdin))
        else:
            input_path = Path(input)
            if not input_path.exists():
                raise FileNotFoundError(f'Input file not found: {input_path}')
            with open(input_path, encoding='utf-8') as f:
                raw = list(iter_jsonl(f))

        logger.info(f'Read {len(raw)} record(s) for {cls.__qualname__}')
        if not raw:
            logger.warning(f'No records found in {input}')

        records = []
        for line_num, data in raw:
            try:
                records.append(adapter.validate_python(data))
            except pydantic.ValidationError as e:
                raise ValueError(f'Line {line_num}: {e}') from e

        text = serializer.dumps(records)

        if output is None:
            typer.echo(text, nl=False)
        else:
            output.write_text(text, encoding='utf-8', newline='')
            logger.info(f'Wrote {len(records)} record(s) to {output}')

    except (ChroniclesError, TargetError, FileNotFoundError, ValueError) as e:
        typer.secho(f'Error: {e}', fg=typer.colors.RED, err=True)
        raise typer.Exit(1)
    except Exception as e:
        typer.secho(f'Error: {e}', fg=typer.colors.RED, err=True)
        if verbose:
            traceback.print_exc()
        raise typer.Exit(1)


def main() -> None:
    """Entry point for CLI."""
    app()


if __name__ == '__main__':
    main()
