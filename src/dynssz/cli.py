#!/usr/bin/env python3
"""
dynssz CLI

Command-line interface for inspecting, encoding, decoding and hashing SSZ
values of any importable dataclass under an optional specification preset.

Types are given as ``module.path:QualName``, e.g.
``dynssz --spec minimal.json hash-root mypkg.types:BeaconBlock 0x...``.
"""

import importlib
import json
import logging
from typing import Any

import click
from rich.console import Console
from rich.table import Table

from .config import EngineSettings, create_engine, load_settings
from .descriptor import Kind
from .engine import DynSsz
from .errors import SszError
from .utils import bytes_to_hex, hex_to_bytes, json_to_value, value_to_json

# Configure rich console
console = Console()
logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False, level_name: str = "WARNING"):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else getattr(logging, level_name, logging.WARNING)
    logging.basicConfig(
        level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def load_type(path: str) -> Any:
    """
    Import a type from a ``module.path:QualName`` reference.

    Raises:
        click.ClickException: If the module or attribute cannot be found
    """
    module_name, sep, qualname = path.partition(":")
    if not sep or not module_name or not qualname:
        raise click.ClickException(f"Type reference must look like module.path:QualName, got {path!r}")

    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise click.ClickException(f"Cannot import module {module_name}: {e}")

    for part in qualname.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError:
            raise click.ClickException(f"Module {module_name} has no attribute {qualname}")
    return obj


def parse_hex(data: str) -> bytes:
    try:
        return hex_to_bytes(data)
    except ValueError as e:
        raise click.ClickException(f"Invalid hex input: {e}")


@click.group()
@click.option("--spec", "spec_files", multiple=True, type=click.Path(exists=True, dir_okay=False),
              help="JSON specification preset (repeatable, later files win)")
@click.option("--no-fastssz", is_flag=True, help="Force the generic codec path")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, spec_files, no_fastssz, verbose):
    """Dynamic SSZ encoding, decoding and hashing."""
    try:
        env_settings = load_settings()
        setup_logging(verbose, env_settings.log_level)
        settings = EngineSettings(
            no_fast_ssz=no_fastssz or env_settings.no_fast_ssz,
            spec_files=[*env_settings.spec_files, *spec_files],
            log_level=env_settings.log_level,
        )
        ctx.obj = create_engine(settings)
    except SszError as e:
        raise click.ClickException(str(e))


@cli.command()
@click.argument("type_ref")
@click.pass_obj
def inspect(engine: DynSsz, type_ref):
    """Show the resolved SSZ layout of a type."""
    ssz_type = load_type(type_ref)
    try:
        descriptor = engine.get_type_descriptor(ssz_type)
    except SszError as e:
        raise click.ClickException(str(e))

    table = Table(title=f"{descriptor.type_name} ({descriptor.kind.value})")
    table.add_column("Field", style="cyan")
    table.add_column("Type", style="green")
    table.add_column("Fixed", style="yellow")
    table.add_column("Size", style="magenta")
    table.add_column("Override", style="red")

    rows = [(fd.name, fd.descriptor) for fd in descriptor.fields] or [("-", descriptor)]
    for name, field_descriptor in rows:
        size = str(field_descriptor.fixed_size) if field_descriptor.is_fixed_size else "dynamic"
        table.add_row(
            name,
            field_descriptor.type_name,
            "yes" if field_descriptor.is_fixed_size else "no",
            size,
            "yes" if field_descriptor.has_spec_override else "no",
        )
    console.print(table)

    if descriptor.kind in (Kind.CONTAINER, Kind.CUSTOM):
        compat = engine.get_fastssz_compatibility(ssz_type)
        console.print(
            f"fast path: marshal={compat.is_marshaler} unmarshal={compat.is_unmarshaler} "
            f"size={compat.is_sizer} hash_root={compat.is_hash_root} "
            f"spec_overrides={compat.has_dynamic_spec_values}"
        )


@cli.command()
@click.argument("type_ref")
@click.argument("hex_data")
@click.option("--format", "format_output", type=click.Choice(["json", "table"]), default="json",
              help="Output format")
@click.pass_obj
def decode(engine: DynSsz, type_ref, hex_data, format_output):
    """Decode hex-encoded SSZ data into a value."""
    ssz_type = load_type(type_ref)
    try:
        value = engine.unmarshal_ssz(ssz_type, parse_hex(hex_data))
    except SszError as e:
        raise click.ClickException(str(e))

    output = value_to_json(value)
    if format_output == "json" or not isinstance(output, dict):
        console.print_json(json.dumps(output))
        return

    table = Table(title=type_ref)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    for name, field_value in output.items():
        table.add_row(name, json.dumps(field_value))
    console.print(table)


@cli.command("hash-root")
@click.argument("type_ref")
@click.argument("hex_data")
@click.pass_obj
def hash_root(engine: DynSsz, type_ref, hex_data):
    """Print the hash tree root of hex-encoded SSZ data."""
    ssz_type = load_type(type_ref)
    try:
        value = engine.unmarshal_ssz(ssz_type, parse_hex(hex_data))
        root = engine.hash_tree_root(value, ssz_type)
    except SszError as e:
        raise click.ClickException(str(e))
    click.echo(bytes_to_hex(root))


@cli.command()
@click.argument("type_ref")
@click.argument("json_data")
@click.pass_obj
def encode(engine: DynSsz, type_ref, json_data):
    """Encode a JSON value into hex SSZ data."""
    ssz_type = load_type(type_ref)
    try:
        data = json.loads(json_data)
    except json.JSONDecodeError as e:
        raise click.ClickException(f"Invalid JSON input: {e}")

    try:
        value = json_to_value(engine.get_type_descriptor(ssz_type), data)
        encoded = engine.marshal_ssz(value, ssz_type)
    except SszError as e:
        raise click.ClickException(str(e))
    click.echo(bytes_to_hex(encoded))


def main():
    cli()


if __name__ == "__main__":
    main()
