from __future__ import annotations

import logging
import re
from typing import List, Optional

import typer

from .. import __version__
from ..config_loader import ConfigLoader
from ..core.client import Client
from ..core.context import Context
from ..core.errors import EnvSyncError, SourceFormatError
from ..core.registry import ProviderInfo, ProviderRegistry, default_registry
from ..core.types import DEFAULT_PROVIDER_NAME, LoadOptions, MergeStrategy
from ..exporter import MultiFormatExporter
from ..providers import register_builtin_providers
from ..providers.local import LocalFileProvider
from ..validator import SchemaValidator

app = typer.Typer(help="Unified environment variable and secrets management")

DEFAULT_TIMEOUT = "30s"

NAME_WIDTH = 12
ALIASES_WIDTH = 24
MAX_DESCRIPTION_LENGTH = 60

_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ms|s|m|h)?\s*$")
_DURATION_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


def parse_duration(value: str) -> float:
    """Parse ``500ms``, ``30s``, ``2m``, ``1h`` or a bare number of seconds."""
    match = _DURATION_RE.match(value or "")
    if not match:
        raise SourceFormatError(f"invalid duration: {value}")
    number, unit = match.groups()
    return float(number) * _DURATION_UNITS[unit or "s"]


def _registry() -> ProviderRegistry:
    registry = default_registry()
    register_builtin_providers(registry)
    return registry


def _fail(exc: Exception) -> None:
    typer.echo(f"Error: {exc}", err=True)
    raise typer.Exit(code=1)


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging")):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_client(
    registry: ProviderRegistry,
    loader: Optional[ConfigLoader],
    output_dir: str,
    schema: Optional[str],
    export: Optional[str],
) -> Client:
    client = Client()
    if loader is not None:
        loader.build_client(registry, client)
    if client.get_provider("local") is None:
        client.add_provider("local", LocalFileProvider("."))
    if client.get_provider(DEFAULT_PROVIDER_NAME) is None:
        client.add_provider(DEFAULT_PROVIDER_NAME, client.get_provider("local"))
    if schema:
        client.set_validator(SchemaValidator(schema))
    if export:
        client.set_exporter(MultiFormatExporter(output_dir))
    return client


@app.command()
def load(
    sources: List[str] = typer.Option([], "--from", help="Configuration source to load from (repeatable)"),
    schema: Optional[str] = typer.Option(None, "--validate", help="JSON schema file for validation"),
    export: Optional[str] = typer.Option(None, "--export", help="Export destination (format:path)"),
    merge_strategy: Optional[str] = typer.Option(
        None, "--merge-strategy", help="Merge strategy: override, preserve or error [default: override]"
    ),
    timeout: str = typer.Option(DEFAULT_TIMEOUT, "--timeout", help="Timeout for the load, e.g. 30s"),
    output_dir: str = typer.Option(".", "--output-dir", help="Directory for relative export paths"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Skip export and print the loaded keys"),
    config: Optional[str] = typer.Option(None, "--config", help="Path to envsync.yaml"),
):
    """Load configuration from the given sources, validate and export it."""
    try:
        loader = ConfigLoader(config)
        strategy = (
            MergeStrategy.parse(merge_strategy)
            if merge_strategy is not None
            else loader.merge_strategy() or MergeStrategy.OVERRIDE
        )
        sources = list(sources) or loader.sources()
        if not sources:
            raise SourceFormatError("at least one source must be specified with --from")
        schema = schema or loader.schema()
        ctx = Context.with_timeout(parse_duration(timeout))

        client = build_client(_registry(), loader, output_dir, schema, export)

        typer.echo(f"Loading configuration from {len(sources)} sources...")
        env = client.load(
            LoadOptions(sources=sources, schema=schema, merge_strategy=strategy),
            ctx=ctx,
        )
        typer.echo(f"Successfully loaded {env.size()} configuration keys")

        if dry_run:
            typer.echo("Dry run completed - no files were written")
            for key in sorted(env.keys()):
                typer.echo(f"  {key}")
            return

        if export:
            typer.echo(f"Exporting configuration to {export}...")
            env.export(export, ctx=ctx)
            typer.echo("Configuration exported successfully")
    except (EnvSyncError, OSError) as exc:
        _fail(exc)


def _matches(info: ProviderInfo, needle: str) -> bool:
    needle = needle.lower()
    return (
        needle in info.name.lower()
        or any(needle in alias.lower() for alias in info.aliases)
        or needle in info.description.lower()
    )


def _truncate(text: str, width: int) -> str:
    return text if len(text) <= width else text[: width - 3] + "..."


@app.command()
def providers(
    details: bool = typer.Option(False, "--details", help="Show detailed provider information"),
    filter: Optional[str] = typer.Option(None, "--filter", help="Filter by name, alias or description"),
):
    """List the registered configuration providers."""
    infos = sorted(_registry().list_providers(), key=lambda i: i.name)
    if filter:
        infos = [i for i in infos if _matches(i, filter)]
    if not infos:
        typer.echo("No providers registered" if not filter else f"No providers match {filter!r}")
        return

    if not details:
        typer.echo(f"Available providers ({len(infos)}):\n")
        typer.echo(f"{'PROVIDER':<{NAME_WIDTH}} {'ALIASES':<{ALIASES_WIDTH}} DESCRIPTION")
        typer.echo(f"{'-' * NAME_WIDTH} {'-' * ALIASES_WIDTH} {'-' * MAX_DESCRIPTION_LENGTH}")
        for info in infos:
            aliases = _truncate(", ".join(info.aliases), ALIASES_WIDTH)
            description = _truncate(info.description, MAX_DESCRIPTION_LENGTH)
            typer.echo(f"{info.name:<{NAME_WIDTH}} {aliases:<{ALIASES_WIDTH}} {description}")
        return

    typer.echo("Available providers (detailed view):")
    for info in infos:
        typer.echo("")
        typer.echo(f"Provider: {info.name} (priority: {info.priority})")
        if info.aliases:
            typer.echo(f"  Aliases: {', '.join(info.aliases)}")
        typer.echo(f"  Description: {info.description}")
        for title, items in (
            ("Supported Sources", info.supported_sources),
            ("Required Configuration", info.required_config),
            ("Optional Configuration", info.optional_config),
        ):
            if items:
                typer.echo(f"  {title}:")
                for item in items:
                    typer.echo(f"    - {item}")
    typer.echo(f"\nTotal: {len(infos)} providers")


@app.command()
def version():
    """Show the envsync version."""
    typer.echo(f"envsync {__version__}")


if __name__ == "__main__":
    app()
