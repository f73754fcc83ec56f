"""HRPulse CLI entry point.

Provides command-line access to the aggregation service: dashboard stats,
entities with stats, communication breakdowns and a store health check.
Results are printed as JSON in the camelCase shape the dashboard renders.
"""

from __future__ import annotations

import asyncio
import importlib.metadata
import json
import logging
from typing import TYPE_CHECKING, Any

import typer
from typing_extensions import Annotated

from hrpulse.config import get_config
from hrpulse.main import HRPulseApplication
from hrpulse.observability.tracing import setup_telemetry, shutdown_telemetry
from hrpulse.query.aggregation import ENTITY_SOURCES

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from hrpulse.query.aggregation import AggregationService

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Create CLI app
app = typer.Typer(
    name="hrpulse",
    help="HRPulse - cached dashboard statistics over a Supabase collection store",
    add_completion=False,
)

ConfigOption = Annotated[str, typer.Option("--config", "-c", help="Path to YAML configuration file")]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Enable verbose output")]


def create_application(config_path: str = "") -> HRPulseApplication:
    """Build the application from a config file or the environment."""
    config = get_config(config_path or None)
    if config.debug:
        logging.getLogger().setLevel(logging.DEBUG)
    if config.otlp_endpoint:
        setup_telemetry(environment=config.environment, otlp_endpoint=config.otlp_endpoint)
    return HRPulseApplication(config=config)


def _run(
    config_path: str,
    verbose: bool,
    operation: Callable[[AggregationService], Awaitable[Any]],
) -> Any:
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    hrpulse_app = create_application(config_path)

    async def run() -> Any:
        async with hrpulse_app:
            return await operation(hrpulse_app.service)

    try:
        return asyncio.run(run())
    finally:
        shutdown_telemetry()


def _parse_id(value: str) -> int | str | None:
    """Turn a command-line id into the store's id type.

    Integer-looking ids are compared as integers, anything else (UUIDs,
    slugs) as text. An empty value means no id.
    """
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        return value


def _echo_json(data: Any) -> None:
    typer.echo(json.dumps(data, indent=2, default=str))


@app.command()
def stats(config: ConfigOption = "", verbose: VerboseOption = False) -> None:
    """Show dashboard statistics (counts, growth, success rate, storage)."""
    result = _run(config, verbose, lambda service: service.get_dashboard_stats())
    _echo_json(result.model_dump(by_alias=True))


@app.command()
def entities(
    collection: Annotated[str, typer.Argument(help="Entity collection")] = "companies",
    config: ConfigOption = "",
    verbose: VerboseOption = False,
) -> None:
    """Show every entity of a collection with its message metrics.

    Examples:
        hrpulse entities companies
        hrpulse entities employees --config hrpulse.yaml
    """
    if collection not in ENTITY_SOURCES:
        typer.echo(f"❌ Unsupported collection: {collection}", err=True)
        typer.echo(f"   Valid collections: {', '.join(ENTITY_SOURCES)}", err=True)
        raise typer.Exit(code=1)

    result = _run(config, verbose, lambda service: service.get_entities_with_stats(collection))
    _echo_json([entity.model_dump(by_alias=True) for entity in result])


@app.command()
def communications(
    company_id: Annotated[
        str, typer.Option("--company-id", help="Restrict to one company (numeric ids match as integers)")
    ] = "",
    config: ConfigOption = "",
    verbose: VerboseOption = False,
) -> None:
    """Show communication log counts by status."""
    result = _run(
        config,
        verbose,
        lambda service: service.get_communication_stats(_parse_id(company_id)),
    )
    _echo_json(result.model_dump(by_alias=True))


@app.command()
def verify(config: ConfigOption = "", verbose: VerboseOption = False) -> None:
    """Check that every collection in the store answers a count query."""
    result = _run(config, verbose, lambda service: service.verify_collections())

    for collection, health in result.items():
        if health.exists:
            typer.echo(f"✅ {collection}: {health.count} rows")
        else:
            typer.echo(f"❌ {collection}: {health.error}")

    if not all(health.exists for health in result.values()):
        raise typer.Exit(code=1)


@app.command()
def version() -> None:
    """Show HRPulse version information."""
    try:
        ver = importlib.metadata.version("hrpulse")
        typer.echo(f"HRPulse version: {ver}")
    except importlib.metadata.PackageNotFoundError:
        typer.echo("HRPulse version: unknown")


def main() -> None:
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
