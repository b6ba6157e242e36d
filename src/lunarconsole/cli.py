"""Command-line interface for the LunarBase console.

Offline commands validate record data and collection definitions stored in
JSON files. Online commands talk to the backend configured through
``LUNARCONSOLE_*`` environment variables.
"""

import asyncio
import json
from pathlib import Path
from typing import Any, NoReturn

import click

from lunarconsole import __version__
from lunarconsole.core.config import get_settings
from lunarconsole.core.exceptions import BackendError, SchemaValidationError
from lunarconsole.core.logging import configure_logging, get_logger
from lunarconsole.domain.entities.field_definition import CollectionSchema
from lunarconsole.domain.entities.validation import Err
from lunarconsole.domain.services.collection_validator import CollectionValidator
from lunarconsole.domain.services.field_normalizer import normalize_form
from lunarconsole.domain.services.record_validator import RecordValidator
from lunarconsole.infrastructure.api.http_client import HttpBackendApi

logger = get_logger(__name__)


def _load_json(path: str) -> Any:
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"{path} is not valid JSON: {e}") from e


def _load_schema(data: Any) -> CollectionSchema:
    """Accept a collection definition, a schema object, or a bare field list."""
    if isinstance(data, dict) and "schema" in data:
        data = data["schema"]
    if not isinstance(data, (dict, list)):
        raise click.BadParameter("Schema file must contain an object or a list of fields")
    return CollectionSchema.from_dict(data)


@click.group()
@click.version_option(version=__version__, prog_name="LunarBase Console")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    default=None,
    help="Set log level (overrides LUNARCONSOLE_LOG_LEVEL)",
)
def cli(log_level: str | None) -> None:
    """LunarBase Console - validation and cache core for the admin console."""
    settings = get_settings()
    if log_level:
        settings = settings.model_copy(update={"log_level": log_level})
    configure_logging(settings)


@cli.command("validate-record")
@click.argument("schema_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("data_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--partial", is_flag=True, help="Only validate fields present in the data")
def validate_record(schema_file: str, data_file: str, partial: bool) -> None:
    """Validate a record's form data against a collection schema.

    Prints the normalized record on success. Exits with status 1 and
    lists every invalid field otherwise.
    """
    schema = _load_schema(_load_json(schema_file))
    data = _load_json(data_file)
    if not isinstance(data, dict):
        raise click.BadParameter("Data file must contain a JSON object")

    try:
        validator = RecordValidator(schema)
    except SchemaValidationError as e:
        for error in e.errors:
            click.echo(f"{error.field}: {error.message}", err=True)
        raise SystemExit(1)

    result = validator.validate(normalize_form(schema, data), partial=partial)
    if isinstance(result, Err):
        for name, error in result.error.items():
            click.echo(f"{name}: {error.message} ({error.code.value})", err=True)
        raise SystemExit(1)

    click.echo(json.dumps(result.value, indent=2, default=str))


@cli.command("validate-collection")
@click.argument("collection_file", type=click.Path(exists=True, dir_okay=False))
def validate_collection(collection_file: str) -> None:
    """Validate a collection definition (name and schema)."""
    payload = _load_json(collection_file)
    if not isinstance(payload, dict):
        raise click.BadParameter("Collection file must contain a JSON object")

    errors = CollectionValidator.validate_payload(payload)
    if errors:
        for error in errors:
            click.echo(f"{error.field}: {error.message} ({error.code})", err=True)
        raise SystemExit(1)

    click.echo(f"Collection '{payload.get('name')}' is valid.")


@cli.command()
def collections() -> None:
    """List the collections on the configured backend."""
    settings = get_settings()

    async def fetch():
        async with HttpBackendApi(settings) as api:
            return await api.list_collections()

    try:
        items = asyncio.run(fetch())
    except BackendError as e:
        click.echo(f"Error: {e.message}", err=True)
        logger.error("Listing collections failed", error=e.message)
        raise SystemExit(1)

    if not items:
        click.echo("No collections.")
        return
    for collection in items:
        fields = ", ".join(f.name for f in collection.schema.user_fields)
        marker = " (system)" if collection.is_system else ""
        click.echo(f"{collection.name}{marker}: {fields}")


@cli.command()
def info() -> None:
    """Display console configuration."""
    settings = get_settings()

    click.echo(f"""
LunarBase Console v{settings.app_version}
{'=' * 40}

Configuration:
  Environment:  {settings.environment}

Backend:
  API URL:      {settings.api_base_url}
  Token:        {'set' if settings.api_token else 'not set'}
  Timeout:      {settings.request_timeout_seconds:g}s

Cache:
  TTL:          {settings.cache_ttl_seconds:g}s
  Page Size:    {settings.default_page_size}

Logging:
  Level:        {settings.log_level}
  Format:       {settings.log_format}
""")


def main() -> NoReturn:
    """Main entry point for the CLI.

    This function is called when the `lunarconsole` command is run
    or when using `python -m lunarconsole`.
    """
    cli()


if __name__ == "__main__":
    main()
