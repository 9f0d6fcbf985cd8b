"""CLI entry point for hyperroutes."""

import json
import logging
from pathlib import Path

import click

from hyperroutes.errors import HyperSchemaError
from hyperroutes.naming import handler_func_name
from hyperroutes.parser import parse_routes
from hyperroutes.routes import Route, by_resource, json_named_types, missing_handlers
from hyperroutes.schema.loader import load_schema
from hyperroutes.types import signature


def _parse(schema_path: Path) -> list[Route]:
    """Load a schema file and parse its routes, turning errors into CLI errors."""
    try:
        return parse_routes(load_schema(schema_path))
    except HyperSchemaError as e:
        raise click.ClickException(str(e)) from e


def _type_label(jt) -> str:
    if jt is None:
        return "-"
    return getattr(jt, "name", None) or signature(jt)


@click.group()
@click.option(
    "--log-level",
    default="WARNING",
    envvar="HYPERROUTES_LOG_LEVEL",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level.",
)
def main(log_level: str):
    """hyperroutes: derive REST routes and types from a JSON Hyper-Schema."""
    logging.basicConfig(level=log_level.upper(), format="%(levelname)s %(name)s: %(message)s")


@main.command()
@click.argument("schema_path", type=click.Path(exists=True, path_type=Path))
@click.option("--format", "fmt", default="text", type=click.Choice(["text", "json"]), help="Output format.")
def routes(schema_path: Path, fmt: str):
    """List the routes of a schema, sorted by path."""
    parsed = _parse(schema_path)
    if fmt == "json":
        data = [r.model_dump(mode="json", exclude={"link"}) for r in parsed]
        click.echo(json.dumps(data, indent=2))
        return
    for route in parsed:
        in_label = "binary" if route.input_is_not_json else _type_label(route.in_type)
        out_label = "binary" if route.output_is_not_json else _type_label(route.out_type)
        click.echo(f"{route.method:<7} {route.path}  {route.name}  in={in_label} out={out_label}")


@main.command()
@click.argument("schema_path", type=click.Path(exists=True, path_type=Path))
def resources(schema_path: Path):
    """List the routes of a schema grouped by resource path."""
    for resource in by_resource(_parse(schema_path)):
        params = ", ".join(f"{p.varname}: {signature(p.type)}" for p in resource.route_params)
        click.echo(f"{resource.name}  {resource.path}  ({params})")
        for method in resource.methods():
            click.echo(f"  {method:<7} {handler_func_name(method, resource.name)}")


@main.command()
@click.argument("schema_path", type=click.Path(exists=True, path_type=Path))
def types(schema_path: Path):
    """List the named types reachable from the routes of a schema."""
    for jt in json_named_types(_parse(schema_path)):
        click.echo(f"{jt.name} {signature(jt)}")


@main.command()
@click.argument("schema_path", type=click.Path(exists=True, path_type=Path))
@click.option("--existing", multiple=True, help="Handler function already declared (repeatable).")
def handlers(schema_path: Path, existing: tuple[str, ...]):
    """List the handler functions still missing for the routes of a schema."""
    missing = missing_handlers(_parse(schema_path), list(existing))
    for name in missing:
        click.echo(name)
    if not missing:
        click.echo("All handlers implemented.")
