"""Command line interface: ``python -m mimeregistry`` / ``mimeregistry``.

Matches are printed to stdout as JSON lines (one descriptor mapping per
line); logs go to stderr. The exit status is 1 when nothing matched.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, NoReturn

import typer
from pydantic import ValidationError

from mimeregistry import default_registry
from mimeregistry.cache import Cache
from mimeregistry.config import Settings
from mimeregistry.errors import MimeRegistryError
from mimeregistry.loader import load_registry
from mimeregistry.logs import configure_logging

if TYPE_CHECKING:
    from mimeregistry.mime_type import MimeType

app = typer.Typer(add_completion=False, no_args_is_help=True)
cache_app = typer.Typer(
    add_completion=False, no_args_is_help=True, help="Manage the registry cache file."
)
app.add_typer(cache_app, name="cache")


def _emit(matches: list[MimeType]) -> None:
    for mime_type in matches:
        typer.echo(json.dumps(mime_type.to_dict(), sort_keys=True))
    if not matches:
        raise typer.Exit(code=1)


def _fail(exc: MimeRegistryError) -> NoReturn:
    typer.echo(json.dumps(exc.to_dict()), err=True)
    raise typer.Exit(code=2)


@app.callback()
def main(ctx: typer.Context) -> None:
    """Look up MIME content types by type name or by filename."""
    try:
        settings = Settings()
    except ValidationError as exc:
        typer.echo(f"Invalid configuration: {exc}", err=True)
        raise typer.Exit(code=2) from exc
    configure_logging(settings.logging)
    ctx.obj = settings


@app.command("type")
def type_(
    ctx: typer.Context,
    type_ids: list[str] = typer.Argument(..., help="Content types such as text/plain."),
    complete: bool = typer.Option(False, "--complete", help="Only types with extensions."),
    registered: bool = typer.Option(False, "--registered", help="Only IANA-registered types."),
) -> None:
    """Print the types registered under each TYPE_ID, best match first."""
    try:
        default_registry.configure(ctx.obj)
    except MimeRegistryError as exc:
        _fail(exc)
    matches: list[MimeType] = []
    for type_id in type_ids:
        matches += default_registry.lookup_by_id(
            type_id, complete=complete, registered=registered
        )
    _emit(matches)


@app.command("file")
def file_(
    ctx: typer.Context,
    names: list[str] = typer.Argument(..., help="Filenames or paths."),
) -> None:
    """Print the types claiming the extension of each NAME, best match first."""
    try:
        default_registry.configure(ctx.obj)
    except MimeRegistryError as exc:
        _fail(exc)
    _emit(default_registry.lookup_by_filename(names))


@cache_app.command("build")
def cache_build(ctx: typer.Context) -> None:
    """Load the type data file and write the cache."""
    settings: Settings = ctx.obj
    try:
        index = load_registry(settings.data.path, data_format=settings.data.format)
    except MimeRegistryError as exc:
        _fail(exc)
    cache = Cache(settings.cache.path)
    if not cache.save(index):
        raise typer.Exit(code=1)
    typer.echo(f"Wrote {index.count} types to {cache.path}")


@cache_app.command("clear")
def cache_clear(ctx: typer.Context) -> None:
    """Delete the cache file."""
    settings: Settings = ctx.obj
    cache = Cache(settings.cache.path)
    if cache.clear():
        typer.echo(f"Removed {cache.path}")
    else:
        typer.echo(f"No cache file at {cache.path}")
