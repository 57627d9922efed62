from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.logging import RichHandler
from textual.logging import TextualHandler

from rainstash_browse import __version__
from rainstash_browse.exceptions import ManifestError
from rainstash_browse.manifest import (
    VANILLA_MANIFEST_URL,
    default_cache_path,
    ensure_manifest_cache,
    items_by_display_name,
    load_manifest,
)
from rainstash_browse.search import rank_matches
from rainstash_browse.tui import RainstashTui

__all__ = [
    "RainstashTui",
    "cli",
    "run",
]


def _version_callback(value: bool) -> None:
    if not value:
        return
    typer.echo(f"rainstash-browse {__version__}")
    raise typer.Exit()


def _configure_logging(*, verbose: bool, interactive: bool) -> None:
    handler: logging.Handler = (
        TextualHandler() if interactive else RichHandler(show_path=False)
    )
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[handler],
        force=True,
    )


def _print_matches(
    *,
    query: str,
    cache_file: Path,
    manifest_url: str,
    refresh: bool,
    limit: int,
) -> None:
    ensure_manifest_cache(cache_file, manifest_url=manifest_url, refresh=refresh)
    manifest = load_manifest(cache_file)
    names = sorted(items_by_display_name(manifest.items))
    matches = rank_matches(query, names)
    if not matches:
        typer.echo(f"No items match {query!r}.")
        return
    for match in matches[:limit]:
        typer.echo(f"{match.result.score:>4}  {match.name}")


cli = typer.Typer(
    add_completion=False,
    help="Fuzzy search Rainstash item manifests in a Textual TUI.",
)


@cli.callback(invoke_without_command=True)
def run(
    manifest_url: str = typer.Option(
        VANILLA_MANIFEST_URL,
        "--manifest-url",
        "-u",
        envvar="RAINSTASH_MANIFEST_URL",
        help="Manifest downloaded when the cache is missing or refreshed.",
    ),
    cache_file: Path = typer.Option(
        default_cache_path(),
        "--cache-file",
        envvar="RAINSTASH_CACHE_FILE",
        help="Local manifest cache.",
    ),
    update: bool = typer.Option(
        False,
        "--update",
        help="Download the manifest again before searching.",
    ),
    query: str | None = typer.Option(
        None,
        "--query",
        "-q",
        help="Print ranked matches for a query instead of starting the TUI.",
    ),
    limit: int = typer.Option(
        10,
        "--limit",
        "-n",
        min=1,
        help="Maximum number of matches printed with --query.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging.",
    ),
    _version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    _configure_logging(verbose=verbose, interactive=query is None)

    if query is not None:
        try:
            _print_matches(
                query=query,
                cache_file=cache_file,
                manifest_url=manifest_url,
                refresh=update,
                limit=limit,
            )
        except ManifestError as exc:
            typer.echo(str(exc), err=True)
            raise typer.Exit(code=1) from exc
        return

    RainstashTui(
        cache_file=cache_file,
        manifest_url=manifest_url,
        refresh=update,
    ).run()


if __name__ == "__main__":
    cli()
