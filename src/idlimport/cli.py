"""Command-line entrypoint.

Responsibilities (and nothing more):
- Configure structlog
- Collect the URL list from arguments and/or a URL file
- Run one import and report the summary
"""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Optional

import structlog
import typer

from idlimport import __version__
from idlimport.config import Settings
from idlimport.errors import AggregationError
from idlimport.pipeline import import_http, import_idl, open_state

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from idlimport.models import ImportSummary
    from idlimport.state import ImportState

log = structlog.get_logger()

app = typer.Typer(no_args_is_help=True, add_completion=False)


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def setup_logging(settings: Settings) -> None:
    """Configure structlog. Called once at startup before any log statements."""
    log_level = logging.getLevelNamesMapping()[settings.logging.level]

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if settings.logging.format == "json":
        processors = [*shared_processors, structlog.processors.JSONRenderer()]
    else:
        processors = [*shared_processors, structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        # stdout is kept for the one-line summary printed by the commands
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# URL collection
# ---------------------------------------------------------------------------


def read_url_file(path: Path) -> list[str]:
    """One URL per line; blank lines and ``#`` comments are ignored."""
    urls: list[str] = []
    for line in path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if stripped and not stripped.startswith("#"):
            urls.append(stripped)
    return urls


def _collect_urls(urls: list[str] | None, urls_file: Path | None) -> list[str]:
    collected = list(urls or [])
    if urls_file is not None:
        collected.extend(read_url_file(urls_file))
    if not collected:
        raise typer.BadParameter("No URLs given. Pass URLs as arguments or use --urls-file.")
    return collected


def _run(
    runner: Callable[[list[str], Path, ImportState], Awaitable[ImportSummary]],
    urls: list[str],
    output: Path,
) -> None:
    settings = Settings()
    setup_logging(settings)
    log.info("idlimport_starting", version=__version__, url_count=len(urls))

    async def _main() -> ImportSummary:
        async with open_state(settings) as state:
            return await runner(urls, output, state)

    try:
        summary = asyncio.run(_main())
    except AggregationError as exc:
        log.error("manifest_write_failed", code=exc.code, message=exc.message, path=exc.path)
        raise typer.Exit(code=1) from exc

    typer.echo(
        f"Wrote {summary.fragment_count} IDL fragments from {summary.url_count} URLs "
        f"to {summary.output_path}"
    )


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command("html")
def html_cmd(
    urls: Optional[list[str]] = typer.Argument(None, help="Document URLs to import."),
    output: Path = typer.Option(..., "--output", "-o", help="Manifest path to write."),
    urls_file: Optional[Path] = typer.Option(
        None, "--urls-file", help="File with one URL per line."
    ),
) -> None:
    """Import IDL fragments embedded in <pre> blocks of HTML documents."""
    _run(import_http, _collect_urls(urls, urls_file), output)


@app.command("idl")
def idl_cmd(
    urls: Optional[list[str]] = typer.Argument(None, help="Raw IDL file URLs to import."),
    output: Path = typer.Option(..., "--output", "-o", help="Manifest path to write."),
    urls_file: Optional[Path] = typer.Option(
        None, "--urls-file", help="File with one URL per line."
    ),
) -> None:
    """Import documents whose content is raw IDL text."""
    _run(import_idl, _collect_urls(urls, urls_file), output)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
