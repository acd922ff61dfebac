"""Import pipeline orchestration.

Each URL runs through its own chain of stages:

  from markup:  fetch → extract → unescape → parse
  from raw IDL: fetch → parse

All chains for a run are started together and awaited with
``asyncio.gather``, which keeps results in sorted URL order regardless of
completion order. Every chain catches its own failures and resolves to an
empty ParseResult, so one bad URL never aborts its siblings. Only the final
manifest write may fail the run.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import structlog

from idlimport.cache import DocumentCache, ParseCache
from idlimport.entities import unescape_fragments
from idlimport.errors import IdlImportError
from idlimport.extractor import extract_fragments
from idlimport.fetcher import Fetcher, build_http_client
from idlimport.idl import WidlParser
from idlimport.models import ParseResult
from idlimport.state import ImportState
from idlimport.writer import write_manifest

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Awaitable, Callable, Iterable, Sequence
    from pathlib import Path

    from idlimport.config import Settings
    from idlimport.models import Document, ImportSummary
    from idlimport.protocols import IdlParserProtocol

log = structlog.get_logger()


def normalise_urls(urls: Iterable[str]) -> list[str]:
    """De-duplicate and sort, giving every run the same processing order."""
    return sorted(set(urls))


# ---------------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------------


async def load_url(url: str, state: ImportState) -> Document:
    return await state.document_cache.fetch(url)


async def cached_parse(url: str, state: ImportState) -> ParseResult | None:
    """Return the finished result of a prior run, or None if the URL needs processing.

    An unreadable entry counts as a miss and is overwritten by the fresh parse.
    """
    cached = await state.parse_cache.get(url)
    if cached is not None:
        log.info("parse_cache_hit", url=url)
    return cached


def extract_idl(document: Document) -> list[str]:
    """Extract candidate fragments from a document's markup."""
    log.info("extracting_fragments", url=document.url)
    fragments = extract_fragments(document.text)
    if fragments:
        log.info("fragments_found", url=document.url, count=len(fragments))
    else:
        log.info("no_fragments_found", url=document.url)
    return fragments


async def parse_fragments(
    url: str,
    fragments: Sequence[str | bytes],
    state: ImportState,
) -> ParseResult:
    """Parse every fragment of a URL and persist the result to the parse cache.

    Rejected fragments, including ones that make the parser raise, are
    dropped and logged; they never stop the remaining fragments from being
    parsed.
    """
    parses: list = []
    for fragment in fragments:
        if isinstance(fragment, bytes):
            text = fragment.decode("utf-8", errors="replace")
        else:
            text = str(fragment)
        try:
            outcome = state.parser.parse_fragment(text)
        except Exception:
            log.warning(
                "fragment_rejected",
                url=url,
                length=len(text),
                reason="parser_error",
                exc_info=True,
            )
            continue

        if outcome.accepted:
            log.info("fragment_accepted", url=url, length=len(text))
            parses.append(outcome.definition)
        else:
            log.warning("fragment_rejected", url=url, length=len(text), reason="not_idl")

    result = ParseResult(url=url, parses=parses)
    await state.parse_cache.put(result)
    return result


# ---------------------------------------------------------------------------
# Per-URL chains
# ---------------------------------------------------------------------------


async def _import_markup_url(url: str, state: ImportState) -> ParseResult:
    document = await load_url(url, state)
    cached = await cached_parse(url, state)
    if cached is not None:
        return cached
    fragments = unescape_fragments(extract_idl(document))
    return await parse_fragments(url, fragments, state)


async def _import_idl_url(url: str, state: ImportState) -> ParseResult:
    document = await load_url(url, state)
    cached = await cached_parse(url, state)
    if cached is not None:
        return cached
    return await parse_fragments(url, [document.data], state)


async def _isolated(
    url: str,
    chain: Callable[[str, ImportState], Awaitable[ParseResult]],
    state: ImportState,
) -> ParseResult:
    try:
        return await chain(url, state)
    except IdlImportError as exc:
        log.error("url_import_failed", url=url, code=exc.code, message=exc.message)
    except Exception:
        log.error("url_import_failed", url=url, exc_info=True)
    return ParseResult(url=url, parses=[])


async def _run(
    urls: Iterable[str],
    chain: Callable[[str, ImportState], Awaitable[ParseResult]],
    state: ImportState,
) -> list[ParseResult]:
    ordered = normalise_urls(urls)
    log.info("import_started", url_count=len(ordered))
    return list(await asyncio.gather(*(_isolated(url, chain, state) for url in ordered)))


async def run_http_pipeline(urls: Iterable[str], state: ImportState) -> list[ParseResult]:
    """Import IDL embedded in markup documents. Never raises for per-URL failures."""
    return await _run(urls, _import_markup_url, state)


async def run_idl_pipeline(urls: Iterable[str], state: ImportState) -> list[ParseResult]:
    """Import documents that are raw IDL text. Never raises for per-URL failures."""
    return await _run(urls, _import_idl_url, state)


async def import_http(
    urls: Iterable[str], output_path: str | Path, state: ImportState
) -> ImportSummary:
    """Run the markup pipeline and write the manifest. Raises AggregationError."""
    results = await run_http_pipeline(urls, state)
    return await asyncio.to_thread(write_manifest, results, output_path)


async def import_idl(
    urls: Iterable[str], output_path: str | Path, state: ImportState
) -> ImportSummary:
    """Run the raw-IDL pipeline and write the manifest. Raises AggregationError."""
    results = await run_idl_pipeline(urls, state)
    return await asyncio.to_thread(write_manifest, results, output_path)


# ---------------------------------------------------------------------------
# Run state
# ---------------------------------------------------------------------------


@asynccontextmanager
async def open_state(
    settings: Settings,
    parser: IdlParserProtocol | None = None,
) -> AsyncGenerator[ImportState, None]:
    """Create and tear down the shared resources of one import run."""
    if parser is None:
        parser = WidlParser()

    http_client = build_http_client(settings.fetcher)
    fetcher = Fetcher(http_client, max_redirects=settings.fetcher.max_redirects)
    state = ImportState(
        settings=settings,
        document_cache=DocumentCache(settings.cache.url_cache_dir, fetcher),
        parse_cache=ParseCache(settings.cache.idl_cache_dir),
        parser=parser,
        http_client=http_client,
    )
    try:
        yield state
    finally:
        if state.http_client is not None:
            await state.http_client.aclose()
