"""Protocol interfaces for swappable components.

The pipeline and ImportState reference these protocols, not the concrete
implementations. This allows:
- Tests to use lightweight in-memory transports, caches and parsers
- Another IDL grammar or cache backend to be plugged in without touching
  the orchestrator
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from idlimport.models import Document, ParseOutcome, ParseResult


class TransportProtocol(Protocol):
    """Single-attempt network retrieval of a URL's raw bytes."""

    async def get(self, url: str) -> bytes: ...


class DocumentCacheProtocol(Protocol):
    """URL-keyed store of raw fetched documents."""

    async def fetch(self, url: str) -> Document: ...


class ParseCacheProtocol(Protocol):
    """URL-keyed store of finished ``{url, parses}`` records."""

    async def get(self, url: str) -> ParseResult | None: ...

    async def put(self, result: ParseResult) -> None: ...


class IdlParserProtocol(Protocol):
    """Grammar parser for a single IDL fragment. May raise."""

    def parse_fragment(self, text: str) -> ParseOutcome: ...
