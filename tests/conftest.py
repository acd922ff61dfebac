"""Shared test fixtures for the idlimport test suite."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from idlimport.cache import DocumentCache, ParseCache
from idlimport.config import Settings
from idlimport.errors import FetchError
from idlimport.models import ParseOutcome
from idlimport.state import ImportState

if TYPE_CHECKING:
    from pathlib import Path

_IDL_KEYWORDS = ("interface", "dictionary", "enum", "callback", "typedef", "partial")


class FakeTransport:
    """In-memory transport. Values may be bytes or an exception to raise."""

    def __init__(self, responses: dict[str, bytes | Exception] | None = None) -> None:
        self.responses = dict(responses or {})
        self.calls: list[str] = []

    async def get(self, url: str) -> bytes:
        self.calls.append(url)
        response = self.responses.get(url)
        if response is None:
            raise FetchError(url, f"HTTP 404 fetching {url}")
        if isinstance(response, Exception):
            raise response
        return response


class FakeParser:
    """Accepts fragments that start with an IDL keyword; raises on 'BOOM'."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    def parse_fragment(self, text: str) -> ParseOutcome:
        self.calls.append(text)
        if "BOOM" in text:
            raise RuntimeError("parser exploded")
        stripped = text.strip()
        if not stripped.startswith(_IDL_KEYWORDS):
            return ParseOutcome(accepted=False)
        return ParseOutcome(accepted=True, definition={"idl": stripped, "length": len(text)})


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        cache={
            "url_cache_dir": str(tmp_path / "urlcache"),
            "idl_cache_dir": str(tmp_path / "idlcache"),
        },
    )


@pytest.fixture()
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture()
def parser() -> FakeParser:
    return FakeParser()


@pytest.fixture()
def state(settings: Settings, transport: FakeTransport, parser: FakeParser) -> ImportState:
    """ImportState backed by real on-disk caches, a fake transport and a fake parser."""
    return ImportState(
        settings=settings,
        document_cache=DocumentCache(settings.cache.url_cache_dir, transport),
        parse_cache=ParseCache(settings.cache.idl_cache_dir),
        parser=parser,
    )
