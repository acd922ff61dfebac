from __future__ import annotations

from typing import Any

from pydantic import BaseModel, RootModel


class ParseResult(BaseModel):
    """Parsed fragments for a single URL. Also the parse cache entry format."""

    url: str
    parses: list[Any] = []


class ImportManifest(RootModel[list[ParseResult]]):
    """Ordered sequence of ParseResult, one per URL, in sorted URL order."""

    @property
    def fragment_count(self) -> int:
        return sum(len(result.parses) for result in self.root)


class ImportSummary(BaseModel):
    """Counts reported after the manifest has been written."""

    url_count: int
    fragment_count: int
    output_path: str
