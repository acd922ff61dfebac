from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class Document(BaseModel):
    """Raw content fetched for a URL, fresh or from the document cache."""

    url: str
    data: bytes
    from_cache: bool = False

    @property
    def text(self) -> str:
        return self.data.decode("utf-8", errors="replace")


class ParseOutcome(BaseModel):
    """Result of handing one fragment to the IDL grammar parser."""

    accepted: bool
    definition: Any = None  # Structured representation, only set when accepted
