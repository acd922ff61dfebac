from __future__ import annotations

from idlimport.models.documents import Document, ParseOutcome
from idlimport.models.manifest import ImportManifest, ImportSummary, ParseResult

__all__ = [
    # documents
    "Document",
    "ParseOutcome",
    # manifest
    "ParseResult",
    "ImportManifest",
    "ImportSummary",
]
