"""Import run state container.

ImportState is created once per run (see ``pipeline.open_state``) and passed
to every pipeline stage. Tests build it directly with in-memory fakes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx

    from idlimport.config import Settings
    from idlimport.protocols import (
        DocumentCacheProtocol,
        IdlParserProtocol,
        ParseCacheProtocol,
    )


@dataclass
class ImportState:
    """Holds the shared collaborators of one import run."""

    settings: Settings
    document_cache: DocumentCacheProtocol
    parse_cache: ParseCacheProtocol
    parser: IdlParserProtocol
    http_client: httpx.AsyncClient | None = None
