"""Filesystem caches for fetched documents and finished parses.

Both caches are one file per URL, named by ``cache_key(url)``, and are never
invalidated: deleting the directory is the only way to force a refresh.

Writes go through a temp file and ``os.replace`` so an entry is either absent
or complete. Write failures are logged and ignored (the fetched or parsed
content is still returned to the pipeline); a parse cache entry that cannot
be read back is logged and treated as a miss. Transport errors are not cache
errors and always propagate.
"""

from __future__ import annotations

import asyncio
import json
import os
import re
from contextlib import suppress
from pathlib import Path
from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError

from idlimport.models import Document, ParseResult

if TYPE_CHECKING:
    from idlimport.protocols import TransportProtocol

log = structlog.get_logger()

_UNSAFE_RE = re.compile(r"[^a-zA-Z0-9]")
CACHE_KEY_PLACEHOLDER = "_"


def cache_key(url: str) -> str:
    """Filesystem-safe file name for a URL: ``'https://a.b/c'`` → ``'https___a_b_c'``."""
    return _UNSAFE_RE.sub(CACHE_KEY_PLACEHOLDER, url)


def _write_bytes_atomic(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(path.name + ".tmp")
    try:
        with tmp_path.open("wb") as file_obj:
            file_obj.write(data)
            file_obj.flush()
            os.fsync(file_obj.fileno())
        os.replace(tmp_path, path)
    finally:
        with suppress(OSError):
            tmp_path.unlink(missing_ok=True)


class _FileStore:
    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory).expanduser()

    def path_for(self, url: str) -> Path:
        return self.directory / cache_key(url)

    def contains(self, url: str) -> bool:
        return self.path_for(url).is_file()

    async def _read(self, url: str) -> bytes:
        return await asyncio.to_thread(self.path_for(url).read_bytes)

    async def _write(self, url: str, data: bytes, *, kind: str) -> None:
        try:
            await asyncio.to_thread(_write_bytes_atomic, self.path_for(url), data)
        except OSError:
            log.warning("cache_write_error", cache=kind, url=url, exc_info=True)


class DocumentCache(_FileStore):
    """Raw document cache implementing DocumentCacheProtocol."""

    def __init__(self, directory: str | Path, transport: TransportProtocol) -> None:
        super().__init__(directory)
        self._transport = transport

    async def fetch(self, url: str) -> Document:
        """Return the cached document for ``url``, fetching it on a miss.

        Newly fetched bytes are persisted before they are returned.
        Raises FetchError when the transport fails.
        """
        if self.contains(url):
            log.info("document_cache_hit", url=url)
            return Document(url=url, data=await self._read(url), from_cache=True)

        log.info("document_loading", url=url)
        data = await self._transport.get(url)
        await self._write(url, data, kind="document")
        log.info("document_loaded", url=url, size=len(data))
        return Document(url=url, data=data)


class ParseCache(_FileStore):
    """Finished-parse cache implementing ParseCacheProtocol."""

    async def get(self, url: str) -> ParseResult | None:
        """Read a parse entry. Returns ``None`` on cache miss or read failure."""
        if not self.contains(url):
            return None
        try:
            raw = await self._read(url)
            return ParseResult.model_validate_json(raw)
        except (OSError, ValidationError):
            log.warning("cache_read_error", cache="parse", url=url, exc_info=True)
            return None

    async def put(self, result: ParseResult) -> None:
        """Write a parse entry. Non-fatal on failure."""
        try:
            payload = json.dumps(result.model_dump(mode="json"), sort_keys=True).encode("utf-8")
        except (TypeError, ValueError):
            log.warning("cache_write_error", cache="parse", url=result.url, exc_info=True)
            return
        await self._write(result.url, payload, kind="parse")
