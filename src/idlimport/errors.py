from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    FETCH_FAILED = "FETCH_FAILED"
    AGGREGATION_FAILED = "AGGREGATION_FAILED"


class IdlImportError(Exception):
    """Base class for failures raised by the import pipeline.

    Per-URL failures are caught by the orchestrator and converted into an
    empty result. Only ``AggregationError`` is allowed to end a run.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        url: str | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.url = url


class FetchError(IdlImportError):
    """Network retrieval of a URL failed. The cause is chained via ``from``."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(ErrorCode.FETCH_FAILED, message, url=url)


class AggregationError(IdlImportError):
    """Serialising or writing the manifest failed."""

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(ErrorCode.AGGREGATION_FAILED, message)
        self.path = path
