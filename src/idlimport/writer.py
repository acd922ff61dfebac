"""Manifest aggregation and output.

The manifest is written once, after every URL has resolved. Unlike the
per-URL stages there is no failure isolation here: any serialisation or
write error raises AggregationError and ends the run.
"""

from __future__ import annotations

import json
import os
from contextlib import suppress
from pathlib import Path

import structlog

from idlimport.errors import AggregationError
from idlimport.models import ImportManifest, ImportSummary, ParseResult

log = structlog.get_logger()


def serialise_manifest(manifest: ImportManifest) -> bytes:
    """Stable JSON encoding: sorted keys, so cached and fresh parses compare equal."""
    return (
        json.dumps(manifest.model_dump(mode="json"), sort_keys=True, indent=2, ensure_ascii=False)
        + "\n"
    ).encode("utf-8")


def write_manifest(results: list[ParseResult], output_path: str | Path) -> ImportSummary:
    """Serialise ``results`` to ``output_path`` in a single write and report counts."""
    path = Path(output_path).expanduser()
    manifest = ImportManifest(results)

    try:
        payload = serialise_manifest(manifest)
    except (TypeError, ValueError) as exc:
        raise AggregationError(f"Could not serialise manifest: {exc}", path=str(path)) from exc

    tmp_path = path.with_name(path.name + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path.write_bytes(payload)
        os.replace(tmp_path, path)
    except OSError as exc:
        raise AggregationError(
            f"Could not write manifest to {path}: {exc}", path=str(path)
        ) from exc
    finally:
        with suppress(OSError):
            tmp_path.unlink(missing_ok=True)

    summary = ImportSummary(
        url_count=len(manifest.root),
        fragment_count=manifest.fragment_count,
        output_path=str(path),
    )
    log.info(
        "manifest_written",
        fragment_count=summary.fragment_count,
        url_count=summary.url_count,
        path=summary.output_path,
    )
    return summary
