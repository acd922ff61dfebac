"""End-to-end import runs against mocked HTTP and real on-disk caches."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import httpx
import respx

from idlimport.pipeline import import_http, import_idl, open_state

from .conftest import RAW_IDL, SPEC_A, SPEC_B, SPEC_DOWN

if TYPE_CHECKING:
    from pathlib import Path

    from idlimport.config import Settings
    from tests.conftest import FakeParser


def _mock_routes(pages: dict[str, bytes]) -> dict[str, respx.Route]:
    routes = {
        url: respx.get(url).mock(return_value=httpx.Response(200, content=body))
        for url, body in pages.items()
    }
    routes[SPEC_DOWN] = respx.get(SPEC_DOWN).mock(side_effect=httpx.ConnectError("refused"))
    return routes


class TestImportHttpRun:
    async def test_manifest_contents(
        self, settings: Settings, parser: FakeParser, pages: dict[str, bytes], tmp_path: Path
    ) -> None:
        output = tmp_path / "manifest.json"
        with respx.mock:
            _mock_routes(pages)
            async with open_state(settings, parser=parser) as state:
                summary = await import_http([SPEC_DOWN, SPEC_B, SPEC_A, SPEC_B], output, state)

        manifest = json.loads(output.read_text(encoding="utf-8"))
        assert [entry["url"] for entry in manifest] == [SPEC_A, SPEC_B, SPEC_DOWN]
        assert [p["idl"] for p in manifest[0]["parses"]] == [
            "interface Alpha {\n  attribute sequence<long> values;\n};"
        ]
        assert [p["idl"] for p in manifest[1]["parses"]] == [
            'dictionary BetaInit { DOMString label = "b"; };',
            'enum BetaMode { "on", "off" };',
        ]
        assert manifest[2]["parses"] == []
        assert summary.url_count == 3
        assert summary.fragment_count == 3

    async def test_second_run_is_idempotent(
        self, settings: Settings, parser: FakeParser, pages: dict[str, bytes], tmp_path: Path
    ) -> None:
        urls = [SPEC_A, SPEC_B]
        first_output = tmp_path / "first.json"
        second_output = tmp_path / "second.json"

        with respx.mock:
            routes = _mock_routes(pages)
            async with open_state(settings, parser=parser) as state:
                await import_http(urls, first_output, state)
            parser_calls = len(parser.calls)

            async with open_state(settings, parser=parser) as state:
                await import_http(urls, second_output, state)

        assert first_output.read_bytes() == second_output.read_bytes()
        assert routes[SPEC_A].call_count == 1
        assert routes[SPEC_B].call_count == 1
        assert len(parser.calls) == parser_calls

    async def test_failed_url_is_retried_on_next_run(
        self, settings: Settings, parser: FakeParser, pages: dict[str, bytes], tmp_path: Path
    ) -> None:
        output = tmp_path / "manifest.json"
        with respx.mock:
            routes = _mock_routes(pages)
            async with open_state(settings, parser=parser) as state:
                await import_http([SPEC_DOWN], output, state)
                await import_http([SPEC_DOWN], output, state)
        assert routes[SPEC_DOWN].call_count == 2


class TestImportIdlRun:
    async def test_raw_idl(
        self, settings: Settings, parser: FakeParser, pages: dict[str, bytes], tmp_path: Path
    ) -> None:
        output = tmp_path / "manifest.json"
        with respx.mock:
            _mock_routes(pages)
            async with open_state(settings, parser=parser) as state:
                summary = await import_idl([RAW_IDL, SPEC_DOWN], output, state)

        manifest = json.loads(output.read_text(encoding="utf-8"))
        assert manifest[0] == {"url": SPEC_DOWN, "parses": []}
        assert manifest[1] == {
            "url": RAW_IDL,
            "parses": [{"idl": "interface Raw {};", "length": 18}],
        }
        assert summary.fragment_count == 1
