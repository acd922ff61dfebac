"""Unit tests for idlimport.entities."""

from __future__ import annotations

import pytest
from structlog.testing import capture_logs

from idlimport.entities import (
    ESCAPES,
    find_unknown_escapes,
    unescape_fragment,
    unescape_fragments,
)


class TestEscapeTable:
    def test_is_read_only(self) -> None:
        with pytest.raises(TypeError):
            ESCAPES["&new;"] = "x"  # type: ignore[index]

    def test_every_key_is_a_well_formed_reference(self) -> None:
        for key in ESCAPES:
            assert key.startswith("&")
            assert key.endswith(";")

    def test_corrected_keys_present(self) -> None:
        assert ESCAPES["&#39;"] == "'"
        assert ESCAPES["&#197;"] == "Å"
        assert ESCAPES["&#237;"] == "í"
        assert ESCAPES["&#357;"] == "ť"

    def test_malformed_keys_absent(self) -> None:
        assert "#39;" not in ESCAPES
        assert "&#197" not in ESCAPES
        assert "&#577;" not in ESCAPES

    def test_named_and_numeric_agree(self) -> None:
        assert ESCAPES["&lt;"] == ESCAPES["&#60;"] == "<"
        assert ESCAPES["&gt;"] == ESCAPES["&#62;"] == ">"
        assert ESCAPES["&amp;"] == ESCAPES["&#38;"] == "&"
        assert ESCAPES["&quot;"] == ESCAPES["&#34;"] == '"'


class TestUnescapeFragment:
    def test_known_references_round_trip(self) -> None:
        assert unescape_fragment("&amp;&lt;x&gt;&amp;") == "&<x>&"

    def test_generic_type(self) -> None:
        text = "attribute sequence&lt;DOMString&gt; names;"
        assert unescape_fragment(text) == "attribute sequence<DOMString> names;"

    def test_numeric_reference(self) -> None:
        assert unescape_fragment("a &#40;b&#41;") == "a (b)"

    def test_unknown_reference_left_in_place(self) -> None:
        assert unescape_fragment("x &foo; y") == "x &foo; y"

    def test_unknown_reference_logs_warning(self) -> None:
        with capture_logs() as logs:
            unescape_fragment("x &foo; y")
        warnings = [entry for entry in logs if entry["event"] == "unknown_escape"]
        assert len(warnings) == 1
        assert warnings[0]["log_level"] == "warning"
        assert warnings[0]["reference"] == "&foo;"

    def test_mixed_known_and_unknown(self) -> None:
        assert unescape_fragment("&lt;&bogus;&gt;") == "<&bogus;>"

    def test_replacement_is_global_within_fragment(self) -> None:
        assert unescape_fragment("&lt;a&gt; &lt;b&gt; &lt;c&gt;") == "<a> <b> <c>"

    def test_text_without_references_unchanged(self) -> None:
        text = "interface A { attribute long x; };"
        assert unescape_fragment(text) == text

    def test_bare_ampersand_untouched(self) -> None:
        assert unescape_fragment("a & b") == "a & b"

    def test_soft_hyphen_removed(self) -> None:
        assert unescape_fragment("Event&shy;Target") == "EventTarget"

    def test_deterministic(self) -> None:
        text = "&amp;lt; &lt;&#62;&copy;&zzz;&gt;&amp;"
        results = {unescape_fragment(text) for _ in range(20)}
        assert len(results) == 1


class TestFindUnknownEscapes:
    def test_reports_each_unknown_once_in_order(self) -> None:
        assert find_unknown_escapes("&foo; &lt; &bar; &foo;") == ["&foo;", "&bar;"]

    def test_none_unknown(self) -> None:
        assert find_unknown_escapes("&lt;&gt;") == []


def test_unescape_fragments_preserves_order() -> None:
    assert unescape_fragments(["&lt;1", "2&gt;", "3"]) == ["<1", "2>", "3"]
