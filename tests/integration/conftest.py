"""Integration test fixtures.

Runs the real pipeline (httpx transport, on-disk caches, manifest writer)
with HTTP mocked by respx. The grammar parser is the fake from
tests/conftest.py so these tests exercise orchestration, not widlparser.
"""

from __future__ import annotations

import pytest

SPEC_A = "https://specs.example/a.html"
SPEC_B = "https://specs.example/b.html"
SPEC_DOWN = "https://specs.example/down.html"
RAW_IDL = "https://specs.example/raw.idl"


@pytest.fixture()
def pages() -> dict[str, bytes]:
    return {
        SPEC_A: (
            b"<html><body><h1>Spec A</h1>"
            b"<pre class='idl'><code>interface Alpha {\n"
            b"  attribute sequence&lt;long&gt; values;\n};"
            b"</code></pre>"
            b"<p>Example:</p><pre>const a = new Alpha();</pre>"
            b"</body></html>"
        ),
        SPEC_B: (
            b"<pre>dictionary BetaInit { DOMString label = &quot;b&quot;; };</pre>"
            b"<pre>enum BetaMode { &quot;on&quot;, &quot;off&quot; };</pre>"
        ),
        RAW_IDL: b"interface Raw {};\n",
    }
