"""IDL fragment extractor for spec markup.

Spec documents embed IDL in ``<pre>`` blocks, optionally wrapped in a single
``<code>`` element. A block only counts as a fragment when its body contains
no further markup; highlighted or linkified IDL (``<pre><span>...``) is
skipped rather than stripped.
"""

from __future__ import annotations

import re


def _tag(name: str, *, close: bool = False) -> str:
    return "<" + ("/" if close else "") + name + r"\b[^>]*>"


# Either <pre><code>BODY</code></pre> or <pre>BODY</pre>. The nested tag pair
# is all-or-nothing so an unmatched <code> never leaks into the fragment.
_FRAGMENT_RE = re.compile(
    _tag("pre")
    + "(?:"
    + _tag("code")
    + "(?P<coded>[^<]*)"
    + _tag("code", close=True)
    + "|(?P<bare>[^<]*))"
    + _tag("pre", close=True),
    re.IGNORECASE,
)


def extract_fragments(text: str) -> list[str]:
    """Return the candidate IDL fragments of a document, in document order.

    Returns an empty list when the document contains no matching block.
    """
    fragments: list[str] = []
    for match in _FRAGMENT_RE.finditer(text):
        coded = match.group("coded")
        fragments.append(coded if coded is not None else match.group("bare"))
    return fragments
