"""Web IDL grammar parser adapter.

Wraps ``widlparser`` so the pipeline only sees ``ParseOutcome``. widlparser
never raises on bad input: it reports syntax errors through the ``ui``
callback and emits error constructs, so a fragment is accepted only when it
produced neither.
"""

from __future__ import annotations

from typing import Any

from widlparser.constructs import SyntaxError as IdlSyntaxError
from widlparser.parser import Parser

from idlimport.models import ParseOutcome


class _CollectingUI:
    """widlparser user-interface hook that records warnings instead of printing."""

    def __init__(self) -> None:
        self.warnings: list[str] = []

    def warn(self, message: str) -> None:
        self.warnings.append(message.strip())

    def note(self, message: str) -> None:
        pass


def _construct_to_dict(construct: Any) -> dict[str, Any]:
    return {
        "type": construct.idl_type,
        "name": construct.name,
        "idl": str(construct).strip(),
    }


class WidlParser:
    """IDL parser implementing IdlParserProtocol."""

    def parse_fragment(self, text: str) -> ParseOutcome:
        ui = _CollectingUI()
        parser = Parser(text, ui)
        constructs = list(parser.constructs)
        rejected = any(isinstance(construct, IdlSyntaxError) for construct in constructs)
        if ui.warnings or not constructs or rejected:
            return ParseOutcome(accepted=False)
        return ParseOutcome(
            accepted=True,
            definition=[_construct_to_dict(construct) for construct in constructs],
        )
