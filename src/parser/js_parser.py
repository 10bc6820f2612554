"""
JavaScript parsing utilities built on top of the Python `esprima` port.

`parse_js` returns the JSON-compatible ESTree dictionary together with the
recoverable errors esprima reported. Module-reference checks need character
ranges on every node, so `range` and `loc` are always requested. Sources parse
as ES modules by default since `import`/`export` statements are the main input.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional

import esprima

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParseError:
    """Represents a recoverable parsing issue detected by esprima."""

    description: str
    line: Optional[int]
    column: Optional[int]


@dataclass(frozen=True)
class ParseResult:
    """The parsed program plus metadata about the parse run."""

    ast: Any
    errors: List[ParseError]
    source: str
    source_name: str

    @property
    def ok(self) -> bool:
        return self.ast is not None


def parse_js(
    source: str,
    *,
    source_name: str = "<input>",
    tolerant: bool = True,
    source_type: str = "module",
) -> ParseResult:
    """
    Parse JavaScript source text into an esprima AST.

    Args:
        source: Raw JavaScript source code.
        source_name: Optional label used for diagnostics (defaults to `<input>`).
        tolerant: When True, esprima performs error recovery instead of raising.
        source_type: `"module"` (default) or `"script"`; only modules accept
            static `import`/`export` declarations.

    Returns:
        ParseResult containing the AST and any recoverable errors.

    Raises:
        esprima.Error: If parsing fails and `tolerant` is False.
    """
    if source_type not in ("module", "script"):
        raise ValueError(f"Unknown source type: {source_type!r}")

    options = dict(loc=True, range=True, tolerant=tolerant)
    parser = esprima.parseModule if source_type == "module" else esprima.parseScript
    try:
        program = parser(source, **options)
    except esprima.Error as exc:
        if not tolerant:
            raise
        logger.debug("esprima gave up on %s: %s", source_name, exc)
        return ParseResult(
            ast=None,
            errors=[
                ParseError(
                    description=getattr(exc, "description", None) or str(exc),
                    line=getattr(exc, "lineNumber", None),
                    column=getattr(exc, "column", None),
                )
            ],
            source=source,
            source_name=source_name,
        )

    raw_ast = program.toDict() if hasattr(program, "toDict") else program

    errors: List[ParseError] = []
    if tolerant and isinstance(raw_ast, dict):
        for error in raw_ast.get("errors") or []:
            errors.append(
                ParseError(
                    description=error.get("description"),
                    line=error.get("lineNumber"),
                    column=error.get("column"),
                )
            )

    return ParseResult(
        ast=raw_ast,
        errors=errors,
        source=source,
        source_name=source_name,
    )


__all__ = ["ParseError", "ParseResult", "parse_js"]
