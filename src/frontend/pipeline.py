"""
Parse JavaScript and analyze its scopes in one step.

Every import-style check needs the same two artefacts: the esprima AST with
ranges, and the scope tree used to resolve module-name constants and to find
the references a fix must rewrite. `run_frontend` produces both; `load_frontend`
does the same for a file on disk.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from analyzer import AnalysisResult, analyze_bindings
from parser import ParseResult, parse_js

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FrontEndResult:
    """AST, source text and scope analysis of one program."""

    parse: ParseResult
    analysis: Optional[AnalysisResult]

    @property
    def has_ast(self) -> bool:
        return self.parse.ok

    @property
    def source(self) -> str:
        return self.parse.source

    @property
    def source_name(self) -> str:
        return self.parse.source_name

    @property
    def diagnostics(self) -> List[object]:
        """Recovered parse errors followed by analysis issues (`with`, `eval`)."""
        diagnostics: List[object] = list(self.parse.errors)
        if self.analysis:
            diagnostics.extend(self.analysis.issues)
        return diagnostics


def run_frontend(
    source: str,
    *,
    source_name: str = "<input>",
    tolerant: bool = True,
    analyze: bool = True,
    source_type: str = "module",
) -> FrontEndResult:
    """
    Parse `source` and, unless disabled, build its scope tree.

    Args:
        source: JavaScript program text.
        source_name: Label for diagnostics, usually the file path.
        tolerant: Let esprima recover from errors instead of raising.
        analyze: Skip scope analysis when False (classification-only callers).
        source_type: `"module"` or `"script"`.

    Returns:
        FrontEndResult; `analysis` is None when skipped or when no AST came back.
    """
    parse_result = parse_js(
        source,
        source_name=source_name,
        tolerant=tolerant,
        source_type=source_type,
    )
    if not parse_result.ok:
        logger.debug("No AST for %s; skipping scope analysis", source_name)
        return FrontEndResult(parse=parse_result, analysis=None)

    analysis_result = None
    if analyze:
        analysis_result = analyze_bindings(parse_result.ast, source_name=source_name)
    return FrontEndResult(parse=parse_result, analysis=analysis_result)


def load_frontend(
    path: Union[str, Path],
    *,
    tolerant: bool = True,
    source_type: str = "module",
) -> FrontEndResult:
    """Read a UTF-8 file and run `run_frontend` on it.

    Raises:
        OSError: If the file cannot be read.
    """
    path = Path(path)
    source = path.read_text(encoding="utf-8")
    return run_frontend(
        source,
        source_name=str(path),
        tolerant=tolerant,
        source_type=source_type,
    )


__all__ = ["FrontEndResult", "load_frontend", "run_frontend"]
