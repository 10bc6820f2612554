"""
Apply fix plans to source text.

Each violation's `RewritePlan` is applied atomically: either all of its edits
land or none do. Plans are taken in source order, and a plan overlapping one
already taken in this pass is skipped so a later pass (after re-checking the
rewritten source) can pick it up. So is a plan binding a namespace name that
another plan in this pass already binds, since both names were chosen against
the same unfixed program.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import Iterable, List, Set, Tuple

from rules import RewritePlan, TextEdit, Violation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FixResult:
    output: str
    applied: List[Violation]
    skipped: List[Violation]

    @property
    def changed(self) -> bool:
        return bool(self.applied)


def _overlaps(plan: RewritePlan, taken: Iterable[Tuple[int, int]]) -> bool:
    for edit in plan.edits:
        for start, end in taken:
            if edit.start < end and start < edit.end:
                return True
    return False


def apply_fixes(source: str, violations: Iterable[Violation]) -> FixResult:
    """
    Render `source` with the fixes of `violations` applied.
    """
    fixable = sorted(
        (violation for violation in violations if violation.fix is not None),
        key=lambda violation: violation.fix.span,
    )

    applied: List[Violation] = []
    skipped: List[Violation] = []
    taken: List[Tuple[int, int]] = []
    namespaces: Set[str] = set()
    edits: List[TextEdit] = []
    for violation in fixable:
        plan = violation.fix
        if plan.namespace in namespaces or _overlaps(plan, taken):
            skipped.append(violation)
            continue
        applied.append(violation)
        namespaces.add(plan.namespace)
        taken.extend((edit.start, edit.end) for edit in plan.edits)
        edits.extend(plan.edits)

    buffer = io.StringIO()
    cursor = 0
    for edit in sorted(edits, key=lambda edit: edit.start):
        buffer.write(source[cursor:edit.start])
        buffer.write(edit.text)
        cursor = edit.end
    buffer.write(source[cursor:])

    if skipped:
        logger.debug("Deferred %d conflicting fix(es) to the next pass", len(skipped))
    return FixResult(output=buffer.getvalue(), applied=applied, skipped=skipped)


__all__ = ["FixResult", "apply_fixes"]
