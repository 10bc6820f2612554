"""
Enforce per-module import styles.

`ImportStyleRule` walks a program and visits the four statement families that
reference another module (static imports, dynamic imports, `require()` loads
and `export ... from`). For each one it classifies the binding styles actually
used, looks up the allowed styles for the module, and reports a `Violation`
when they disagree. Violations against a namespace-only policy carry a
`RewritePlan` from the namespace fixer when the statement can be rewritten
safely.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence

from analyzer import AnalysisResult, analyze_bindings, get_string_if_constant
from frontend import FrontEndResult

from .config import ImportStyleOptions
from .fixer import RewritePlan, build_namespace_fix
from .policy import AllowedStyles, ModuleStylePolicy, resolve_policy
from .styles import (
    NAMESPACE,
    UNASSIGNED,
    ImportStyle,
    StatementKind,
    StyleSet,
    assignment_target_styles,
    awaited_dynamic_import,
    dynamic_import_source,
    export_declaration_styles,
    import_declaration_styles,
    is_require_call,
)

logger = logging.getLogger(__name__)

RULE_ID = "import-style"
MESSAGE = "Use {allowed_styles} import for module `{module_name}`."


@dataclass(frozen=True)
class Violation:
    node: Dict[str, Any]
    kind: StatementKind
    module_name: str
    allowed_styles: AllowedStyles
    actual_styles: StyleSet
    message: str
    line: Optional[int]
    column: Optional[int]
    fix: Optional[RewritePlan] = None

    @property
    def fixable(self) -> bool:
        return self.fix is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rule": RULE_ID,
            "kind": self.kind.value,
            "module": self.module_name,
            "message": self.message,
            "line": self.line,
            "column": self.column,
            "allowedStyles": [style.value for style in self.allowed_styles],
            "actualStyles": sorted(style.value for style in self.actual_styles),
            "fixable": self.fixable,
        }


def format_disjunction(items: Sequence[str]) -> str:
    """English "or" list: `a`, `a or b`, `a, b, or c`."""
    if not items:
        return ""
    if len(items) == 1:
        return items[0]
    if len(items) == 2:
        return f"{items[0]} or {items[1]}"
    return ", ".join(items[:-1]) + f", or {items[-1]}"


def effective_allowed_styles(allowed: Iterable[ImportStyle], is_require: bool) -> StyleSet:
    """
    Allowed styles for the pass/fail comparison.

    `require()` cannot tell a compiled ES module's default export from a
    CommonJS export object, so allowing `default` for a require-style load
    also allows binding the whole module (`namespace`).
    """
    effective = frozenset(allowed)
    if (
        is_require
        and ImportStyle.DEFAULT in effective
        and ImportStyle.NAMESPACE not in effective
    ):
        effective = effective | NAMESPACE
    return effective


def is_fixable_policy(allowed: Iterable[ImportStyle]) -> bool:
    allowed = frozenset(allowed)
    return ImportStyle.NAMESPACE in allowed and ImportStyle.NAMED not in allowed


def _location(node: Dict[str, Any]):
    start = (node.get("loc") or {}).get("start") or {}
    return start.get("line"), start.get("column")


class ImportStyleRule:
    """Visitor reporting import-style violations for one program at a time."""

    def __init__(
        self,
        options: Optional[ImportStyleOptions] = None,
        *,
        policy: Optional[ModuleStylePolicy] = None,
    ) -> None:
        self.options = options or ImportStyleOptions()
        self.policy = policy if policy is not None else resolve_policy(self.options)
        self._source = ""
        self._analysis: Optional[AnalysisResult] = None
        self._ancestors: List[Dict[str, Any]] = []
        self._violations: List[Violation] = []

    def check(
        self,
        program: Dict[str, Any],
        source: str,
        analysis: Optional[AnalysisResult] = None,
    ) -> List[Violation]:
        """Return the violations found in `program`, in source order."""
        self._source = source
        self._analysis = analysis or analyze_bindings(program)
        self._ancestors = []
        self._violations = []
        self._visit(program)
        return list(self._violations)

    # ------------------------------------------------------------------ helpers

    def _visit(self, node: Any) -> None:
        if isinstance(node, list):
            for element in node:
                self._visit(element)
            return
        if not isinstance(node, dict):
            return

        handler = getattr(self, f"_visit_{node.get('type')}", None)
        if handler:
            handler(node)

        self._ancestors.append(node)
        for key, value in node.items():
            if key in {"loc", "range", "type"}:
                continue
            self._visit(value)
        self._ancestors.pop()

    def _parent(self, depth: int = 1) -> Dict[str, Any]:
        if len(self._ancestors) < depth:
            return {}
        return self._ancestors[-depth]

    def _module_name(self, source_node: Any, statement: Dict[str, Any]) -> Optional[str]:
        scope = self._analysis.scope_of(statement) if self._analysis else None
        return get_string_if_constant(source_node, scope)

    def report(
        self,
        node: Dict[str, Any],
        kind: StatementKind,
        module_name: Optional[str],
        actual_styles: StyleSet,
        *,
        is_require: bool = False,
        declaration: Optional[Dict[str, Any]] = None,
    ) -> Optional[Violation]:
        if module_name is None:
            logger.debug("Skipping %s: module name is not a constant string", kind.value)
            return None
        allowed = self.policy.get(module_name)
        if not allowed:
            return None

        if actual_styles <= effective_allowed_styles(allowed, is_require):
            return None

        fix = None
        if is_fixable_policy(allowed):
            fix = build_namespace_fix(
                node,
                module_name=module_name,
                source=self._source,
                analysis=self._analysis,
                declaration=declaration,
            )

        line, column = _location(node)
        violation = Violation(
            node=node,
            kind=kind,
            module_name=module_name,
            allowed_styles=allowed,
            actual_styles=actual_styles,
            message=MESSAGE.format(
                allowed_styles=format_disjunction([style.value for style in allowed]),
                module_name=module_name,
            ),
            line=line,
            column=column,
            fix=fix,
        )
        self._violations.append(violation)
        return violation

    # ----------------------------------------------------------------- visitors

    def _visit_ImportDeclaration(self, node: Dict[str, Any]) -> None:
        if not self.options.check_import:
            return
        self.report(
            node,
            StatementKind.STATIC_IMPORT,
            self._module_name(node.get("source"), node),
            import_declaration_styles(node),
        )

    def _visit_dynamic_import(self, node: Dict[str, Any]) -> None:
        if not self.options.check_dynamic_import:
            return
        source_node = dynamic_import_source(node)
        if source_node is None:
            return
        parent = self._parent()
        if (
            parent.get("type") == "AwaitExpression"
            and parent.get("argument") is node
            and self._parent(2).get("type") == "VariableDeclarator"
            and self._parent(2).get("init") is parent
        ):
            # Classified by its assignment target in _visit_VariableDeclarator.
            return
        self.report(
            node,
            StatementKind.DYNAMIC_IMPORT,
            self._module_name(source_node, node),
            UNASSIGNED,
        )

    _visit_ImportExpression = _visit_dynamic_import

    def _visit_CallExpression(self, node: Dict[str, Any]) -> None:
        if dynamic_import_source(node) is not None:
            self._visit_dynamic_import(node)
            return
        if not self.options.check_require or not is_require_call(node):
            return
        parent = self._parent()
        if parent.get("type") != "ExpressionStatement" or parent.get("expression") is not node:
            return
        self.report(
            node,
            StatementKind.REQUIRE,
            self._module_name(node["arguments"][0], node),
            UNASSIGNED,
            is_require=True,
        )

    def _visit_VariableDeclarator(self, node: Dict[str, Any]) -> None:
        declaration = self._parent()
        init = node.get("init")

        if self.options.check_dynamic_import:
            dynamic_import = awaited_dynamic_import(node)
            if dynamic_import is not None:
                module_name = self._module_name(dynamic_import_source(dynamic_import), node)
                if module_name:
                    self.report(
                        node,
                        StatementKind.DYNAMIC_IMPORT,
                        module_name,
                        assignment_target_styles(node.get("id")),
                        declaration=declaration,
                    )
                return

        if self.options.check_require and is_require_call(init):
            module_name = self._module_name(init["arguments"][0], node)
            if module_name:
                self.report(
                    node,
                    StatementKind.REQUIRE,
                    module_name,
                    assignment_target_styles(node.get("id")),
                    is_require=True,
                    declaration=declaration,
                )

    def _visit_ExportAllDeclaration(self, node: Dict[str, Any]) -> None:
        if not self.options.check_export_from:
            return
        self.report(
            node,
            StatementKind.EXPORT_FROM,
            self._module_name(node.get("source"), node),
            NAMESPACE,
        )

    def _visit_ExportNamedDeclaration(self, node: Dict[str, Any]) -> None:
        if not self.options.check_export_from or node.get("source") is None:
            return
        self.report(
            node,
            StatementKind.EXPORT_FROM,
            self._module_name(node.get("source"), node),
            export_declaration_styles(node),
        )


def check_import_style(
    frontend_result: FrontEndResult,
    options: Optional[ImportStyleOptions] = None,
    *,
    policy: Optional[ModuleStylePolicy] = None,
) -> List[Violation]:
    """Run the import-style rule over a front-end result."""
    if not frontend_result.has_ast:
        return []
    rule = ImportStyleRule(options, policy=policy)
    return rule.check(
        frontend_result.parse.ast,
        frontend_result.source,
        frontend_result.analysis,
    )


__all__ = [
    "ImportStyleRule",
    "MESSAGE",
    "RULE_ID",
    "Violation",
    "check_import_style",
    "effective_allowed_styles",
    "format_disjunction",
    "is_fixable_policy",
]
