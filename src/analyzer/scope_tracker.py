"""
Scope analysis for ES2017 JavaScript ASTs.

The analyzer walks an esprima-compatible AST, builds a tree of lexical scopes,
records the bindings each scope introduces (`var`/`let`/`const`, functions,
classes, parameters, catch parameters and imports) and every identifier use
as a `Reference`. References are resolved lazily through the scope chain, so
hoisted declarations that appear after a use still resolve correctly.

Constructs that make static resolution unreliable (`with`, direct `eval`) are
reported as analysis issues; consumers that rewrite references should refuse
to touch programs carrying them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Set

logger = logging.getLogger(__name__)


class ScopeType(str, Enum):
    GLOBAL = "global"
    MODULE = "module"
    FUNCTION = "function"
    BLOCK = "block"
    CATCH = "catch"
    CLASS = "class"


class BindingKind(str, Enum):
    VAR = "var"
    LET = "let"
    CONST = "const"
    FUNCTION = "function"
    CLASS = "class"
    PARAMETER = "parameter"
    CATCH_PARAMETER = "catch_parameter"
    IMPORT = "import"


class ReferenceContext(str, Enum):
    """Syntactic position of an identifier use."""

    READ = "read"
    WRITE = "write"
    # `{name}` in an object literal; the identifier doubles as the key.
    SHORTHAND = "shorthand"
    # `export {name}` without a `from` clause.
    EXPORT = "export"


_HOISTING_SCOPES = (ScopeType.FUNCTION, ScopeType.MODULE, ScopeType.GLOBAL)
_REST_PROPERTY_TYPES = {"RestElement", "RestProperty", "ExperimentalRestProperty"}


@dataclass(frozen=True)
class SourcePosition:
    line: Optional[int]
    column: Optional[int]


@dataclass(frozen=True)
class Binding:
    """Represents a single identifier binding within a scope."""

    name: str
    kind: BindingKind
    loc: SourcePosition
    node: Dict[str, Any]
    # Declarator, import declaration, function or class that introduced it.
    definition: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class Reference:
    """A single use of an identifier."""

    name: str
    node: Dict[str, Any]
    scope: "Scope" = field(repr=False, compare=False)
    context: ReferenceContext = ReferenceContext.READ

    def resolve(self) -> Optional[Binding]:
        return self.scope.lookup(self.name)


@dataclass
class Scope:
    """A lexical scope containing bindings, references and child scopes."""

    scope_id: str
    scope_type: ScopeType
    node: Dict[str, Any]
    parent: Optional["Scope"] = field(default=None, repr=False)
    bindings: Dict[str, List[Binding]] = field(default_factory=dict)
    references: List[Reference] = field(default_factory=list)
    children: List["Scope"] = field(default_factory=list)

    def add_binding(self, binding: Binding) -> None:
        """Register a binding within the current scope."""
        self.bindings.setdefault(binding.name, []).append(binding)

    def add_reference(self, reference: Reference) -> None:
        self.references.append(reference)

    def add_child(self, child: "Scope") -> None:
        self.children.append(child)

    def chain(self) -> Iterator["Scope"]:
        """Yield this scope followed by its ancestors up to the root."""
        scope: Optional[Scope] = self
        while scope is not None:
            yield scope
            scope = scope.parent

    def walk(self) -> Iterator["Scope"]:
        """Yield this scope and all nested scopes in pre-order."""
        yield self
        for child in self.children:
            yield from child.walk()

    def lookup(self, name: str) -> Optional[Binding]:
        """Resolve `name` to the nearest binding visible from this scope."""
        for scope in self.chain():
            bindings = scope.bindings.get(name)
            if bindings:
                return bindings[0]
        return None


@dataclass(frozen=True)
class AnalysisIssue:
    code: str
    message: str
    loc: SourcePosition


@dataclass(frozen=True)
class AnalysisResult:
    source_name: str
    root_scope: Scope
    issues: List[AnalysisIssue]
    node_scopes: Dict[int, Scope] = field(default_factory=dict, repr=False)

    def flatten_scopes(self) -> Iterator[Scope]:
        """Yield scopes in depth-first order."""
        return self.root_scope.walk()

    def scope_of(self, node: Dict[str, Any]) -> Scope:
        """Return the innermost scope enclosing `node`."""
        return self.node_scopes.get(id(node), self.root_scope)

    def unresolved_names(self) -> Set[str]:
        """Names referenced anywhere in the program without a binding."""
        return {
            reference.name
            for scope in self.flatten_scopes()
            for reference in scope.references
            if reference.resolve() is None
        }


class _BindingAnalyzer:
    def __init__(self, source_name: str) -> None:
        self._source_name = source_name
        self._scope_counter = 0
        self._issues: List[AnalysisIssue] = []
        self._node_scopes: Dict[int, Scope] = {}

    def analyze(self, ast: Dict[str, Any]) -> AnalysisResult:
        root_type = ScopeType.MODULE if ast.get("sourceType") == "module" else ScopeType.GLOBAL
        root_scope = self._new_scope(root_type, ast, parent=None)
        self._record(ast, root_scope)
        self._visit(ast.get("body", []), root_scope)
        return AnalysisResult(
            source_name=self._source_name,
            root_scope=root_scope,
            issues=self._issues,
            node_scopes=self._node_scopes,
        )

    # ------------------------------------------------------------------ helpers

    def _new_scope(
        self, scope_type: ScopeType, node: Dict[str, Any], parent: Optional[Scope]
    ) -> Scope:
        scope_id = f"S{self._scope_counter}"
        self._scope_counter += 1
        scope = Scope(scope_id=scope_id, scope_type=scope_type, node=node, parent=parent)
        if parent:
            parent.add_child(scope)
        return scope

    @staticmethod
    def _source_position(node: Dict[str, Any]) -> SourcePosition:
        loc = node.get("loc") or {}
        start = loc.get("start") or {}
        return SourcePosition(
            line=start.get("line"),
            column=start.get("column"),
        )

    @staticmethod
    def _hoisting_scope(scope: Scope) -> Scope:
        while scope.scope_type not in _HOISTING_SCOPES and scope.parent is not None:
            scope = scope.parent
        return scope

    def _record(self, node: Dict[str, Any], scope: Scope) -> None:
        self._node_scopes[id(node)] = scope

    def _add_issue(self, code: str, message: str, node: Dict[str, Any]) -> None:
        logger.debug("%s: %s", self._source_name, message)
        self._issues.append(
            AnalysisIssue(code=code, message=message, loc=self._source_position(node))
        )

    def _bind(
        self,
        identifier: Dict[str, Any],
        scope: Scope,
        kind: BindingKind,
        definition: Optional[Dict[str, Any]],
    ) -> None:
        scope.add_binding(
            Binding(
                name=identifier.get("name"),
                kind=kind,
                loc=self._source_position(identifier),
                node=identifier,
                definition=definition,
            )
        )

    def _reference(
        self,
        identifier: Dict[str, Any],
        scope: Scope,
        context: ReferenceContext = ReferenceContext.READ,
    ) -> None:
        self._record(identifier, scope)
        scope.add_reference(
            Reference(
                name=identifier.get("name"),
                node=identifier,
                scope=scope,
                context=context,
            )
        )

    def _visit(self, node: Any, scope: Scope) -> None:
        if node is None:
            return
        if isinstance(node, list):
            for element in node:
                self._visit(element, scope)
            return
        if not isinstance(node, dict):
            return

        self._record(node, scope)
        handler = getattr(self, f"_visit_{node.get('type')}", None)
        if handler:
            handler(node, scope)
        else:
            self._generic_visit(node, scope)

    def _generic_visit(self, node: Dict[str, Any], scope: Scope) -> None:
        for key, value in node.items():
            if key in {"loc", "range", "type"}:
                continue
            self._visit(value, scope)

    def _declare_pattern(
        self,
        pattern: Any,
        binding_scope: Scope,
        expression_scope: Scope,
        kind: BindingKind,
        definition: Optional[Dict[str, Any]],
    ) -> None:
        """Bind every identifier in a declaration pattern."""
        if not isinstance(pattern, dict):
            return
        self._record(pattern, expression_scope)
        pattern_type = pattern.get("type")
        if pattern_type == "Identifier":
            self._bind(pattern, binding_scope, kind, definition)
        elif pattern_type == "ObjectPattern":
            for prop in pattern.get("properties", []):
                if prop.get("type") in _REST_PROPERTY_TYPES:
                    target = prop.get("argument")
                else:
                    if prop.get("computed"):
                        self._visit(prop.get("key"), expression_scope)
                    target = prop.get("value")
                self._declare_pattern(target, binding_scope, expression_scope, kind, definition)
        elif pattern_type == "ArrayPattern":
            for element in pattern.get("elements", []):
                self._declare_pattern(element, binding_scope, expression_scope, kind, definition)
        elif pattern_type == "AssignmentPattern":
            self._declare_pattern(
                pattern.get("left"), binding_scope, expression_scope, kind, definition
            )
            self._visit(pattern.get("right"), expression_scope)
        elif pattern_type == "RestElement":
            self._declare_pattern(
                pattern.get("argument"), binding_scope, expression_scope, kind, definition
            )

    def _assign_pattern(self, pattern: Any, scope: Scope) -> None:
        """Record write references for an assignment target."""
        if not isinstance(pattern, dict):
            return
        pattern_type = pattern.get("type")
        if pattern_type == "Identifier":
            self._reference(pattern, scope, ReferenceContext.WRITE)
        elif pattern_type == "ObjectPattern":
            self._record(pattern, scope)
            for prop in pattern.get("properties", []):
                if prop.get("type") in _REST_PROPERTY_TYPES:
                    self._assign_pattern(prop.get("argument"), scope)
                    continue
                if prop.get("computed"):
                    self._visit(prop.get("key"), scope)
                self._assign_pattern(prop.get("value"), scope)
        elif pattern_type == "ArrayPattern":
            self._record(pattern, scope)
            for element in pattern.get("elements", []):
                self._assign_pattern(element, scope)
        elif pattern_type == "AssignmentPattern":
            self._assign_pattern(pattern.get("left"), scope)
            self._visit(pattern.get("right"), scope)
        elif pattern_type == "RestElement":
            self._assign_pattern(pattern.get("argument"), scope)
        else:
            # Member expressions and the like are ordinary expressions.
            self._visit(pattern, scope)

    def _visit_function(self, node: Dict[str, Any], function_scope: Scope) -> None:
        for param in node.get("params", []):
            self._declare_pattern(
                param, function_scope, function_scope, BindingKind.PARAMETER, node
            )
        body = node.get("body")
        if isinstance(body, dict) and body.get("type") == "BlockStatement":
            self._record(body, function_scope)
            self._visit(body.get("body", []), function_scope)
        else:
            self._visit(body, function_scope)

    # ----------------------------------------------------------------- visitors

    def _visit_Identifier(self, node: Dict[str, Any], scope: Scope) -> None:
        self._reference(node, scope)

    def _visit_BlockStatement(self, node: Dict[str, Any], scope: Scope) -> None:
        block_scope = self._new_scope(ScopeType.BLOCK, node, scope)
        self._visit(node.get("body", []), block_scope)

    def _visit_VariableDeclaration(self, node: Dict[str, Any], scope: Scope) -> None:
        kind = BindingKind(node.get("kind", "var"))
        binding_scope = self._hoisting_scope(scope) if kind == BindingKind.VAR else scope
        for declarator in node.get("declarations", []):
            self._record(declarator, scope)
            self._declare_pattern(declarator.get("id"), binding_scope, scope, kind, declarator)
            # Visit initializer to catch nested functions etc.
            self._visit(declarator.get("init"), scope)

    def _visit_ImportDeclaration(self, node: Dict[str, Any], scope: Scope) -> None:
        for specifier in node.get("specifiers", []):
            self._record(specifier, scope)
            local = specifier.get("local")
            if isinstance(local, dict):
                self._bind(local, scope, BindingKind.IMPORT, node)

    def _visit_ExportNamedDeclaration(self, node: Dict[str, Any], scope: Scope) -> None:
        self._visit(node.get("declaration"), scope)
        if node.get("source") is not None:
            return
        for specifier in node.get("specifiers", []):
            self._record(specifier, scope)
            local = specifier.get("local")
            if isinstance(local, dict) and local.get("type") == "Identifier":
                self._reference(local, scope, ReferenceContext.EXPORT)

    def _visit_ExportAllDeclaration(self, node: Dict[str, Any], scope: Scope) -> None:
        return

    def _visit_FunctionDeclaration(self, node: Dict[str, Any], scope: Scope) -> None:
        identifier = node.get("id")
        if isinstance(identifier, dict) and identifier.get("type") == "Identifier":
            self._bind(identifier, scope, BindingKind.FUNCTION, node)
        function_scope = self._new_scope(ScopeType.FUNCTION, node, scope)
        self._visit_function(node, function_scope)

    def _visit_FunctionExpression(self, node: Dict[str, Any], scope: Scope) -> None:
        function_scope = self._new_scope(ScopeType.FUNCTION, node, scope)
        identifier = node.get("id")
        if isinstance(identifier, dict) and identifier.get("type") == "Identifier":
            # Named function expressions bind the name within the inner scope.
            self._bind(identifier, function_scope, BindingKind.FUNCTION, node)
        self._visit_function(node, function_scope)

    def _visit_ArrowFunctionExpression(self, node: Dict[str, Any], scope: Scope) -> None:
        function_scope = self._new_scope(ScopeType.FUNCTION, node, scope)
        self._visit_function(node, function_scope)

    def _visit_ClassDeclaration(self, node: Dict[str, Any], scope: Scope) -> None:
        identifier = node.get("id")
        if isinstance(identifier, dict) and identifier.get("type") == "Identifier":
            self._bind(identifier, scope, BindingKind.CLASS, node)
        self._visit(node.get("superClass"), scope)
        class_scope = self._new_scope(ScopeType.CLASS, node, scope)
        self._visit(node.get("body"), class_scope)

    def _visit_ClassExpression(self, node: Dict[str, Any], scope: Scope) -> None:
        self._visit(node.get("superClass"), scope)
        class_scope = self._new_scope(ScopeType.CLASS, node, scope)
        identifier = node.get("id")
        if isinstance(identifier, dict) and identifier.get("type") == "Identifier":
            self._bind(identifier, class_scope, BindingKind.CLASS, node)
        self._visit(node.get("body"), class_scope)

    def _visit_MethodDefinition(self, node: Dict[str, Any], scope: Scope) -> None:
        if node.get("computed"):
            self._visit(node.get("key"), scope)
        self._visit(node.get("value"), scope)

    def _visit_Property(self, node: Dict[str, Any], scope: Scope) -> None:
        if node.get("computed"):
            self._visit(node.get("key"), scope)
        value = node.get("value")
        if (
            node.get("shorthand")
            and isinstance(value, dict)
            and value.get("type") == "Identifier"
        ):
            self._reference(value, scope, ReferenceContext.SHORTHAND)
            return
        self._visit(value, scope)

    def _visit_MemberExpression(self, node: Dict[str, Any], scope: Scope) -> None:
        self._visit(node.get("object"), scope)
        if node.get("computed"):
            self._visit(node.get("property"), scope)

    def _visit_MetaProperty(self, node: Dict[str, Any], scope: Scope) -> None:
        return

    def _visit_LabeledStatement(self, node: Dict[str, Any], scope: Scope) -> None:
        self._visit(node.get("body"), scope)

    def _visit_BreakStatement(self, node: Dict[str, Any], scope: Scope) -> None:
        return

    def _visit_ContinueStatement(self, node: Dict[str, Any], scope: Scope) -> None:
        return

    def _visit_AssignmentExpression(self, node: Dict[str, Any], scope: Scope) -> None:
        self._assign_pattern(node.get("left"), scope)
        self._visit(node.get("right"), scope)

    def _visit_UpdateExpression(self, node: Dict[str, Any], scope: Scope) -> None:
        self._assign_pattern(node.get("argument"), scope)

    def _visit_ForStatement(self, node: Dict[str, Any], scope: Scope) -> None:
        loop_scope = self._loop_scope(node, node.get("init"), scope)
        self._visit(node.get("init"), loop_scope)
        self._visit(node.get("test"), loop_scope)
        self._visit(node.get("update"), loop_scope)
        self._visit(node.get("body"), loop_scope)

    def _visit_ForInStatement(self, node: Dict[str, Any], scope: Scope) -> None:
        loop_scope = self._loop_scope(node, node.get("left"), scope)
        left = node.get("left")
        if isinstance(left, dict) and left.get("type") == "VariableDeclaration":
            self._visit(left, loop_scope)
        else:
            self._assign_pattern(left, loop_scope)
        self._visit(node.get("right"), loop_scope)
        self._visit(node.get("body"), loop_scope)

    _visit_ForOfStatement = _visit_ForInStatement

    def _loop_scope(self, node: Dict[str, Any], head: Any, scope: Scope) -> Scope:
        if (
            isinstance(head, dict)
            and head.get("type") == "VariableDeclaration"
            and head.get("kind") in ("let", "const")
        ):
            return self._new_scope(ScopeType.BLOCK, node, scope)
        return scope

    def _visit_SwitchStatement(self, node: Dict[str, Any], scope: Scope) -> None:
        self._visit(node.get("discriminant"), scope)
        switch_scope = self._new_scope(ScopeType.BLOCK, node, scope)
        self._visit(node.get("cases", []), switch_scope)

    def _visit_CallExpression(self, node: Dict[str, Any], scope: Scope) -> None:
        callee = node.get("callee")
        if (
            isinstance(callee, dict)
            and callee.get("type") == "Identifier"
            and callee.get("name") == "eval"
        ):
            self._add_issue(
                code="EVAL_CALL",
                message="Use of eval makes static analysis unreliable.",
                node=callee,
            )
        self._visit(callee, scope)
        self._visit(node.get("arguments", []), scope)

    def _visit_CatchClause(self, node: Dict[str, Any], scope: Scope) -> None:
        catch_scope = self._new_scope(ScopeType.CATCH, node, scope)
        self._declare_pattern(
            node.get("param"), catch_scope, catch_scope, BindingKind.CATCH_PARAMETER, node
        )
        body = node.get("body")
        if isinstance(body, dict):
            self._record(body, catch_scope)
            self._visit(body.get("body", []), catch_scope)

    def _visit_WithStatement(self, node: Dict[str, Any], scope: Scope) -> None:
        self._add_issue(
            code="WITH_STATEMENT",
            message="`with` statement changes scope resolution dynamically.",
            node=node,
        )
        self._visit(node.get("object"), scope)
        self._visit(node.get("body"), scope)


def analyze_bindings(ast: Dict[str, Any], *, source_name: str = "<input>") -> AnalysisResult:
    """
    Run scope and binding analysis on an esprima AST.

    Args:
        ast: esprima-compatible AST (result of `parse_js`).
        source_name: Label for diagnostics and reporting.

    Returns:
        AnalysisResult with the scope tree and analysis issues.
    """
    analyzer = _BindingAnalyzer(source_name=source_name)
    return analyzer.analyze(ast)


__all__ = [
    "AnalysisResult",
    "AnalysisIssue",
    "Binding",
    "BindingKind",
    "Reference",
    "ReferenceContext",
    "Scope",
    "ScopeType",
    "SourcePosition",
    "analyze_bindings",
]
