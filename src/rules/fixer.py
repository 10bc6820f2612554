"""
The namespace-import autofix.

Given a statement that violates a namespace-only policy, `build_namespace_fix`
produces a `RewritePlan`: one edit replacing the statement with a namespace
binding plus one edit per use of each former binding, turning `x` into
`ns.imported`. References are found by folding over the whole scope tree and
keeping only uses that resolve to the statement's own binding, so shadowing
bindings in nested scopes stay untouched.

The plan is all-or-nothing: if any precondition fails the fix is declined and
None is returned.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from itertools import chain
from typing import Any, Callable, Dict, Optional, Tuple

from analyzer import AnalysisResult, Reference, ReferenceContext, Scope

from .naming import avoid_capture, get_namespace_identifier, is_identifier_name
from .styles import (
    REST_PROPERTY_TYPES,
    awaited_dynamic_import,
    dynamic_import_source,
    is_require_call,
    property_name,
)

logger = logging.getLogger(__name__)


class SpecifierKind(str, Enum):
    DEFAULT = "default"
    NAMED = "named"
    REST = "rest"


@dataclass(frozen=True)
class BindingSpecifier:
    """One local binding pulled out of a module."""

    local_name: str
    # None marks a rest capture.
    imported_name: Optional[str]
    kind: SpecifierKind
    node: Dict[str, Any]

    @property
    def is_rest(self) -> bool:
        return self.imported_name is None


@dataclass(frozen=True)
class TextEdit:
    start: int
    end: int
    text: str


@dataclass(frozen=True)
class RewritePlan:
    """Declaration replacement plus reference rewrites, applied together."""

    namespace: str
    declaration: TextEdit
    references: Tuple[TextEdit, ...] = ()

    @property
    def edits(self) -> Tuple[TextEdit, ...]:
        return tuple(sorted((self.declaration, *self.references), key=lambda e: e.start))

    @property
    def span(self) -> Tuple[int, int]:
        edits = self.edits
        return edits[0].start, max(edit.end for edit in edits)


def _node_range(node: Any) -> Optional[Tuple[int, int]]:
    if not isinstance(node, dict):
        return None
    node_range = node.get("range")
    if not node_range or len(node_range) != 2:
        return None
    return node_range[0], node_range[1]


def extract_specifiers(statement: Dict[str, Any]) -> Optional[Tuple[BindingSpecifier, ...]]:
    """
    Bindings a statement introduces from its module.

    Returns None when a binding cannot be expressed as a property access on
    the namespace (nested patterns, defaults, computed keys).
    """
    if statement.get("type") == "ImportDeclaration":
        specifiers = []
        for specifier in statement.get("specifiers") or []:
            local = specifier.get("local") or {}
            if specifier.get("type") == "ImportDefaultSpecifier":
                specifiers.append(
                    BindingSpecifier(local.get("name"), "default", SpecifierKind.DEFAULT, local)
                )
            elif specifier.get("type") == "ImportSpecifier":
                imported = property_name(specifier.get("imported"))
                kind = SpecifierKind.DEFAULT if imported == "default" else SpecifierKind.NAMED
                specifiers.append(BindingSpecifier(local.get("name"), imported, kind, local))
        return tuple(specifiers)

    target = statement.get("id") or {}
    if target.get("type") != "ObjectPattern":
        return ()

    specifiers = []
    for prop in target.get("properties") or []:
        if prop.get("type") in REST_PROPERTY_TYPES:
            argument = prop.get("argument") or {}
            if argument.get("type") != "Identifier":
                return None
            specifiers.append(
                BindingSpecifier(argument.get("name"), None, SpecifierKind.REST, argument)
            )
            continue
        key = None if prop.get("computed") else property_name(prop.get("key"))
        value = prop.get("value") or {}
        if key is None or value.get("type") != "Identifier":
            return None
        kind = SpecifierKind.DEFAULT if key == "default" else SpecifierKind.NAMED
        specifiers.append(BindingSpecifier(value.get("name"), key, kind, value))
    return tuple(specifiers)


def collect_references(
    scope: Scope, predicate: Callable[[Reference], bool]
) -> Tuple[Reference, ...]:
    """Pre-order fold over `scope` and its descendants."""
    own = tuple(reference for reference in scope.references if predicate(reference))
    nested = chain.from_iterable(
        collect_references(child, predicate) for child in scope.children
    )
    return own + tuple(nested)


def _references_to(specifier: BindingSpecifier, root: Scope) -> Tuple[Reference, ...]:
    def is_use_of_binding(reference: Reference) -> bool:
        if reference.name != specifier.local_name or reference.node is specifier.node:
            return False
        binding = reference.resolve()
        return binding is not None and binding.node is specifier.node

    return collect_references(root, is_use_of_binding)


def member_access(namespace: str, imported_name: str) -> str:
    if is_identifier_name(imported_name):
        return f"{namespace}.{imported_name}"
    return f"{namespace}[{json.dumps(imported_name)}]"


def _declaration_template(
    statement: Dict[str, Any], declaration: Optional[Dict[str, Any]]
) -> Optional[Tuple[Dict[str, Any], Dict[str, Any], str]]:
    """Node to replace, source-name node and replacement pattern, or None."""
    if statement.get("type") == "ImportDeclaration":
        return statement, statement.get("source"), "import * as {namespace} from {source}"

    if statement.get("type") != "VariableDeclarator" or declaration is None:
        return None
    if len(declaration.get("declarations") or []) != 1:
        # Replacing the declaration would drop sibling declarators.
        return None

    kind = declaration.get("kind", "const")
    init = statement.get("init")
    if is_require_call(init):
        return declaration, init["arguments"][0], kind + " {namespace} = require({source})"

    dynamic_import = awaited_dynamic_import(statement)
    if dynamic_import is not None:
        return (
            declaration,
            dynamic_import_source(dynamic_import),
            kind + " {namespace} = await import({source})",
        )
    return None


def build_namespace_fix(
    statement: Dict[str, Any],
    *,
    module_name: str,
    source: str,
    analysis: AnalysisResult,
    declaration: Optional[Dict[str, Any]] = None,
) -> Optional[RewritePlan]:
    """
    Rewrite `statement` into a namespace binding of `module_name`.

    Args:
        statement: An `ImportDeclaration`, or a `VariableDeclarator` whose
            initializer is `require(x)` or `await import(x)`.
        module_name: Constant name of the referenced module.
        source: Full program text the node ranges point into.
        analysis: Scope analysis of the same program.
        declaration: The `VariableDeclaration` owning a declarator statement.

    Returns:
        The plan, or None when the statement cannot be rewritten safely.
    """
    template = _declaration_template(statement, declaration)
    if template is None:
        logger.debug("Declining fix for %s: unsupported shape", statement.get("type"))
        return None
    replaced_node, source_node, pattern = template

    replaced_range = _node_range(replaced_node)
    source_range = _node_range(source_node)
    if replaced_range is None or source_range is None:
        return None

    specifiers = extract_specifiers(statement)
    if not specifiers:
        logger.debug("Declining fix for %r: no rewritable bindings", module_name)
        return None

    scope = analysis.scope_of(statement)
    existing_namespace = next(
        (
            (specifier.get("local") or {}).get("name")
            for specifier in statement.get("specifiers") or []
            if specifier.get("type") == "ImportNamespaceSpecifier"
        ),
        None,
    )
    reuse_local = False
    if existing_namespace:
        namespace = existing_namespace
    else:
        candidate = get_namespace_identifier(module_name)
        reuse_local = any(specifier.local_name == candidate for specifier in specifiers)
        if reuse_local:
            namespace = candidate
        else:
            namespace = avoid_capture(candidate, scope, analysis.unresolved_names())
            if namespace is None:
                logger.debug("Declining fix for %r: no usable identifier", module_name)
                return None

    text = source[replaced_range[0]:replaced_range[1]]
    replacement = pattern.format(
        namespace=namespace,
        source=source[source_range[0]:source_range[1]],
    )
    if text.endswith(";"):
        replacement += ";"
    declaration_edit = TextEdit(replaced_range[0], replaced_range[1], replacement)

    if reuse_local:
        # The declaration already binds the namespace name; uses keep their meaning.
        return RewritePlan(namespace=namespace, declaration=declaration_edit)

    if analysis.issues:
        logger.debug("Declining fix for %r: scope resolution is unreliable", module_name)
        return None

    reference_edits = []
    for specifier in specifiers:
        if specifier.is_rest:
            continue
        access = member_access(namespace, specifier.imported_name)
        for reference in _references_to(specifier, analysis.root_scope):
            if reference.context in (ReferenceContext.WRITE, ReferenceContext.EXPORT):
                logger.debug(
                    "Declining fix for %r: `%s` is used where a property access cannot go",
                    module_name,
                    reference.name,
                )
                return None
            reference_range = _node_range(reference.node)
            if reference_range is None:
                return None
            replacement_text = access
            if reference.context == ReferenceContext.SHORTHAND:
                replacement_text = f"{reference.name}: {access}"
            reference_edits.append(
                TextEdit(reference_range[0], reference_range[1], replacement_text)
            )

    return RewritePlan(
        namespace=namespace,
        declaration=declaration_edit,
        references=tuple(reference_edits),
    )


__all__ = [
    "BindingSpecifier",
    "RewritePlan",
    "SpecifierKind",
    "TextEdit",
    "build_namespace_fix",
    "collect_references",
    "extract_specifiers",
    "member_access",
]
