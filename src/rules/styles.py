"""
Binding-style classification for module-reference statements.

Styles are read purely from the shape of the referencing statement; the
referenced module is never resolved. Every classifier returns a frozenset of
`ImportStyle`, and a statement that binds nothing is always `{unassigned}`.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, FrozenSet, Optional


class ImportStyle(str, Enum):
    DEFAULT = "default"
    NAMESPACE = "namespace"
    NAMED = "named"
    UNASSIGNED = "unassigned"


class StatementKind(str, Enum):
    """The four statement families that reference another module."""

    STATIC_IMPORT = "import"
    DYNAMIC_IMPORT = "dynamic-import"
    REQUIRE = "require"
    EXPORT_FROM = "export-from"


StyleSet = FrozenSet[ImportStyle]

UNASSIGNED: StyleSet = frozenset({ImportStyle.UNASSIGNED})
NAMESPACE: StyleSet = frozenset({ImportStyle.NAMESPACE})

REST_PROPERTY_TYPES = frozenset({"RestElement", "RestProperty", "ExperimentalRestProperty"})


def property_name(node: Any) -> Optional[str]:
    """Name spelled by an identifier or string-literal key, else None."""
    if not isinstance(node, dict):
        return None
    if node.get("type") == "Identifier":
        return node.get("name")
    if node.get("type") == "Literal" and isinstance(node.get("value"), str):
        return node.get("value")
    return None


def import_declaration_styles(node: Dict[str, Any]) -> StyleSet:
    specifiers = node.get("specifiers") or []
    if not specifiers:
        return UNASSIGNED

    styles = set()
    for specifier in specifiers:
        specifier_type = specifier.get("type")
        if specifier_type == "ImportDefaultSpecifier":
            styles.add(ImportStyle.DEFAULT)
        elif specifier_type == "ImportNamespaceSpecifier":
            styles.add(ImportStyle.NAMESPACE)
        elif specifier_type == "ImportSpecifier":
            if property_name(specifier.get("imported")) == "default":
                styles.add(ImportStyle.DEFAULT)
            else:
                styles.add(ImportStyle.NAMED)
    return frozenset(styles)


def export_declaration_styles(node: Dict[str, Any]) -> StyleSet:
    """Styles of `export {...} from 'x'`; `export * from` is handled by the caller."""
    specifiers = node.get("specifiers") or []
    if not specifiers:
        return UNASSIGNED

    styles = set()
    for specifier in specifiers:
        if specifier.get("type") != "ExportSpecifier":
            continue
        if property_name(specifier.get("exported")) == "default":
            styles.add(ImportStyle.DEFAULT)
        else:
            styles.add(ImportStyle.NAMED)
    return frozenset(styles)


def assignment_target_styles(target: Optional[Dict[str, Any]]) -> StyleSet:
    """Styles of the pattern a `require()` or awaited `import()` is bound to."""
    if target is None:
        return UNASSIGNED

    target_type = target.get("type")
    if target_type in ("Identifier", "ArrayPattern"):
        return NAMESPACE

    if target_type == "ObjectPattern":
        properties = target.get("properties") or []
        if not properties:
            return UNASSIGNED
        styles = set()
        for prop in properties:
            if prop.get("type") in REST_PROPERTY_TYPES:
                styles.add(ImportStyle.NAMED)
            elif not prop.get("computed") and property_name(prop.get("key")) == "default":
                styles.add(ImportStyle.DEFAULT)
            else:
                styles.add(ImportStyle.NAMED)
        return frozenset(styles)

    # Not reachable with a conforming parser.
    return frozenset()


# ------------------------------------------------------------ node predicates


def is_require_call(node: Any) -> bool:
    """`require(x)` with exactly one argument and a plain callee."""
    if not isinstance(node, dict) or node.get("type") != "CallExpression":
        return False
    if node.get("optional"):
        return False
    callee = node.get("callee") or {}
    return (
        callee.get("type") == "Identifier"
        and callee.get("name") == "require"
        and len(node.get("arguments") or []) == 1
    )


def dynamic_import_source(node: Any) -> Optional[Dict[str, Any]]:
    """
    Source expression of a dynamic `import()`, or None for other nodes.

    esprima models `import(x)` as a call with an `Import` callee; newer ESTree
    producers emit `ImportExpression`. Both are accepted.
    """
    if not isinstance(node, dict):
        return None
    if node.get("type") == "ImportExpression":
        return node.get("source")
    if node.get("type") == "CallExpression":
        callee = node.get("callee") or {}
        arguments = node.get("arguments") or []
        if callee.get("type") == "Import" and arguments:
            return arguments[0]
    return None


def awaited_dynamic_import(declarator: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """The `import()` node of `const target = await import(x)`, if that is the shape."""
    init = declarator.get("init")
    if not isinstance(init, dict) or init.get("type") != "AwaitExpression":
        return None
    argument = init.get("argument")
    if dynamic_import_source(argument) is None:
        return None
    return argument


__all__ = [
    "ImportStyle",
    "NAMESPACE",
    "StatementKind",
    "StyleSet",
    "UNASSIGNED",
    "assignment_target_styles",
    "awaited_dynamic_import",
    "dynamic_import_source",
    "export_declaration_styles",
    "import_declaration_styles",
    "is_require_call",
    "property_name",
]
