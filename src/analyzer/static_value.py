"""
Static evaluation of module-name expressions.

`get_string_if_constant` resolves the handful of expression shapes that can
spell a module name without running code: string literals, template literals
without substitutions, `+` concatenation, and identifiers bound by `const` to
one of those. Anything else yields None.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Union

from .scope_tracker import BindingKind, Scope

_MAX_DEPTH = 32

_NOT_CONSTANT = object()


def _format_number(value: Union[int, float]) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _to_js_string(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return _format_number(value)
    return str(value)


def _evaluate(node: Any, scope: Optional[Scope], depth: int) -> Any:
    if not isinstance(node, dict) or depth > _MAX_DEPTH:
        return _NOT_CONSTANT

    node_type = node.get("type")
    if node_type == "Literal":
        if node.get("regex") is not None:
            return _NOT_CONSTANT
        return node.get("value")

    if node_type == "TemplateLiteral":
        if node.get("expressions"):
            return _NOT_CONSTANT
        quasis = node.get("quasis") or []
        cooked = [(quasi.get("value") or {}).get("cooked") for quasi in quasis]
        if any(part is None for part in cooked):
            return _NOT_CONSTANT
        return "".join(cooked)

    if node_type == "BinaryExpression" and node.get("operator") == "+":
        left = _evaluate(node.get("left"), scope, depth + 1)
        right = _evaluate(node.get("right"), scope, depth + 1)
        if left is _NOT_CONSTANT or right is _NOT_CONSTANT:
            return _NOT_CONSTANT
        if isinstance(left, str) or isinstance(right, str):
            return _to_js_string(left) + _to_js_string(right)
        return _NOT_CONSTANT

    if node_type == "Identifier" and scope is not None:
        binding = scope.lookup(node.get("name"))
        if binding is None or binding.kind != BindingKind.CONST:
            return _NOT_CONSTANT
        declarator: Dict[str, Any] = binding.definition or {}
        if declarator.get("id") is not binding.node:
            # Destructured constants are not followed.
            return _NOT_CONSTANT
        return _evaluate(declarator.get("init"), scope, depth + 1)

    return _NOT_CONSTANT


def get_string_if_constant(node: Any, scope: Optional[Scope] = None) -> Optional[str]:
    """
    Return the string value of `node` when it is statically known.

    Args:
        node: ESTree expression node, usually the source of an import.
        scope: Scope the expression appears in; needed to follow `const`
            identifiers. Without it identifiers are treated as unknown.

    Returns:
        The string, or None when the value is not a compile-time string.
    """
    value = _evaluate(node, scope, 0)
    if isinstance(value, str):
        return value
    return None


__all__ = ["get_string_if_constant"]
