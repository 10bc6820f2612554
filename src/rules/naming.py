"""Namespace identifier synthesis for the namespace-import fix."""

from __future__ import annotations

import re
from types import MappingProxyType
from typing import AbstractSet, Iterable, Mapping, Optional, Set

from analyzer import Scope

# Well-known modules whose namespace is conventionally spelled differently.
SPECIAL_CASES: Mapping[str, str] = MappingProxyType(
    {
        "react": "React",
        "react-dom": "ReactDOM",
        "react-router": "ReactRouter",
        "react-router-dom": "ReactRouterDOM",
        "prop-types": "PropTypes",
        "lodash": "_",
        "lodash-es": "_",
        "jquery": "$",
        "styled-components": "styled",
        "redux": "Redux",
        "react-redux": "ReactRedux",
        "axios": "Axios",
        "ramda": "R",
        "rxjs": "Rx",
        "vue": "Vue",
        "angular": "Angular",
    }
)

RESERVED_WORDS: AbstractSet[str] = frozenset(
    """
    arguments await break case catch class const continue debugger default
    delete do else enum eval export extends false finally for function if
    implements import in instanceof interface let new null package private
    protected public return static super switch this throw true try typeof
    undefined var void while with yield
    """.split()
)

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][\w$]*$", re.ASCII)
_INVALID_CHARS_RE = re.compile(r"[^\dA-Za-z-]")
_HYPHEN_RUN_RE = re.compile(r"-(.)", re.DOTALL)


def is_identifier_name(name: str) -> bool:
    """True when `name` can follow a dot in a member expression."""
    return bool(_IDENTIFIER_RE.match(name))


def is_valid_identifier(name: str) -> bool:
    return is_identifier_name(name) and name not in RESERVED_WORDS


def get_namespace_identifier(module_name: str) -> str:
    """
    Derive the conventional namespace binding name for `module_name`.

    >>> get_namespace_identifier("node:fs/promises")
    'promises'
    >>> get_namespace_identifier("@scope/my-lib.js")
    'myLib'
    """
    special = SPECIAL_CASES.get(module_name)
    if special:
        return special

    last_part = module_name.rstrip("/").split("/")[-1].split(".")[0]
    identifier = _INVALID_CHARS_RE.sub("-", last_part)
    identifier = _HYPHEN_RUN_RE.sub(lambda match: match.group(1).upper(), identifier)

    if identifier[:1].isdigit():
        identifier = "_" + identifier
    return identifier


def _bound_names(scope: Scope) -> Set[str]:
    names: Set[str] = set()
    for ancestor in scope.chain():
        names.update(ancestor.bindings)
    for nested in scope.walk():
        names.update(nested.bindings)
    return names


def avoid_capture(name: str, scope: Scope, taken: Iterable[str] = ()) -> Optional[str]:
    """
    Return `name`, suffixed with underscores until it is safe to bind in `scope`.

    A safe name is not bound anywhere on the scope chain (it would shadow or
    be shadowed), not bound in any scope nested below `scope` (uses there
    would resolve to the inner binding), and not in `taken`, which callers
    fill with the program's unresolved global names.

    Returns None when no valid identifier can be formed from `name`.
    """
    unsafe = _bound_names(scope)
    unsafe.update(taken)

    if not is_valid_identifier(name):
        name += "_"
        if not is_valid_identifier(name):
            return None
    while name in unsafe:
        name += "_"
    return name


__all__ = [
    "RESERVED_WORDS",
    "SPECIAL_CASES",
    "avoid_capture",
    "get_namespace_identifier",
    "is_identifier_name",
    "is_valid_identifier",
]
