"""
Per-module style policy.

The policy is resolved once per run from `ImportStyleOptions`: the user's
`styles` table is deep-merged over `DEFAULT_STYLES` (unless
`extend_default_styles` is off) and every module is reduced to the ordered
tuple of styles marked `true`. An empty tuple means "no restriction".
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Dict, Mapping, Tuple

from .config import ImportStyleOptions
from .styles import ImportStyle

logger = logging.getLogger(__name__)

AllowedStyles = Tuple[ImportStyle, ...]
ModuleStylePolicy = Mapping[str, AllowedStyles]

# Keep this alphabetically sorted.
DEFAULT_STYLES: Mapping[str, Mapping[str, bool]] = MappingProxyType(
    {
        "chalk": MappingProxyType({"default": True}),
        "node:path": MappingProxyType({"default": True}),
        "node:util": MappingProxyType({"named": True}),
        "path": MappingProxyType({"default": True}),
        "util": MappingProxyType({"named": True}),
    }
)


def merge_styles(
    user_styles: Mapping[str, Any], default_styles: Mapping[str, Any]
) -> Dict[str, Any]:
    """
    Fill gaps in `user_styles` from `default_styles`, recursing into tables.

    User entries keep their position and win on conflict; a user value of
    `False` for a module shadows the default table entirely.
    """
    merged: Dict[str, Any] = {}
    for module_name, table in user_styles.items():
        merged[module_name] = dict(table) if isinstance(table, Mapping) else table

    for module_name, table in default_styles.items():
        current = merged.get(module_name)
        if current is None:
            merged[module_name] = dict(table) if isinstance(table, Mapping) else table
        elif isinstance(current, dict) and isinstance(table, Mapping):
            for style, allowed in table.items():
                current.setdefault(style, allowed)
    return merged


def _allowed_styles(module_name: str, table: Any) -> AllowedStyles:
    if not isinstance(table, Mapping):
        return ()
    allowed = []
    for style, enabled in table.items():
        if enabled is not True:
            continue
        try:
            allowed.append(ImportStyle(style))
        except ValueError:
            logger.debug("Ignoring unknown style %r for module %r", style, module_name)
    return tuple(allowed)


def resolve_policy(options: ImportStyleOptions) -> ModuleStylePolicy:
    """Build the read-only module -> allowed styles mapping for one run."""
    styles: Mapping[str, Any] = options.styles
    if options.extend_default_styles:
        styles = merge_styles(styles, DEFAULT_STYLES)

    policy = {
        module_name: _allowed_styles(module_name, table)
        for module_name, table in styles.items()
    }
    logger.debug("Resolved import-style policy for %d modules", len(policy))
    return MappingProxyType(policy)


__all__ = [
    "AllowedStyles",
    "DEFAULT_STYLES",
    "ModuleStylePolicy",
    "merge_styles",
    "resolve_policy",
]
