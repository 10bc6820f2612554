"""The import-style rule: classification, policy, reporting and the namespace fix."""

from .config import ConfigError, ImportStyleOptions, load_options
from .fixer import BindingSpecifier, RewritePlan, TextEdit, build_namespace_fix
from .import_style import (
    ImportStyleRule,
    Violation,
    check_import_style,
    effective_allowed_styles,
    format_disjunction,
)
from .naming import avoid_capture, get_namespace_identifier
from .policy import DEFAULT_STYLES, resolve_policy
from .styles import ImportStyle, StatementKind

__all__ = [
    "BindingSpecifier",
    "ConfigError",
    "DEFAULT_STYLES",
    "ImportStyle",
    "ImportStyleOptions",
    "ImportStyleRule",
    "RewritePlan",
    "StatementKind",
    "TextEdit",
    "Violation",
    "avoid_capture",
    "build_namespace_fix",
    "check_import_style",
    "effective_allowed_styles",
    "format_disjunction",
    "get_namespace_identifier",
    "load_options",
    "resolve_policy",
]
