"""Semantic analysis helpers for ES2017 JavaScript."""

from .scope_tracker import (
    AnalysisIssue,
    AnalysisResult,
    Binding,
    BindingKind,
    Reference,
    ReferenceContext,
    Scope,
    ScopeType,
    analyze_bindings,
)
from .static_value import get_string_if_constant

__all__ = [
    "AnalysisIssue",
    "AnalysisResult",
    "Binding",
    "BindingKind",
    "Reference",
    "ReferenceContext",
    "Scope",
    "ScopeType",
    "analyze_bindings",
    "get_string_if_constant",
]
