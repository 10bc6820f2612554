"""Utilities for writing fixed JavaScript source."""

from .writer import FixResult, apply_fixes

__all__ = ["FixResult", "apply_fixes"]
