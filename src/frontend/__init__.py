"""Parse-and-analyze step shared by every rule check."""

from .pipeline import FrontEndResult, load_frontend, run_frontend

__all__ = ["FrontEndResult", "load_frontend", "run_frontend"]
