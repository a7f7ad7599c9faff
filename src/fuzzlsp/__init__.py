"""LLM-backed code diagnostics for editors and batch checks."""

__version__ = "0.3.0"
