"""Deterministic race weekend simulation engine."""

__version__ = "0.1.0"
