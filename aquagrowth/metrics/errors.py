from __future__ import annotations


class InvalidInput(ValueError):
    """Raised when an input makes a metric mathematically undefined."""
