"""LunarBase Console - client core for the LunarBase admin console.

Validates records against runtime-defined collection schemas, caches list
pages, and applies writes optimistically with rollback on failure.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
