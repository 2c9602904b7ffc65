"""Test helper modules for reconciliation testing.

Provides:
- memory_store: Dict-backed store double with injectable failures
"""

from .memory_store import InMemoryStore

__all__ = ['InMemoryStore']
