"""Entity store implementations."""

from __future__ import annotations

from .memory import InMemoryStore

__all__ = ["InMemoryStore"]
