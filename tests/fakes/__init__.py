"""Shared test doubles: re-export memory backends."""

from __future__ import annotations

from comphygiene.persistence.memory_backend import MemoryCacheBackend, MemoryFileStore

__all__ = ["MemoryCacheBackend", "MemoryFileStore"]
