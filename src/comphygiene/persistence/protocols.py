"""Re-export persistence protocols from core for convenience."""

from __future__ import annotations

from comphygiene.core.protocols import ICacheBackend, IFileStore

__all__ = ["ICacheBackend", "IFileStore"]
