"""Type aliases used across comphygiene."""

from __future__ import annotations

Row = list[str]
Rows = list[list[str]]
TenantId = str
ImportJobId = str
