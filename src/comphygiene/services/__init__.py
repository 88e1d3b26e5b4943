"""Host-side services built on the hygiene pipeline."""

from comphygiene.services.import_service import ImportHygieneService

__all__ = ["ImportHygieneService"]
