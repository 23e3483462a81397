"""
Enrichment Error Taxonomy

Every failure the orchestrator can report maps to one of these classes.
Adapters translate library exceptions into them at the boundary.
"""

from typing import Any, List, Optional


class EnrichmentError(Exception):
    """Base class for all pipeline failures."""
    kind = "enrichment_error"


class MissingFieldsError(EnrichmentError):
    """Required input fields are absent from the fetched record."""
    kind = "missing_fields"

    def __init__(self, missing: List[str]):
        self.missing = list(missing)
        names = ", ".join(name[:1].upper() + name[1:] for name in self.missing)
        super().__init__(f"Missing required data fields ({names}) from API response")


class RecordStoreError(EnrichmentError):
    """Record store call failed; carries the HTTP status and body when known."""
    kind = "record_store_error"

    def __init__(self, message: str, status: Optional[int] = None, body: Any = None):
        super().__init__(message)
        self.status = status
        self.body = body


class FetchError(RecordStoreError):
    """Record store read failed (non-2xx or transport failure)."""
    kind = "fetch_error"


class WriteError(RecordStoreError):
    """Record store write failed (non-2xx or transport failure)."""
    kind = "write_error"


class ModelError(EnrichmentError):
    """Language model invocation failed."""
    kind = "model_error"


class ClassificationError(EnrichmentError):
    """Raised only when a caller hands the classifier something it cannot represent."""
    kind = "classification_error"
