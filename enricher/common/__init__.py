"""
Enricher Common Module

Shared infrastructure: configuration, adapters for the record store and the
LLM provider, and the error taxonomy.
"""

from .config import EnricherConfig, load_config
from .errors import (
    EnrichmentError,
    MissingFieldsError,
    RecordStoreError,
    FetchError,
    WriteError,
    ModelError,
    ClassificationError,
)
from .llm_client import LLMClient
from .record_store import RecordStoreClient

__all__ = [
    "EnricherConfig",
    "load_config",
    "EnrichmentError",
    "MissingFieldsError",
    "RecordStoreError",
    "FetchError",
    "WriteError",
    "ModelError",
    "ClassificationError",
    "LLMClient",
    "RecordStoreClient",
]
