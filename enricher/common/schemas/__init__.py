"""
Enricher Schemas

Record value model, field aliasing, write-back payload and run outcomes.
"""

from .record import (
    JsonValue,
    Record,
    ValueKind,
    FieldName,
    value_kind,
    is_absent,
    is_empty,
)
from .outcome import (
    WriteMetadata,
    WritePayload,
    SkippedOutcome,
    CompletedOutcome,
    FailedOutcome,
    OrchestrationOutcome,
)

__all__ = [
    "JsonValue",
    "Record",
    "ValueKind",
    "FieldName",
    "value_kind",
    "is_absent",
    "is_empty",
    "WriteMetadata",
    "WritePayload",
    "SkippedOutcome",
    "CompletedOutcome",
    "FailedOutcome",
    "OrchestrationOutcome",
]
