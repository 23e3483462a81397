"""
Write-back and Outcome Schemas

The write payload is the only thing persisted. Outcomes are returned to the
caller of the orchestrator and rendered to a response dict by the hosts.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .record import FieldName


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# Write-back payload
# ============================================================================

class WriteMetadata(BaseModel):
    """Run metadata attached to every write-back"""
    model_config = ConfigDict(populate_by_name=True)

    processed_at: datetime = Field(default_factory=_utcnow, alias="processedAt")
    source: str = Field(..., description="Pipeline identifier")
    input_data: Dict[str, Any] = Field(default_factory=dict, alias="inputData")
    was_empty: Optional[bool] = Field(default=None, alias="wasEmpty")


class WritePayload(BaseModel):
    """
    Body posted back to the record store.

    The result is serialized under both spellings of the output field;
    downstream consumers read either one.
    """
    output_field: str
    result: str
    metadata: WriteMetadata

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = FieldName(self.output_field).aliased(self.result)
        body["metadata"] = self.metadata.model_dump(mode="json", by_alias=True, exclude_none=True)
        return body


# ============================================================================
# Orchestration outcomes
# ============================================================================

class SkippedOutcome(BaseModel):
    """Target field already populated; nothing was synthesized or written."""
    kind: Literal["skipped"] = "skipped"
    reason: str
    existing_value: Any = None
    timestamp: datetime = Field(default_factory=_utcnow)

    @property
    def status_code(self) -> int:
        return 200

    def to_response(self) -> Dict[str, Any]:
        return {
            "status": self.status_code,
            "skipped": True,
            "message": self.reason,
            "existingValue": self.existing_value,
            "timestamp": self.timestamp.isoformat(),
        }


class CompletedOutcome(BaseModel):
    """Model output was produced and written back."""
    kind: Literal["completed"] = "completed"
    message: str = ""
    result: str
    write_ack: Any = None
    timestamp: datetime = Field(default_factory=_utcnow)

    @property
    def status_code(self) -> int:
        return 200

    def to_response(self) -> Dict[str, Any]:
        return {
            "status": self.status_code,
            "skipped": False,
            "message": self.message,
            "result": self.result,
            "writeAck": self.write_ack,
            "timestamp": self.timestamp.isoformat(),
        }


class FailedOutcome(BaseModel):
    """Pipeline stopped; no write-back was performed after the failure."""
    kind: Literal["failed"] = "failed"
    error_kind: str
    message: str
    timestamp: datetime = Field(default_factory=_utcnow)

    @property
    def status_code(self) -> int:
        return 500

    def to_response(self) -> Dict[str, Any]:
        return {
            "status": self.status_code,
            "errorKind": self.error_kind,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
        }


OrchestrationOutcome = Union[SkippedOutcome, CompletedOutcome, FailedOutcome]
