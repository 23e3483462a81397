"""
Record Value Model

Records arrive as decoded JSON. Values are drawn from a closed set of kinds
so the classifier and synthesizer can branch on ``ValueKind`` instead of
probing Python types ad hoc.

Field names on the wire come in two spellings (``data1`` / ``Data1``).
``FieldName`` keeps one canonical name and produces both spellings when
reading or serializing.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

from ..errors import ClassificationError


JsonValue = Union[None, bool, int, float, str, List[Any], Dict[str, Any]]
Record = Dict[str, JsonValue]


# ============================================================================
# Value kinds
# ============================================================================

class ValueKind(str, Enum):
    """Kinds of JSON values"""
    NULL = "null"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    SEQUENCE = "sequence"
    MAPPING = "mapping"


def value_kind(value: Any) -> ValueKind:
    """Return the kind of a decoded JSON value.

    Raises ClassificationError for anything json.loads cannot produce.
    """
    if value is None:
        return ValueKind.NULL
    # bool is a subclass of int
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, (int, float)):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, (list, tuple)):
        return ValueKind.SEQUENCE
    if isinstance(value, Mapping):
        return ValueKind.MAPPING
    raise ClassificationError(f"Unsupported record value type: {type(value).__name__}")


def is_absent(value: Any) -> bool:
    """A required input is absent when it is missing, null, or the empty string.

    ``0`` and ``False`` are present.
    """
    return value is None or (isinstance(value, str) and value == "")


def is_empty(value: Any) -> bool:
    """Emptiness test for the conditional pipeline's target field.

    Empty: missing, null, "", {} or []. Zero, False and whitespace-only
    strings are not empty.
    """
    if is_absent(value):
        return True
    kind = value_kind(value)
    if kind in (ValueKind.MAPPING, ValueKind.SEQUENCE):
        return len(value) == 0
    return False


# ============================================================================
# Field aliasing
# ============================================================================

@dataclass(frozen=True)
class FieldName:
    """Canonical field name with its capitalized wire alias."""
    name: str

    @property
    def canonical(self) -> str:
        return self.name[:1].lower() + self.name[1:]

    @property
    def capitalized(self) -> str:
        return self.name[:1].upper() + self.name[1:]

    @property
    def spellings(self) -> List[str]:
        if self.canonical == self.capitalized:
            return [self.canonical]
        return [self.canonical, self.capitalized]

    def read(self, record: Mapping[str, Any]) -> Optional[JsonValue]:
        """Read the field under either spelling.

        The first spelling holding a present value wins. Falls back to
        whatever was stored (None or "") so callers still see an empty value.
        """
        fallback = None
        for spelling in self.spellings:
            if spelling not in record:
                continue
            value = record[spelling]
            if not is_absent(value):
                return value
            if fallback is None:
                fallback = value
        return fallback

    def aliased(self, value: Any) -> Dict[str, Any]:
        """Serialize ``value`` under both spellings."""
        return {spelling: value for spelling in [self.canonical, self.capitalized]}

    def __str__(self) -> str:
        return self.canonical
