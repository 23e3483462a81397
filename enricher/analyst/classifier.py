"""
Domain Classifier

Keyword heuristic that guesses what kind of data a record holds from its
top-level field names. Only the first level is inspected; nested values
contribute type metadata, never tags.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from ..common.schemas import ValueKind, value_kind


UNKNOWN_DOMAIN = "unknown"

# Resolution order matters: the first tag with a non-zero count wins,
# regardless of how many fields matched the others.
DOMAIN_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("financial", ("price", "usd", "btc", "eth")),
    ("weather", ("temp", "weather", "humidity")),
    ("user_profile", ("name", "email", "user", "person")),
    ("content", ("title", "body", "content", "post")),
    ("geographic", ("country", "city", "location", "capital")),
)

DOMAIN_PRIORITY: Tuple[str, ...] = tuple(tag for tag, _ in DOMAIN_KEYWORDS)

ANALYSIS_INSTRUCTIONS: Dict[str, List[str]] = {
    "financial": [
        "Identify all financial metrics and their values",
        "Provide market insights or trends if applicable",
        "Highlight significant price movements or values",
        "Suggest potential implications or context",
    ],
    "weather": [
        "Summarize current weather conditions",
        "Highlight temperature and comfort levels",
        "Note any extreme conditions or alerts",
        "Provide practical recommendations if relevant",
    ],
    "user_profile": [
        "Create a concise profile summary",
        "Highlight key demographic information",
        "Note any interesting or unique attributes",
        "Maintain privacy and professionalism",
    ],
    "content": [
        "Identify the main topic or theme",
        "Extract key messages or points",
        "Summarize the core content",
        "Note the tone or style if relevant",
    ],
    "geographic": [
        "Provide key facts about the location",
        "Highlight demographic or geographic data",
        "Note interesting or notable information",
        "Provide context or comparisons if helpful",
    ],
    UNKNOWN_DOMAIN: [
        "Analyze the data structure and content",
        "Identify key information and values",
        "Extract meaningful insights",
        "Provide a clear and concise summary",
    ],
}

# Sequences and mappings both report "object", matching how JSON tooling
# describes containers; the flags tell them apart.
_PRIMITIVE_TYPE = {
    ValueKind.NULL: "null",
    ValueKind.BOOLEAN: "boolean",
    ValueKind.NUMBER: "number",
    ValueKind.STRING: "string",
    ValueKind.SEQUENCE: "object",
    ValueKind.MAPPING: "object",
}


@dataclass(frozen=True)
class FieldInfo:
    """Shallow type metadata for one top-level field"""
    name: str
    type: str
    is_array: bool = False
    is_object: bool = False

    def describe(self) -> str:
        line = f"{self.name}: {self.type}"
        if self.is_array:
            line += " (array)"
        if self.is_object:
            line += " (nested object)"
        return line


@dataclass
class DomainClassification:
    """Result of classify(). Derived per call, never persisted."""
    record: Any = field(repr=False, default=None)
    fields: List[FieldInfo] = field(default_factory=list)
    data_patterns: List[str] = field(default_factory=list)
    estimated_domain: str = UNKNOWN_DOMAIN

    @property
    def is_array(self) -> bool:
        return isinstance(self.record, (list, tuple))

    @property
    def container_type(self) -> str:
        return "Array" if self.is_array else "Object"

    @property
    def keys(self) -> List[str]:
        return [f.name for f in self.fields]

    @property
    def field_count(self) -> int:
        return len(self.fields)

    @property
    def pattern_counts(self) -> Dict[str, int]:
        return dict(Counter(self.data_patterns))

    @property
    def instructions(self) -> List[str]:
        return analysis_instructions(self.estimated_domain)


def _items(record: Any) -> Optional[List[Tuple[str, Any]]]:
    kind = value_kind(record)
    if kind == ValueKind.MAPPING:
        return [(str(k), v) for k, v in record.items()]
    if kind == ValueKind.SEQUENCE:
        return [(str(i), v) for i, v in enumerate(record)]
    return None


def match_patterns(key: str) -> List[str]:
    """Return every domain tag whose keywords occur in ``key`` (case-insensitive)."""
    key_lower = key.lower()
    return [
        tag for tag, keywords in DOMAIN_KEYWORDS
        if any(keyword in key_lower for keyword in keywords)
    ]


def resolve_domain(data_patterns: List[str]) -> str:
    """Pick the first tag in priority order that occurred at least once."""
    counts = Counter(data_patterns)
    for tag in DOMAIN_PRIORITY:
        if counts[tag] > 0:
            return tag
    return UNKNOWN_DOMAIN


def classify(record: Any) -> DomainClassification:
    """
    Classify a record by its top-level field names.

    Args:
        record: Decoded JSON value. Objects and arrays are inspected; any
            other value yields an empty classification.

    Returns:
        DomainClassification with per-field metadata, pattern tags and
        the resolved domain
    """
    classification = DomainClassification(record=record)

    items = _items(record)
    if items is None:
        return classification

    for key, value in items:
        kind = value_kind(value)
        classification.fields.append(FieldInfo(
            name=key,
            type=_PRIMITIVE_TYPE[kind],
            is_array=kind == ValueKind.SEQUENCE,
            is_object=kind == ValueKind.MAPPING,
        ))
        classification.data_patterns.extend(match_patterns(key))

    classification.estimated_domain = resolve_domain(classification.data_patterns)
    return classification


def analysis_instructions(domain: str) -> List[str]:
    """Fixed analysis instructions for a domain (generic set for unknown domains)."""
    return list(ANALYSIS_INSTRUCTIONS.get(domain, ANALYSIS_INSTRUCTIONS[UNKNOWN_DOMAIN]))
