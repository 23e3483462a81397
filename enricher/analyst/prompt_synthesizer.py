"""
Prompt Synthesizer

Turns a question and a record into the text sent to the language model.

The user prompt always carries four sections in this order: QUESTION,
CONTEXT, DATA STRUCTURE, RAW DATA. Sections are emitted even when empty so
identical inputs always produce identical prompts. Domain-specific guidance
travels separately as the system prompt.
"""

import json
from dataclasses import dataclass
from typing import Any, List, Optional

from .classifier import DomainClassification, classify


ANALYSIS_PROMPT = """You are an intelligent data analyst. Answer the following question based on the provided data.

QUESTION:
{question}

CONTEXT:
{context}

DATA STRUCTURE:
{structure}

RAW DATA:
{raw_data}

Provide a clear, actionable answer. Be specific and concise. Focus on practical insights."""

SYSTEM_PROMPT = """You analyze structured records for an automated enrichment job.
The data appears to be {domain} data. When answering:
{instructions}"""


@dataclass(frozen=True)
class AnalysisRequest:
    """Everything needed for one model call. Immutable once built."""
    question: str
    classification: DomainClassification
    record: Any
    prompt: str
    system: str

    @property
    def domain(self) -> str:
        return self.classification.estimated_domain


def _format_context(classification: DomainClassification) -> str:
    return "\n".join([
        f"Data Type: {classification.container_type}",
        f"Number of Fields: {classification.field_count}",
        f"Estimated Domain: {classification.estimated_domain}",
    ])


def _format_structure(classification: DomainClassification) -> str:
    return "\n".join(f"  - {info.describe()}" for info in classification.fields)


def _format_instructions(instructions: List[str]) -> str:
    return "\n".join(f"- {line}" for line in instructions)


def serialize_record(record: Any) -> str:
    """Indented JSON, keys in the order they were encountered."""
    return json.dumps(record, indent=2, ensure_ascii=False, default=str)


def synthesize(
    question: str,
    record: Any,
    classification: Optional[DomainClassification] = None,
) -> AnalysisRequest:
    """
    Build the analysis request for a record.

    Args:
        question: Question to answer, inserted verbatim
        record: Data the question is about
        classification: Precomputed classification of ``record``; computed
            here when omitted

    Returns:
        AnalysisRequest with the rendered user and system prompts
    """
    if classification is None:
        classification = classify(record)

    prompt = ANALYSIS_PROMPT.format(
        question=question,
        context=_format_context(classification),
        structure=_format_structure(classification),
        raw_data=serialize_record(record),
    )
    system = SYSTEM_PROMPT.format(
        domain=classification.estimated_domain.replace("_", " "),
        instructions=_format_instructions(classification.instructions),
    )

    return AnalysisRequest(
        question=question,
        classification=classification,
        record=record,
        prompt=prompt,
        system=system,
    )
