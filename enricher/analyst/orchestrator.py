"""
Enrichment Orchestrator

Runs one enrichment pass against the record store:

    INIT -> FETCHED -> CLASSIFIED -> SYNTHESIZED -> INVOKED -> WRITTEN_BACK -> DONE
                    +-> SKIPPED   (conditional pipeline, target already filled)

FAILED is reachable from every state. Steps run strictly in sequence and
the orchestrator never retries; adapters own their retry policy. Every run
returns exactly one outcome, and a write-back happens with the full result
or not at all.
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..common.errors import EnrichmentError, MissingFieldsError
from ..common.schemas import (
    FieldName,
    is_absent,
    is_empty,
    WriteMetadata,
    WritePayload,
    SkippedOutcome,
    CompletedOutcome,
    FailedOutcome,
    OrchestrationOutcome,
)
from .classifier import classify
from .prompt_synthesizer import synthesize

logger = logging.getLogger("enricher.analyst.orchestrator")


class PipelineVariant(str, Enum):
    """Which enrichment pipeline to run"""
    STATIC = "static"
    CONDITIONAL = "conditional"


class PipelineState(str, Enum):
    """States visited by a single run"""
    INIT = "init"
    FETCHED = "fetched"
    SKIPPED = "skipped"
    CLASSIFIED = "classified"
    SYNTHESIZED = "synthesized"
    INVOKED = "invoked"
    WRITTEN_BACK = "written_back"
    DONE = "done"
    FAILED = "failed"


def _join_names(names: List[str]) -> str:
    if len(names) <= 1:
        return "".join(names)
    if len(names) == 2:
        return f"{names[0]} and {names[1]}"
    return ", ".join(names[:-1]) + f", and {names[-1]}"


@dataclass(frozen=True)
class PipelineSpec:
    """
    Field layout of a pipeline.

    input_fields are always required. question_field, when set, is also
    required and seeds the default question. target_field, when set, makes
    the pipeline conditional on that field being empty.
    """
    variant: PipelineVariant
    source: str
    input_fields: Tuple[str, ...]
    output_field: str
    question_field: Optional[str] = None
    target_field: Optional[str] = None

    @classmethod
    def static(
        cls,
        input_fields: Tuple[str, ...] = ("data1", "data2", "data3"),
        output_field: str = "data4",
    ) -> "PipelineSpec":
        return cls(
            variant=PipelineVariant.STATIC,
            source="static-analysis",
            input_fields=tuple(input_fields),
            output_field=output_field,
        )

    @classmethod
    def conditional(
        cls,
        input_fields: Tuple[str, ...] = ("data1", "data2", "data3"),
        question_field: str = "data5",
        target_field: str = "data6",
    ) -> "PipelineSpec":
        return cls(
            variant=PipelineVariant.CONDITIONAL,
            source="conditional-analysis",
            input_fields=tuple(input_fields),
            output_field=target_field,
            question_field=question_field,
            target_field=target_field,
        )

    @classmethod
    def for_variant(cls, variant: PipelineVariant) -> "PipelineSpec":
        variant = PipelineVariant(variant)
        if variant == PipelineVariant.CONDITIONAL:
            return cls.conditional()
        return cls.static()

    @property
    def required_fields(self) -> Tuple[str, ...]:
        if self.question_field:
            return self.input_fields + (self.question_field,)
        return self.input_fields

    def default_question(self, inputs: Mapping[str, Any]) -> str:
        names = _join_names([FieldName(name).capitalized for name in self.input_fields])
        if self.question_field:
            seed = FieldName(self.question_field)
            seed_json = json.dumps(inputs[seed.canonical], ensure_ascii=False, default=str)
            return f"Based on {names}, what will be the result for {seed.capitalized} ({seed_json})?"
        return f"Based on {names}, what are the actionable tasks that should be performed?"


class Orchestrator:
    """
    Sequences fetch, completeness check, synthesis, model call and write-back.

    Collaborators are injected; the orchestrator reads no configuration of
    its own. ``record_store`` needs ``fetch(endpoint)`` and
    ``write(endpoint, payload)``; ``llm_client`` needs
    ``generate(prompt, system=..., max_tokens=...)``.
    """

    def __init__(
        self,
        record_store,
        llm_client,
        spec: PipelineSpec,
        fetch_endpoint: str = "/data",
        write_endpoint: str = "/data",
        question: Optional[str] = None,
        max_tokens: int = 400,
    ):
        if max_tokens <= 0:
            raise ValueError(f"max_tokens must be positive, got {max_tokens}")
        self._store = record_store
        self._llm = llm_client
        self.spec = spec
        self.fetch_endpoint = fetch_endpoint
        self.write_endpoint = write_endpoint
        self.question = question or None
        self.max_tokens = max_tokens
        self.trace: List[PipelineState] = []

    @property
    def state(self) -> Optional[PipelineState]:
        return self.trace[-1] if self.trace else None

    def _enter(self, state: PipelineState) -> None:
        previous = self.state
        self.trace.append(state)
        if previous is not None:
            logger.info("[%s] %s -> %s", self.spec.source, previous.value, state.value)

    def run(self) -> OrchestrationOutcome:
        """Run the pipeline once. Never raises."""
        self.trace = []
        self._enter(PipelineState.INIT)
        logger.info("=== %s started ===", self.spec.source)

        try:
            outcome = self._run()
        except EnrichmentError as e:
            self._enter(PipelineState.FAILED)
            logger.error("=== %s failed (%s): %s ===", self.spec.source, e.kind, e)
            return FailedOutcome(error_kind=e.kind, message=str(e))
        except Exception as e:
            self._enter(PipelineState.FAILED)
            logger.exception("=== %s failed unexpectedly ===", self.spec.source)
            return FailedOutcome(error_kind="internal_error", message=str(e) or type(e).__name__)

        logger.info("=== %s finished (%s) ===", self.spec.source, outcome.kind)
        return outcome

    def _run(self) -> OrchestrationOutcome:
        record = self._store.fetch(self.fetch_endpoint)
        self._enter(PipelineState.FETCHED)

        inputs = self._read_required(record)

        if self.spec.target_field:
            target = FieldName(self.spec.target_field)
            existing = target.read(record)
            if not is_empty(existing):
                self._enter(PipelineState.SKIPPED)
                logger.info("%s is not empty, skipping analysis", target.capitalized)
                return SkippedOutcome(
                    reason=f"{target.capitalized} already exists. Analysis skipped.",
                    existing_value=existing,
                )
            logger.info("%s is empty, proceeding with analysis", target.capitalized)

        combined = {FieldName(name).capitalized: value for name, value in inputs.items()}
        classification = classify(combined)
        self._enter(PipelineState.CLASSIFIED)

        question = self.question or self.spec.default_question(inputs)
        request = synthesize(question, combined, classification)
        self._enter(PipelineState.SYNTHESIZED)
        logger.debug("Estimated domain: %s", request.domain)

        result = self._llm.generate(request.prompt, system=request.system, max_tokens=self.max_tokens)
        self._enter(PipelineState.INVOKED)

        payload = WritePayload(
            output_field=self.spec.output_field,
            result=result,
            metadata=WriteMetadata(
                source=self.spec.source,
                input_data=inputs,
                was_empty=True if self.spec.target_field else None,
            ),
        )
        ack = self._store.write(self.write_endpoint, payload.to_body())
        self._enter(PipelineState.WRITTEN_BACK)

        self._enter(PipelineState.DONE)
        label = self.spec.variant.value.capitalize()
        return CompletedOutcome(
            message=f"{label} analysis completed successfully",
            result=result,
            write_ack=ack,
        )

    def _read_required(self, record: Any) -> Dict[str, Any]:
        if not isinstance(record, Mapping):
            raise MissingFieldsError(list(self.spec.required_fields))

        inputs: Dict[str, Any] = {}
        missing: List[str] = []
        for name in self.spec.required_fields:
            field_name = FieldName(name)
            value = field_name.read(record)
            if is_absent(value):
                missing.append(field_name.canonical)
            else:
                inputs[field_name.canonical] = value

        if missing:
            raise MissingFieldsError(missing)
        return inputs


def build_orchestrator(variant, config, record_store, llm_client) -> Orchestrator:
    """Wire an Orchestrator for ``variant`` from an EnricherConfig."""
    spec = PipelineSpec.for_variant(variant)
    if spec.variant == PipelineVariant.CONDITIONAL:
        question = config.analysis.conditional_question
    else:
        question = config.analysis.static_question
    return Orchestrator(
        record_store=record_store,
        llm_client=llm_client,
        spec=spec,
        fetch_endpoint=config.record_store.fetch_endpoint,
        write_endpoint=config.record_store.write_endpoint,
        question=question or None,
        max_tokens=config.llm.max_tokens,
    )


def run_pipeline(variant, config, record_store=None, llm_client=None) -> OrchestrationOutcome:
    """
    Build adapters from ``config`` (unless given) and run one pipeline pass.

    A record store created here is closed before returning.
    """
    from ..common.llm_client import LLMClient
    from ..common.record_store import RecordStoreClient

    owns_store = record_store is None
    if owns_store:
        record_store = RecordStoreClient.from_config(config.record_store)
    if llm_client is None:
        llm_client = LLMClient.from_config(config.llm)

    try:
        try:
            orchestrator = build_orchestrator(variant, config, record_store, llm_client)
        except (TypeError, ValueError) as e:
            logger.error("Could not build %s pipeline: %s", variant, e)
            return FailedOutcome(error_kind="internal_error", message=str(e))
        return orchestrator.run()
    finally:
        if owns_store:
            record_store.close()
