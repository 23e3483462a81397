"""
Enricher Analyst

Domain classification, prompt synthesis and the enrichment orchestrator.
"""

from .classifier import DomainClassification, FieldInfo, classify, analysis_instructions
from .prompt_synthesizer import AnalysisRequest, synthesize
from .orchestrator import (
    Orchestrator,
    PipelineSpec,
    PipelineState,
    PipelineVariant,
    build_orchestrator,
    run_pipeline,
)

__all__ = [
    "DomainClassification",
    "FieldInfo",
    "classify",
    "analysis_instructions",
    "AnalysisRequest",
    "synthesize",
    "Orchestrator",
    "PipelineSpec",
    "PipelineState",
    "PipelineVariant",
    "build_orchestrator",
    "run_pipeline",
]
