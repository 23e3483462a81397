"""
Enricher

Fills a missing derived field on a record by asking a language model about
the record's other fields, then writing the answer back.

Philosophy:
- Re-running after a successful fill is a no-op apart from one read
- Every run ends in exactly one outcome: skipped, completed or failed
- Prompts are deterministic for identical records

Usage:
    from enricher.common import load_config
    from enricher.analyst import PipelineVariant, run_pipeline
"""

__version__ = "0.1.0"
