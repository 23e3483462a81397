"""
Run one enrichment pass from the command line.

Usage:
    python -m enricher.analyst static
    python -m enricher.analyst conditional --max-tokens 600 -v
"""

import sys
import json
import logging
import argparse

from ..common.config import load_config
from .orchestrator import PipelineVariant, run_pipeline


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Run an enrichment pipeline once and print the outcome")
    parser.add_argument("pipeline", choices=[v.value for v in PipelineVariant], help="Pipeline to run")
    parser.add_argument("--fetch-endpoint", type=str, default=None, help="Override the fetch endpoint")
    parser.add_argument("--write-endpoint", type=str, default=None, help="Override the write endpoint")
    parser.add_argument("--question", type=str, default=None, help="Override the question for this run")
    parser.add_argument("--max-tokens", type=int, default=None, help="Maximum output tokens")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    config = load_config()
    if args.fetch_endpoint:
        config.record_store.fetch_endpoint = args.fetch_endpoint
    if args.write_endpoint:
        config.record_store.write_endpoint = args.write_endpoint
    if args.max_tokens is not None:
        if args.max_tokens <= 0:
            parser.error("--max-tokens must be positive")
        config.llm.max_tokens = args.max_tokens

    variant = PipelineVariant(args.pipeline)
    if args.question:
        if variant == PipelineVariant.CONDITIONAL:
            config.analysis.conditional_question = args.question
        else:
            config.analysis.static_question = args.question

    outcome = run_pipeline(variant, config)
    print(json.dumps(outcome.to_response(), indent=2, ensure_ascii=False, default=str))
    return 0 if outcome.status_code == 200 else 1


if __name__ == "__main__":
    sys.exit(main())
