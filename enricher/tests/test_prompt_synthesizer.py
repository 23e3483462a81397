"""
Tests for Prompt Synthesizer

Tests section layout, field listings, determinism and the domain system prompt.
"""

import copy

import pytest


SECTION_HEADERS = ["QUESTION:", "CONTEXT:", "DATA STRUCTURE:", "RAW DATA:"]


@pytest.fixture
def sales_record():
    return {
        "Data1": {"temperature": 25, "humidity": 60, "location": "Jakarta"},
        "Data2": {"sales": 150000, "target": 200000, "month": "October"},
        "Data3": {"inventory": 45, "reorderLevel": 50, "product": "Widget A"},
    }


class TestSynthesize:
    """Tests for synthesize()"""

    def test_sections_in_order(self, sales_record):
        from enricher.analyst.prompt_synthesizer import synthesize

        request = synthesize("What should we do?", sales_record)
        positions = [request.prompt.index(header) for header in SECTION_HEADERS]

        assert positions == sorted(positions)

    def test_question_verbatim(self, sales_record):
        from enricher.analyst.prompt_synthesizer import synthesize

        question = "What about {Data5} and 100% of {targets}?"
        request = synthesize(question, sales_record)

        assert f"QUESTION:\n{question}\n" in request.prompt
        assert request.question == question

    def test_context_block(self, sales_record):
        from enricher.analyst.prompt_synthesizer import synthesize

        request = synthesize("Q", sales_record)

        assert (
            "CONTEXT:\nData Type: Object\nNumber of Fields: 3\nEstimated Domain: unknown"
            in request.prompt
        )

    def test_field_listing(self):
        from enricher.analyst.prompt_synthesizer import synthesize

        record = {"Data1": {"a": 1}, "tags": ["x"], "count": 2, "flag": True, "gone": None}
        request = synthesize("Q", record)

        assert "  - Data1: object (nested object)" in request.prompt
        assert "  - tags: object (array)" in request.prompt
        assert "  - count: number" in request.prompt
        assert "  - flag: boolean" in request.prompt
        assert "  - gone: null" in request.prompt

    def test_empty_record_keeps_every_section(self):
        from enricher.analyst.prompt_synthesizer import synthesize

        request = synthesize("Q", {})

        for header in SECTION_HEADERS:
            assert header in request.prompt
        assert "Number of Fields: 0" in request.prompt
        assert "DATA STRUCTURE:\n\n\nRAW DATA:\n{}" in request.prompt

    def test_array_record(self):
        from enricher.analyst.prompt_synthesizer import synthesize

        request = synthesize("Q", [1, 2])

        assert "Data Type: Array" in request.prompt
        assert "  - 0: number" in request.prompt

    def test_raw_data_keeps_key_order(self):
        from enricher.analyst.prompt_synthesizer import synthesize

        request = synthesize("Q", {"zeta": 1, "alpha": 2})

        assert request.prompt.index('"zeta"') < request.prompt.index('"alpha"')
        assert '"zeta": 1' in request.prompt

    def test_deterministic(self, sales_record):
        from enricher.analyst.prompt_synthesizer import synthesize

        first = synthesize("Q", sales_record)
        second = synthesize("Q", copy.deepcopy(sales_record))

        assert first.prompt == second.prompt
        assert first.system == second.system

    def test_does_not_mutate_inputs(self, sales_record):
        from enricher.analyst.classifier import classify
        from enricher.analyst.prompt_synthesizer import synthesize

        classification = classify(sales_record)
        record_snapshot = copy.deepcopy(sales_record)
        fields_snapshot = list(classification.fields)

        synthesize("Q", sales_record, classification)

        assert sales_record == record_snapshot
        assert classification.fields == fields_snapshot

    def test_uses_given_classification(self, sales_record):
        from enricher.analyst.classifier import classify
        from enricher.analyst.prompt_synthesizer import synthesize

        classification = classify(sales_record)
        request = synthesize("Q", sales_record, classification)

        assert request.classification is classification
        assert request.record is sales_record

    def test_request_is_immutable(self, sales_record):
        from dataclasses import FrozenInstanceError
        from enricher.analyst.prompt_synthesizer import synthesize

        request = synthesize("Q", sales_record)

        with pytest.raises(FrozenInstanceError):
            request.question = "changed"


class TestSystemPrompt:
    """Tests for the domain-specific system prompt"""

    def test_financial_instructions(self):
        from enricher.analyst.prompt_synthesizer import synthesize

        request = synthesize("Q", {"price_usd": 64000, "btc": 1})

        assert request.domain == "financial"
        assert "financial data" in request.system
        assert "- Identify all financial metrics and their values" in request.system

    def test_unknown_instructions(self):
        from enricher.analyst.prompt_synthesizer import synthesize

        request = synthesize("Q", {"field1": 1})

        assert "unknown data" in request.system
        assert "- Provide a clear and concise summary" in request.system

    def test_user_profile_domain_label(self):
        from enricher.analyst.prompt_synthesizer import synthesize

        request = synthesize("Q", {"email": "a@example.com"})

        assert "user profile data" in request.system

    def test_system_prompt_not_in_user_prompt(self):
        from enricher.analyst.prompt_synthesizer import synthesize

        request = synthesize("Q", {"price": 1})

        assert "Identify all financial metrics" not in request.prompt


class TestSerializeRecord:
    def test_pretty_printed_and_unicode_kept(self):
        from enricher.analyst.prompt_synthesizer import serialize_record

        text = serialize_record({"city": "São Paulo", "n": 1})

        assert text == '{\n  "city": "São Paulo",\n  "n": 1\n}'
