"""LLMClient: provider selection, SDK wiring and error translation."""

import logging

import pytest
from unittest.mock import Mock, patch

from enricher.common.errors import ModelError
from enricher.common.llm_client import LLMClient


class TestConstruction:
    @pytest.mark.parametrize("provider", ["openai", "anthropic", "google"])
    def test_no_key_leaves_client_unavailable(self, provider, caplog):
        with caplog.at_level(logging.INFO, logger="enricher.common.llm_client"):
            llm = LLMClient(provider=provider, model="m")
        assert llm.is_available is False
        assert f"{provider} API key not provided" in caplog.text

    def test_unknown_provider_warns(self, caplog):
        with caplog.at_level(logging.WARNING, logger="enricher.common.llm_client"):
            llm = LLMClient(provider="cohere", openai_api_key="sk-test")
        assert llm.is_available is False
        assert "Unsupported LLM provider: cohere" in caplog.text

    def test_sdk_constructor_failure_is_logged(self, caplog):
        with patch("openai.OpenAI", side_effect=RuntimeError("bad proxy")), \
             caplog.at_level(logging.WARNING, logger="enricher.common.llm_client"):
            llm = LLMClient(provider="openai", openai_api_key="sk-test")
        assert llm.is_available is False
        assert "bad proxy" in caplog.text

    def test_openai_base_url_and_retries(self):
        with patch("openai.OpenAI") as mock_openai:
            client = LLMClient(
                provider="openai",
                model="gpt-4o-mini",
                openai_api_key="sk-test",
                openai_base_url="https://ai.example.com/v1",
            )
        assert client.is_available
        mock_openai.assert_called_once_with(
            api_key="sk-test",
            max_retries=3,
            timeout=30.0,
            base_url="https://ai.example.com/v1",
        )

    def test_openai_without_base_url(self):
        with patch("openai.OpenAI") as mock_openai:
            LLMClient(provider="OpenAI", openai_api_key="sk-test", max_retries=1, timeout=5.0)
        mock_openai.assert_called_once_with(api_key="sk-test", max_retries=1, timeout=5.0)

    def test_from_config(self):
        from enricher.common.config import LLMConfig

        client = LLMClient.from_config(LLMConfig(provider="anthropic", temperature=0.2, timeout=12.0))

        assert client.provider == "anthropic"
        assert client.model == "claude-sonnet-4-20250514"
        assert client.temperature == 0.2
        assert client.timeout == 12.0
        assert not client.is_available


class TestGenerate:
    def test_unavailable_client_raises_model_error(self):
        client = LLMClient(provider="openai")
        with pytest.raises(ModelError, match="not available"):
            client.generate("test")

    def test_openai_generate(self):
        client = LLMClient(provider="openai", model="gpt-4o-mini")
        client._client = Mock()
        client._client.chat.completions.create.return_value = Mock(
            choices=[Mock(message=Mock(content="  Reorder Widget A  "))]
        )

        text = client.generate("prompt", system="be brief", max_tokens=400)

        assert text == "Reorder Widget A"
        kwargs = client._client.chat.completions.create.call_args[1]
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["max_tokens"] == 400
        assert kwargs["temperature"] == 0.7
        assert kwargs["timeout"] == 30.0
        assert kwargs["messages"] == [
            {"role": "system", "content": "be brief"},
            {"role": "user", "content": "prompt"},
        ]

    def test_openai_empty_content(self):
        client = LLMClient(provider="openai")
        client._client = Mock()
        client._client.chat.completions.create.return_value = Mock(
            choices=[Mock(message=Mock(content=None))]
        )

        assert client.generate("prompt") == ""

    def test_anthropic_generate_without_system(self):
        client = LLMClient(provider="anthropic", model="claude-sonnet-4-20250514")
        client._client = Mock()
        client._client.messages.create.return_value = Mock(content=[Mock(text="answer\n")])

        text = client.generate("prompt", max_tokens=100, timeout=5.0)

        assert text == "answer"
        kwargs = client._client.messages.create.call_args[1]
        assert "system" not in kwargs
        assert kwargs["max_tokens"] == 100
        assert kwargs["timeout"] == 5.0

    def test_sdk_error_becomes_model_error(self, caplog):
        client = LLMClient(provider="openai")
        client._client = Mock()
        client._client.chat.completions.create.side_effect = RuntimeError("rate limited")

        with caplog.at_level(logging.ERROR, logger="enricher.common.llm_client"):
            with pytest.raises(ModelError, match="openai analysis failed: rate limited") as exc_info:
                client.generate("prompt")

        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert "generation failed" in caplog.text
