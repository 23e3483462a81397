"""
Provider-agnostic LLM client for Enricher pipelines.

Supports OpenAI (and OpenAI-compatible endpoints via base_url), Anthropic,
and Google Gemini behind one ``generate()`` call. A client without an API
key for its provider stays unavailable and every call raises ModelError.
"""

from __future__ import annotations

import hashlib
import logging
from typing import Any, Dict, Optional

from .errors import ModelError

logger = logging.getLogger("enricher.common.llm_client")

SUPPORTED_PROVIDERS = ("openai", "anthropic", "google")


class LLMClient:
    """Text in, text out, for whichever provider is configured."""

    def __init__(
        self,
        provider: str = "openai",
        model: str = "",
        openai_api_key: Optional[str] = None,
        openai_base_url: Optional[str] = None,
        anthropic_api_key: Optional[str] = None,
        google_api_key: Optional[str] = None,
        temperature: float = 0.7,
        timeout: float = 30.0,
        max_retries: int = 3,
    ) -> None:
        self.provider = (provider or "openai").lower()
        self.model = model
        self.temperature = temperature
        self.timeout = timeout
        self.max_retries = max_retries
        self._client: Any = None
        self._gemini_models: Dict[str, Any] = {}

        if self.provider not in SUPPORTED_PROVIDERS:
            logger.warning("Unsupported LLM provider: %s", self.provider)
            return

        api_key = {
            "openai": openai_api_key,
            "anthropic": anthropic_api_key,
            "google": google_api_key,
        }[self.provider]
        if not api_key:
            logger.info("%s API key not provided, LLM client unavailable", self.provider)
            return

        builder = getattr(self, f"_build_{self.provider}")
        try:
            self._client = builder(api_key, openai_base_url)
        except Exception as e:
            logger.warning("Could not create %s client: %s", self.provider, e)

    def _build_openai(self, api_key: str, base_url: Optional[str]):
        from openai import OpenAI

        options = {"api_key": api_key, "max_retries": self.max_retries, "timeout": self.timeout}
        if base_url:
            options["base_url"] = base_url
        return OpenAI(**options)

    def _build_anthropic(self, api_key: str, base_url: Optional[str]):
        import anthropic

        return anthropic.Anthropic(api_key=api_key, max_retries=self.max_retries, timeout=self.timeout)

    def _build_google(self, api_key: str, base_url: Optional[str]):
        import google.generativeai as genai

        genai.configure(api_key=api_key)
        # the module itself; models are created per system instruction
        return genai

    @classmethod
    def from_config(cls, llm_config) -> "LLMClient":
        """Build a client from an LLMConfig."""
        return cls(
            provider=llm_config.provider,
            model=llm_config.model,
            openai_api_key=llm_config.openai_api_key or None,
            openai_base_url=llm_config.openai_base_url or None,
            anthropic_api_key=llm_config.anthropic_api_key or None,
            google_api_key=llm_config.google_api_key or None,
            temperature=llm_config.temperature,
            timeout=llm_config.timeout,
            max_retries=llm_config.max_retries,
        )

    @property
    def is_available(self) -> bool:
        return self._client is not None

    def generate(
        self,
        prompt: str,
        *,
        system: Optional[str] = None,
        max_tokens: int = 400,
        timeout: Optional[float] = None,
    ) -> str:
        """Send ``prompt`` and return the model's text, stripped.

        Any SDK failure surfaces as a single ModelError; the SDKs handle
        their own transient retries.
        """
        if not self.is_available:
            raise ModelError(f"LLM client is not available (provider: {self.provider})")

        if timeout is None:
            timeout = self.timeout
        call = getattr(self, f"_call_{self.provider}")
        logger.info("Sending prompt to %s/%s (%d chars)", self.provider, self.model, len(prompt))
        logger.debug("Prompt preview: %s...", prompt[:200])

        try:
            text = call(prompt, system, max_tokens, timeout)
        except Exception as e:
            logger.error("%s generation failed: %s", self.provider, e)
            raise ModelError(f"{self.provider} analysis failed: {e}") from e

        logger.info("Response received (%d chars)", len(text))
        return text

    def _call_openai(self, prompt, system, max_tokens, timeout) -> str:
        messages = [{"role": "user", "content": prompt}]
        if system:
            messages.insert(0, {"role": "system", "content": system})
        completion = self._client.chat.completions.create(
            model=self.model,
            messages=messages,
            max_tokens=max_tokens,
            temperature=self.temperature,
            timeout=timeout,
        )
        return (completion.choices[0].message.content or "").strip()

    def _call_anthropic(self, prompt, system, max_tokens, timeout) -> str:
        extra = {"system": system} if system else {}
        message = self._client.messages.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            max_tokens=max_tokens,
            temperature=self.temperature,
            timeout=timeout,
            **extra,
        )
        return message.content[0].text.strip()

    def _call_google(self, prompt, system, max_tokens, timeout) -> str:
        key = hashlib.sha1((system or "").encode("utf-8")).hexdigest()
        model = self._gemini_models.get(key)
        if model is None:
            options = {"model_name": self.model}
            if system:
                options["system_instruction"] = system
            model = self._gemini_models[key] = self._client.GenerativeModel(**options)
        reply = model.generate_content(
            prompt,
            generation_config={"max_output_tokens": max_tokens, "temperature": self.temperature},
            request_options={"timeout": timeout},
        )
        return reply.text.strip()
