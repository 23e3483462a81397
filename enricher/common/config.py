"""
Configuration Management for Enricher

Loads configuration from ~/.enricher/config.json, a local .env file and
environment variables. Only hosts call load_config(); the pipeline core
receives the resulting dataclasses through constructors.
"""

import os
import json
import logging
from pathlib import Path
from dataclasses import dataclass, field, fields
from typing import Any

from dotenv import find_dotenv, load_dotenv

logger = logging.getLogger("enricher.common.config")

# ~/.enricher/config.json
CONFIG_DIR = Path.home() / ".enricher"
CONFIG_PATH = CONFIG_DIR / "config.json"

DEFAULT_MAX_TOKENS = 400

# Environment variable -> (config section, attribute).
# GEMINI_API_KEY wins over GOOGLE_API_KEY when both are set.
ENV_OVERRIDES = {
    "REST_API_URL": ("record_store", "base_url"),
    "REST_API_KEY": ("record_store", "api_key"),
    "FETCH_ENDPOINT": ("record_store", "fetch_endpoint"),
    "POST_ENDPOINT": ("record_store", "write_endpoint"),
    "ENRICHER_LLM_PROVIDER": ("llm", "provider"),
    "OPENAI_API_KEY": ("llm", "openai_api_key"),
    "OPENAI_BASE_URL": ("llm", "openai_base_url"),
    "OPENAI_MODEL": ("llm", "openai_model"),
    "ANTHROPIC_API_KEY": ("llm", "anthropic_api_key"),
    "ANTHROPIC_MODEL": ("llm", "anthropic_model"),
    "GOOGLE_API_KEY": ("llm", "google_api_key"),
    "GEMINI_API_KEY": ("llm", "google_api_key"),
    "GOOGLE_MODEL": ("llm", "google_model"),
    "STATIC_ANALYSIS_QUESTION": ("analysis", "static_question"),
    "CONDITIONAL_ANALYSIS_QUESTION": ("analysis", "conditional_question"),
}


@dataclass
class RecordStoreConfig:
    """Source-of-record REST API configuration"""
    base_url: str = ""
    api_key: str = ""
    fetch_endpoint: str = "/data"
    write_endpoint: str = "/data"
    timeout: float = 15.0
    max_retries: int = 2  # transient transport failures only


@dataclass
class LLMConfig:
    """LLM provider configuration"""
    provider: str = "openai"
    openai_api_key: str = ""
    openai_base_url: str = ""
    openai_model: str = "gpt-4o-mini"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-20250514"
    google_api_key: str = ""
    google_model: str = "gemini-2.0-flash-exp"
    max_tokens: int = DEFAULT_MAX_TOKENS
    temperature: float = 0.7
    timeout: float = 30.0
    max_retries: int = 3

    @property
    def model(self) -> str:
        """Model identifier for the selected provider"""
        return {
            "openai": self.openai_model,
            "anthropic": self.anthropic_model,
            "google": self.google_model,
        }.get((self.provider or "").lower(), "")


@dataclass
class AnalysisConfig:
    """Question overrides per pipeline (empty = built-in template)"""
    static_question: str = ""
    conditional_question: str = ""


@dataclass
class ServerConfig:
    """HTTP host configuration"""
    host: str = "0.0.0.0"
    port: int = 8080


@dataclass
class EnricherConfig:
    """Main Enricher configuration"""
    record_store: RecordStoreConfig = field(default_factory=RecordStoreConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    server: ServerConfig = field(default_factory=ServerConfig)


def _parse_section(section_cls, data: dict, name: str):
    """Build one config section from the matching key of the config file.

    Unknown keys are logged and ignored; missing keys keep their defaults.
    """
    section = data.get(name) or {}
    known = {f.name for f in fields(section_cls)}
    unknown = sorted(set(section) - known)
    if unknown:
        logger.warning("Ignoring unknown %s settings: %s", name, ", ".join(unknown))
    return section_cls(**{key: value for key, value in section.items() if key in known})


def _parse_max_tokens(raw: Any, source: str = "MAX_TOKENS") -> int:
    if isinstance(raw, bool):
        raw = str(raw)
    try:
        value = int(raw)
    except (TypeError, ValueError):
        logger.warning("Ignoring non-integer %s=%r", source, raw)
        return DEFAULT_MAX_TOKENS
    if value <= 0:
        logger.warning("Ignoring non-positive %s=%r", source, raw)
        return DEFAULT_MAX_TOKENS
    return value


def load_config(dotenv: bool = True) -> EnricherConfig:
    """
    Load configuration from file and environment variables.

    Priority (highest to lowest):
    1. Environment variables (including a local .env file)
    2. Config file (~/.enricher/config.json)
    3. Default values
    """
    config = EnricherConfig()

    if dotenv:
        load_dotenv(find_dotenv(usecwd=True))

    # file values replace defaults section by section
    if CONFIG_PATH.exists():
        try:
            with open(CONFIG_PATH) as f:
                data = json.load(f)

            config.record_store = _parse_section(RecordStoreConfig, data, "record_store")
            config.llm = _parse_section(LLMConfig, data, "llm")
            config.analysis = _parse_section(AnalysisConfig, data, "analysis")
            config.server = _parse_section(ServerConfig, data, "server")
            config.llm.max_tokens = _parse_max_tokens(config.llm.max_tokens, "llm.max_tokens")
        except (json.JSONDecodeError, IOError) as e:
            logger.warning("Failed to load config file %s: %s", CONFIG_PATH, e)

    for env_var, (section, attr) in ENV_OVERRIDES.items():
        value = os.getenv(env_var)
        if value:
            setattr(getattr(config, section), attr, value)

    raw_max_tokens = os.getenv("MAX_TOKENS")
    if raw_max_tokens:
        config.llm.max_tokens = _parse_max_tokens(raw_max_tokens)

    raw_port = os.getenv("ENRICHER_PORT")
    if raw_port:
        config.server.port = int(raw_port)

    return config
