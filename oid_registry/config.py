"""Configuration loader for the OID registry."""

from __future__ import annotations

from datetime import datetime
import logging
import os
from pathlib import Path
from typing import Optional

from oid_registry.types import GeneratorContext, RegistryConfig
from oid_tree.env import load_env
from oid_tree.identifiers import DEFAULT_ROOT_PREFIX, is_identifier_syntax, pen_from_prefix


LOGGER = logging.getLogger(__name__)

DEFAULT_ORGANIZATION_NAME = "BrainSAIT Enterprise"
DEFAULT_STORE_PATH = Path(".oid_registry") / "store.json"
DEFAULT_API_BASE_URL = "https://api.brainsait.com"
DEFAULT_FHIR_BASE_URL = "http://brainsait.com/fhir"
DEFAULT_HEADER_PREFIX = "X-BrainSAIT"
DEFAULT_DATABASE_TABLE = "brainsait_assets"


def _get_str(name: str, default: str) -> str:
    raw = os.getenv(name, "").strip()
    return raw or default


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_root_prefix() -> str:
    raw = os.getenv("OID_ROOT_PREFIX", "").strip()
    if not raw:
        return DEFAULT_ROOT_PREFIX
    if not is_identifier_syntax(raw):
        LOGGER.warning("OID_ROOT_PREFIX=%r is not a dotted identifier; using %s.", raw, DEFAULT_ROOT_PREFIX)
        return DEFAULT_ROOT_PREFIX
    return raw


def load_registry_config(load_dotenv: bool = True) -> RegistryConfig:
    if load_dotenv:
        load_env()

    return RegistryConfig(
        root_prefix=_get_root_prefix(),
        organization_name=_get_str("OID_ORGANIZATION_NAME", DEFAULT_ORGANIZATION_NAME),
        store_path=Path(_get_str("OID_STORE_PATH", str(DEFAULT_STORE_PATH))),
        api_base_url=_get_str("OID_API_BASE_URL", DEFAULT_API_BASE_URL).rstrip("/"),
        fhir_base_url=_get_str("OID_FHIR_BASE_URL", DEFAULT_FHIR_BASE_URL).rstrip("/"),
        header_prefix=_get_str("OID_HEADER_PREFIX", DEFAULT_HEADER_PREFIX),
        database_table=_get_str("OID_DATABASE_TABLE", DEFAULT_DATABASE_TABLE),
        openai_api_key=os.getenv("OPENAI_API_KEY", "").strip(),
        openai_base_url=_get_str("OPENAI_BASE_URL", "https://api.openai.com/v1"),
        suggest_model=_get_str("OID_SUGGEST_MODEL", _get_str("OPENAI_MODEL", "gpt-4o-mini")),
        timeout_seconds=_get_float("OPENAI_TIMEOUT_SECONDS", 30.0),
        http_max_retries=max(1, _get_int("OID_HTTP_MAX_RETRIES", 3)),
        http_backoff_seconds=max(0.0, _get_float("OID_HTTP_BACKOFF_SECONDS", 1.0)),
    )


def generator_context(config: RegistryConfig, generated_at: Optional[datetime] = None) -> GeneratorContext:
    """Project the namespace settings of a config onto the generator inputs."""
    return GeneratorContext(
        root_prefix=config.root_prefix,
        organization_name=config.organization_name,
        pen=pen_from_prefix(config.root_prefix),
        api_base_url=config.api_base_url,
        fhir_base_url=config.fhir_base_url,
        header_prefix=config.header_prefix,
        database_table=config.database_table,
        generated_at=generated_at,
    )


def default_generator_context(generated_at: Optional[datetime] = None) -> GeneratorContext:
    return GeneratorContext(
        root_prefix=DEFAULT_ROOT_PREFIX,
        organization_name=DEFAULT_ORGANIZATION_NAME,
        pen=pen_from_prefix(DEFAULT_ROOT_PREFIX),
        api_base_url=DEFAULT_API_BASE_URL,
        fhir_base_url=DEFAULT_FHIR_BASE_URL,
        header_prefix=DEFAULT_HEADER_PREFIX,
        database_table=DEFAULT_DATABASE_TABLE,
        generated_at=generated_at,
    )
