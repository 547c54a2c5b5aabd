"""OID registry package."""

from oid_registry.config import generator_context, load_registry_config
from oid_registry.generators import (
    IMPLEMENTATIONS,
    bundle_filename,
    generate_implementation,
    render_download_bundle,
)
from oid_registry.session import RegistrySession
from oid_registry.store import REGISTRY_KEY, InMemoryStore, JsonFileStore
from oid_registry.suggestions import SuggestionError, suggest_child_nodes
from oid_registry.types import (
    GeneratorContext,
    Implementation,
    NodeSuggestion,
    RegistryConfig,
    TagPayload,
)

__all__ = [
    "GeneratorContext",
    "IMPLEMENTATIONS",
    "Implementation",
    "InMemoryStore",
    "JsonFileStore",
    "NodeSuggestion",
    "REGISTRY_KEY",
    "RegistryConfig",
    "RegistrySession",
    "SuggestionError",
    "TagPayload",
    "bundle_filename",
    "generate_implementation",
    "generator_context",
    "load_registry_config",
    "render_download_bundle",
    "suggest_child_nodes",
]
