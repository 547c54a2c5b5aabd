"""Core data models used by the OID registry."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Optional

from oid_tree.builder import NodeDraft
from oid_tree.tree import OidNode


@dataclass
class RegistryConfig:
    root_prefix: str
    organization_name: str
    store_path: Path
    api_base_url: str
    fhir_base_url: str
    header_prefix: str
    database_table: str
    openai_api_key: str
    openai_base_url: str
    suggest_model: str
    timeout_seconds: float
    http_max_retries: int
    http_backoff_seconds: float


@dataclass(frozen=True)
class GeneratorContext:
    root_prefix: str
    organization_name: str
    pen: Optional[int]
    api_base_url: str
    fhir_base_url: str
    header_prefix: str
    database_table: str
    generated_at: Optional[datetime] = None


@dataclass(frozen=True)
class Implementation:
    key: str
    title: str
    description: str
    language: str
    generator: Callable[[OidNode, Optional[GeneratorContext]], str]


@dataclass
class NodeSuggestion:
    name: str
    description: str
    use_cases: list[str] = field(default_factory=list)
    kind: str = "leaf"

    def to_draft(self, status: str = "active") -> NodeDraft:
        return NodeDraft(
            name=self.name,
            description=self.description,
            kind=self.kind,
            status=status,
            use_cases=list(self.use_cases),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "useCases": list(self.use_cases),
            "kind": self.kind,
        }


@dataclass
class TagPayload:
    identifier: str
    name: str
    issuer: str
    pen: Optional[str]
    timestamp: Optional[str]
    in_namespace: bool = False
