"""LLM-assisted child node suggestions for a registry parent."""

from __future__ import annotations

import json
import logging
from typing import Protocol

from oid_registry.types import NodeSuggestion, RegistryConfig
from oid_registry.utils.openai_client import OpenAICompatibleClient
from oid_tree.tree import OidNode


LOGGER = logging.getLogger(__name__)

SUGGESTION_COUNT = 3
SUGGESTION_KINDS = ("branch", "leaf")


class SuggestionError(RuntimeError):
    """Raised when the suggestion service fails or returns an unusable payload."""


class SuggestionLLMClient(Protocol):
    def chat_completion(
        self,
        model: str,
        messages: list[dict[str, str]],
        max_tokens: int = 512,
        temperature: float = 0.2,
        response_format: dict | None = None,
    ) -> str:
        """Return raw text from a chat completion endpoint."""


def build_suggestion_client_from_config(config: RegistryConfig) -> tuple[OpenAICompatibleClient, str]:
    if not config.openai_api_key:
        raise ValueError("OPENAI_API_KEY is required for node suggestions.")

    client = OpenAICompatibleClient(
        api_key=config.openai_api_key,
        base_url=config.openai_base_url,
        timeout_seconds=config.timeout_seconds,
        max_retries=config.http_max_retries,
        retry_backoff_seconds=config.http_backoff_seconds,
    )
    return client, config.suggest_model


def build_suggestion_prompt(use_case: str, parent: OidNode) -> str:
    use_case_lines = "\n".join(f"- {item}" for item in parent.use_cases or ()) or "- (none listed)"
    return (
        "You are an enterprise OID registry architect.\n"
        f"Propose exactly {SUGGESTION_COUNT} new child nodes for the parent node below that "
        "would serve the requested use case.\n"
        "Return a strict JSON object with key 'suggestions'.\n"
        "Each item must include: name (short label), description (one sentence), "
        "useCases (list of strings), kind ('branch' or 'leaf').\n\n"
        f"Requested use case:\n{use_case.strip()}\n\n"
        f"Parent name: {parent.name}\n"
        f"Parent OID: {parent.identifier}\n"
        f"Parent description: {parent.description}\n"
        f"Parent use cases:\n{use_case_lines}\n"
    )


def _parse_suggestion_row(row: object, position: int) -> NodeSuggestion:
    if not isinstance(row, dict):
        raise SuggestionError(f"Suggestion #{position} is not a JSON object.")

    name = row.get("name")
    description = row.get("description")
    kind = row.get("kind")
    use_cases = row.get("useCases", [])

    if not isinstance(name, str) or not name.strip():
        raise SuggestionError(f"Suggestion #{position} has no usable name.")
    if not isinstance(description, str) or not description.strip():
        raise SuggestionError(f"Suggestion #{position} has no usable description.")
    if kind not in SUGGESTION_KINDS:
        raise SuggestionError(f"Suggestion #{position} has unsupported kind: {kind!r}")
    if not isinstance(use_cases, list) or not all(isinstance(item, str) for item in use_cases):
        raise SuggestionError(f"Suggestion #{position} field 'useCases' must be a list of strings.")

    return NodeSuggestion(
        name=name.strip(),
        description=description.strip(),
        use_cases=[item.strip() for item in use_cases if item.strip()],
        kind=kind,
    )


def parse_suggestions(text: str) -> list[NodeSuggestion]:
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SuggestionError("Suggestion response is not valid JSON.") from exc

    if isinstance(payload, dict):
        rows = payload.get("suggestions")
    elif isinstance(payload, list):
        rows = payload
    else:
        raise SuggestionError("Suggestion response must be a JSON list/object.")

    if not isinstance(rows, list):
        raise SuggestionError("Suggestion response has no 'suggestions' list.")
    if len(rows) != SUGGESTION_COUNT:
        raise SuggestionError(
            f"Expected {SUGGESTION_COUNT} suggestions, received {len(rows)}."
        )

    return [_parse_suggestion_row(row, position) for position, row in enumerate(rows, start=1)]


def suggest_child_nodes(
    use_case: str,
    parent: OidNode,
    llm_client: SuggestionLLMClient,
    model: str,
) -> list[NodeSuggestion]:
    """Ask the LLM for child node proposals under parent.

    Raises ValueError for an empty use case and SuggestionError for service failures or
    non-conforming responses.
    """
    if not use_case.strip():
        raise ValueError("Use case description is required.")

    prompt = build_suggestion_prompt(use_case, parent)
    LOGGER.info("Requesting node suggestions: parent=%s model=%s", parent.id, model)
    try:
        response = llm_client.chat_completion(
            model=model,
            messages=[{"role": "user", "content": prompt}],
            max_tokens=900,
            temperature=0.7,
            response_format={"type": "json_object"},
        )
    except RuntimeError as exc:
        raise SuggestionError(f"Suggestion request failed: {exc}") from exc

    suggestions = parse_suggestions(response)
    LOGGER.info("Received %d node suggestions for parent=%s", len(suggestions), parent.id)
    return suggestions
