"""Validation and construction of user-added child nodes."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import re
from typing import Optional

from oid_tree.identifiers import DEFAULT_ROOT_PREFIX, validate_identifier
from oid_tree.tree import NODE_STATUSES, OidNode, next_child_identifier, traverse_all_nodes


LOGGER = logging.getLogger(__name__)

WHITESPACE_RUN_RE = re.compile(r"\s+")
CHILD_KINDS: tuple[str, ...] = ("branch", "leaf")


class NodeValidationError(ValueError):
    """Raised when a candidate node fails the add-node rules."""


@dataclass
class NodeDraft:
    name: str
    description: str
    kind: str = "leaf"
    status: str = "active"
    use_cases: list[str] = field(default_factory=list)


def slugify_name(name: str) -> str:
    """Lowercase the trimmed name and collapse whitespace runs into single hyphens."""
    return WHITESPACE_RUN_RE.sub("-", name.strip().lower())


def unique_node_id(base_id: str, root: Optional[OidNode]) -> str:
    if root is None:
        return base_id
    taken = {node.id for node in traverse_all_nodes(root)}
    if base_id not in taken:
        return base_id
    suffix = 2
    while f"{base_id}-{suffix}" in taken:
        suffix += 1
    return f"{base_id}-{suffix}"


def check_draft_text(draft: NodeDraft) -> Optional[str]:
    if not draft.name.strip():
        return "Name is required"
    if not draft.description.strip():
        return "Description is required"
    return None


def validate_draft(
    draft: NodeDraft,
    parent: Optional[OidNode],
    root_prefix: str = DEFAULT_ROOT_PREFIX,
) -> Optional[str]:
    """Return the first failed rule as a message, or None when the draft is acceptable."""
    problem = check_draft_text(draft)
    if problem is not None:
        return problem
    if parent is None:
        return "Parent node is required"
    if not validate_identifier(next_child_identifier(parent), root_prefix):
        return "Invalid OID format"
    if draft.kind not in CHILD_KINDS:
        return f"Node type must be one of: {', '.join(CHILD_KINDS)}"
    if draft.status not in NODE_STATUSES:
        return f"Status must be one of: {', '.join(NODE_STATUSES)}"
    return None


def build_child_node(
    draft: NodeDraft,
    parent: Optional[OidNode],
    existing_root: Optional[OidNode] = None,
    root_prefix: str = DEFAULT_ROOT_PREFIX,
) -> OidNode:
    """Validate the draft and build the node that would be appended under parent.

    When ``existing_root`` is given, a derived id already present in that tree receives a
    numeric suffix (``-2``, ``-3``, ...).
    """
    problem = validate_draft(draft, parent, root_prefix)
    if problem is not None:
        raise NodeValidationError(problem)

    base_id = slugify_name(draft.name)
    node_id = unique_node_id(base_id, existing_root)
    if node_id != base_id:
        LOGGER.info("Node id '%s' already exists; using '%s'.", base_id, node_id)

    use_cases = tuple(item.strip() for item in draft.use_cases if item.strip())
    return OidNode(
        id=node_id,
        identifier=next_child_identifier(parent),
        name=draft.name.strip(),
        description=draft.description.strip(),
        kind=draft.kind,
        status=draft.status,
        use_cases=use_cases or None,
        children=() if draft.kind == "branch" else None,
    )
