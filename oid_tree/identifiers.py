"""Identifier syntax, namespace checks, and arc helpers."""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from oid_tree.tree import OidNode


DEFAULT_ROOT_PREFIX = "1.3.6.1.4.1.61026"
ENTERPRISE_ARC_PREFIX = "1.3.6.1.4.1"

IDENTIFIER_RE = re.compile(r"(\d+\.)+\d+", re.ASCII)
ARC_RE = re.compile(r"[0-9]+")

REGISTRATION_AUTHORITIES: dict[str, str] = {
    "0": "ITU-T",
    "1": "ISO",
    "2": "Joint ISO/ITU-T",
}


@dataclass(frozen=True)
class IdentifierInfo:
    identifier: str
    arcs: tuple[int, ...]
    depth: int
    in_namespace: bool
    pen: Optional[int]
    branch_arc: Optional[int]
    branch_name: Optional[str]
    registration_authority: str
    urn: str


def is_identifier_syntax(identifier: str) -> bool:
    return bool(IDENTIFIER_RE.fullmatch(identifier))


def in_namespace(identifier: str, root_prefix: str = DEFAULT_ROOT_PREFIX) -> bool:
    """Return True when identifier is the root prefix or lies below it."""
    return identifier == root_prefix or identifier.startswith(f"{root_prefix}.")


def validate_identifier(identifier: str, root_prefix: str = DEFAULT_ROOT_PREFIX) -> bool:
    """Validate dotted-numeric syntax and membership of the organization namespace."""
    if not isinstance(identifier, str):
        return False
    return is_identifier_syntax(identifier) and in_namespace(identifier, root_prefix)


def parse_arcs(identifier: str) -> tuple[int, ...]:
    """Split an identifier into integer arcs; raises ValueError on malformed input."""
    if not is_identifier_syntax(identifier):
        raise ValueError(f"Malformed identifier: {identifier!r}")
    return tuple(int(part) for part in identifier.split("."))


def trailing_arc(identifier: str) -> int:
    """Return the last arc as an integer, or 0 when it does not parse."""
    last_segment = identifier.rsplit(".", 1)[-1]
    if not ARC_RE.fullmatch(last_segment):
        return 0
    return int(last_segment)


def parent_identifier(identifier: str) -> str:
    head, sep, _ = identifier.rpartition(".")
    return head if sep else ""


def child_identifier(parent: str, arc: int) -> str:
    return f"{parent}.{arc}"


def to_urn(identifier: str) -> str:
    return f"urn:oid:{identifier}"


def to_fhir_system(identifier: str, fhir_base_url: str) -> str:
    return f"{fhir_base_url.rstrip('/')}/oid/{identifier}"


def pen_from_prefix(root_prefix: str) -> Optional[int]:
    """Return the Private Enterprise Number when the prefix sits under 1.3.6.1.4.1."""
    if not root_prefix.startswith(f"{ENTERPRISE_ARC_PREFIX}."):
        return None
    remainder = root_prefix[len(ENTERPRISE_ARC_PREFIX) + 1 :]
    if not ARC_RE.fullmatch(remainder):
        return None
    return int(remainder)


def describe_identifier(
    identifier: str,
    root_prefix: str = DEFAULT_ROOT_PREFIX,
    tree: "OidNode | None" = None,
) -> IdentifierInfo:
    """Break an identifier down into arcs and namespace details.

    When ``tree`` is given, the top-level branch name is resolved from the node whose
    identifier is ``<root_prefix>.<branch_arc>``.
    """
    arcs = parse_arcs(identifier)
    member = in_namespace(identifier, root_prefix)
    prefix_depth = root_prefix.count(".") + 1

    branch_arc: Optional[int] = None
    branch_name: Optional[str] = None
    if member and len(arcs) > prefix_depth:
        branch_arc = arcs[prefix_depth]
        if tree is not None:
            from oid_tree.tree import find_by_identifier

            branch = find_by_identifier(tree, child_identifier(root_prefix, branch_arc))
            branch_name = branch.name if branch is not None else None

    return IdentifierInfo(
        identifier=identifier,
        arcs=arcs,
        depth=len(arcs),
        in_namespace=member,
        pen=pen_from_prefix(root_prefix) if member else None,
        branch_arc=branch_arc,
        branch_name=branch_name,
        registration_authority=REGISTRATION_AUTHORITIES.get(str(arcs[0]), "Unknown"),
        urn=to_urn(identifier),
    )
