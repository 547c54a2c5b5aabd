"""Tree rendering and serialization utilities."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional, Sequence

from oid_tree.identifiers import trailing_arc
from oid_tree.tree import NODE_KINDS, NODE_STATUSES, OidNode, count_nodes


STATUS_MARKS = {
    "active": "+",
    "experimental": "~",
    "deprecated": "x",
}


def node_to_dict(node: OidNode) -> dict[str, Any]:
    """Serialize a node and its subtree into the persisted JSON shape."""
    data: dict[str, Any] = {
        "id": node.id,
        "oid": node.identifier,
        "name": node.name,
        "description": node.description,
        "type": node.kind,
        "status": node.status,
    }
    if node.use_cases is not None:
        data["useCases"] = list(node.use_cases)
    if node.children is not None:
        data["children"] = [node_to_dict(child) for child in node.children]
    if node.examples:
        data["examples"] = dict(node.examples)
    return data


def _require_str(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise ValueError(f"Node field '{key}' must be a string, got {type(value).__name__}.")
    return value


def node_from_dict(data: Any) -> OidNode:
    """Build a node tree from its JSON shape; raises ValueError on malformed input."""
    if not isinstance(data, dict):
        raise ValueError("Node payload must be a JSON object.")

    kind = _require_str(data, "type")
    if kind not in NODE_KINDS:
        raise ValueError(f"Unknown node type: {kind!r}")
    status = _require_str(data, "status")
    if status not in NODE_STATUSES:
        raise ValueError(f"Unknown node status: {status!r}")

    raw_use_cases = data.get("useCases")
    use_cases: Optional[tuple[str, ...]] = None
    if raw_use_cases is not None:
        if not isinstance(raw_use_cases, list):
            raise ValueError("Node field 'useCases' must be a list.")
        use_cases = tuple(str(item) for item in raw_use_cases)

    raw_children = data.get("children")
    children: Optional[tuple[OidNode, ...]] = None
    if raw_children is not None:
        if not isinstance(raw_children, list):
            raise ValueError("Node field 'children' must be a list.")
        children = tuple(node_from_dict(child) for child in raw_children)

    raw_examples = data.get("examples")
    examples = None
    if isinstance(raw_examples, dict) and raw_examples:
        examples = tuple((str(key), str(value)) for key, value in raw_examples.items())

    return OidNode(
        id=_require_str(data, "id"),
        identifier=_require_str(data, "oid"),
        name=_require_str(data, "name"),
        description=_require_str(data, "description"),
        kind=kind,
        status=status,
        use_cases=use_cases,
        children=children,
        examples=examples,
    )


def export_tree_json(root: OidNode, output_path: Path) -> None:
    """Export tree to JSON file."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(
        json.dumps(node_to_dict(root), ensure_ascii=False, indent=2),
        encoding="utf-8",
    )


def load_tree_json(input_path: Path) -> OidNode:
    try:
        payload = json.loads(input_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Tree file is not valid JSON: {input_path}") from exc
    return node_from_dict(payload)


def format_node_line(node: OidNode) -> str:
    mark = STATUS_MARKS.get(node.status, "?")
    return f"[{mark}] {node.identifier}  {node.name} ({node.id})"


def print_oid_tree(root: OidNode, max_depth: Optional[int] = None) -> None:
    """Print a readable ASCII tree with identifiers and status marks."""
    counts = count_nodes(root)
    print(f"OID Tree: {root.name} ({counts.node_count} nodes, {counts.leaf_count} leaves)")
    print("=" * 60)
    print(format_node_line(root))

    def print_node(node: OidNode, prefix: str, is_last: bool, depth: int) -> None:
        connector = "`-- " if is_last else "|-- "
        print(f"{prefix}{connector}{format_node_line(node)}")
        if max_depth is not None and depth >= max_depth:
            return
        child_prefix = prefix + ("    " if is_last else "|   ")
        for index, child in enumerate(node.child_nodes):
            print_node(child, child_prefix, index == len(node.child_nodes) - 1, depth + 1)

    if max_depth is not None and max_depth < 1:
        return
    for index, child in enumerate(root.child_nodes):
        print_node(child, "", index == len(root.child_nodes) - 1, 1)


def format_path(path: Sequence[OidNode]) -> str:
    """Render a root-to-node path as trailing arcs, e.g. ``61026 > 3 > 2 > 1``."""
    return " > ".join(str(trailing_arc(node.identifier)) for node in path)


def format_path_names(path: Sequence[OidNode]) -> str:
    return " / ".join(node.name for node in path)


def print_node_details(node: OidNode, path: Sequence[OidNode] = ()) -> None:
    print(f"{node.name} [{node.kind}, {node.status}]")
    print(f"  id:          {node.id}")
    print(f"  identifier:  {node.identifier}")
    if path:
        print(f"  path:        {format_path(path)}")
        print(f"  lineage:     {format_path_names(path)}")
    print(f"  description: {node.description}")
    if node.use_cases:
        print("  use cases:")
        for use_case in node.use_cases:
            print(f"    - {use_case}")
    if node.examples:
        print("  examples:")
        for key, value in node.examples:
            print(f"    {key}: {value}")
