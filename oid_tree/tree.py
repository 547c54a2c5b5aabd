"""Identifier tree data model and pure tree operations."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterator, Literal, Optional

from oid_tree.identifiers import (
    DEFAULT_ROOT_PREFIX,
    child_identifier,
    trailing_arc,
    validate_identifier,
)


NodeKind = Literal["root", "branch", "leaf"]
NodeStatus = Literal["active", "experimental", "deprecated"]

NODE_KINDS: tuple[str, ...] = ("root", "branch", "leaf")
NODE_STATUSES: tuple[str, ...] = ("active", "experimental", "deprecated")

__all__ = [
    "DEFAULT_ROOT_PREFIX",
    "NODE_KINDS",
    "NODE_STATUSES",
    "NodeKind",
    "NodeStatus",
    "OidNode",
    "TreeCounts",
    "append_child",
    "compute_path",
    "count_nodes",
    "find_by_id",
    "find_by_identifier",
    "iter_with_depth",
    "next_child_identifier",
    "postorder_nodes",
    "search_nodes",
    "traverse_all_nodes",
    "validate_identifier",
]


@dataclass(frozen=True)
class OidNode:
    id: str
    identifier: str
    name: str
    description: str
    kind: NodeKind
    status: NodeStatus
    use_cases: Optional[tuple[str, ...]] = None
    children: Optional[tuple["OidNode", ...]] = None
    examples: Optional[tuple[tuple[str, str], ...]] = None

    @property
    def is_leaf(self) -> bool:
        return not self.children

    @property
    def child_nodes(self) -> tuple["OidNode", ...]:
        return self.children or ()


@dataclass(frozen=True)
class TreeCounts:
    node_count: int
    branch_count: int
    leaf_count: int
    max_depth: int


def traverse_all_nodes(root: OidNode) -> list[OidNode]:
    """Return all nodes in pre-order, including root."""
    ordered: list[OidNode] = []
    stack = [root]
    while stack:
        node = stack.pop()
        ordered.append(node)
        stack.extend(reversed(node.child_nodes))
    return ordered


def iter_with_depth(root: OidNode) -> Iterator[tuple[OidNode, int]]:
    """Yield (node, depth) pairs in pre-order; the root has depth 0."""
    stack: list[tuple[OidNode, int]] = [(root, 0)]
    while stack:
        node, depth = stack.pop()
        yield node, depth
        stack.extend((child, depth + 1) for child in reversed(node.child_nodes))


def postorder_nodes(root: OidNode) -> list[OidNode]:
    """Return tree nodes in post-order, including root as the last element."""
    ordered: list[OidNode] = []

    def visit(node: OidNode) -> None:
        for child in node.child_nodes:
            visit(child)
        ordered.append(node)

    visit(root)
    return ordered


def count_nodes(root: OidNode) -> TreeCounts:
    node_count = 0
    leaf_count = 0
    max_depth = 0
    for node, depth in iter_with_depth(root):
        node_count += 1
        if node.is_leaf:
            leaf_count += 1
        max_depth = max(max_depth, depth)
    return TreeCounts(
        node_count=node_count,
        branch_count=node_count - leaf_count,
        leaf_count=leaf_count,
        max_depth=max_depth,
    )


def find_by_id(root: OidNode, node_id: str) -> Optional[OidNode]:
    """Return the first node in pre-order whose id equals node_id."""
    for node in traverse_all_nodes(root):
        if node.id == node_id:
            return node
    return None


def find_by_identifier(root: OidNode, identifier: str) -> Optional[OidNode]:
    for node in traverse_all_nodes(root):
        if node.identifier == identifier:
            return node
    return None


def next_child_identifier(parent: OidNode) -> str:
    """Compute the identifier the next appended child of parent receives."""
    if not parent.children:
        return child_identifier(parent.identifier, 1)
    last_child = parent.children[-1]
    return child_identifier(parent.identifier, trailing_arc(last_child.identifier) + 1)


def _matches(node: OidNode, query: str, lowered_query: str) -> bool:
    return (
        lowered_query in node.name.lower()
        or lowered_query in node.description.lower()
        or lowered_query in node.id.lower()
        or query in node.identifier
    )


def search_nodes(root: OidNode, query: str) -> list[OidNode]:
    """Collect every node matching query, in pre-order.

    Name, description and id match case-insensitively; the identifier matches as a plain
    substring. An empty query matches every node.
    """
    lowered_query = query.lower()
    return [node for node in traverse_all_nodes(root) if _matches(node, query, lowered_query)]


def compute_path(root: OidNode, target_id: str) -> list[OidNode]:
    """Return nodes from root to the target inclusive, or [] when it is absent."""
    path: list[OidNode] = []

    def descend(node: OidNode) -> bool:
        path.append(node)
        if node.id == target_id:
            return True
        for child in node.child_nodes:
            if descend(child):
                return True
        path.pop()
        return False

    descend(root)
    return path


def _locate(node: OidNode, target_id: str) -> Optional[list[int]]:
    if node.id == target_id:
        return []
    for index, child in enumerate(node.child_nodes):
        child_route = _locate(child, target_id)
        if child_route is not None:
            return [index, *child_route]
    return None


def _rebuild_with_child(node: OidNode, route: list[int], new_node: OidNode) -> OidNode:
    if not route:
        return replace(node, children=node.child_nodes + (new_node,))
    index = route[0]
    children = list(node.child_nodes)
    children[index] = _rebuild_with_child(children[index], route[1:], new_node)
    return replace(node, children=tuple(children))


def append_child(root: OidNode, parent_id: str, new_node: OidNode) -> OidNode:
    """Return a new tree with new_node appended under the first node matching parent_id.

    Only the nodes on the root-to-parent path are rebuilt; every other subtree is shared with
    the input tree. When no node matches, root is returned unchanged.
    """
    route = _locate(root, parent_id)
    if route is None:
        return root
    return _rebuild_with_child(root, route, new_node)
