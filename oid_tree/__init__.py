"""OID tree package."""

from oid_tree.builder import NodeDraft, NodeValidationError, build_child_node, slugify_name, validate_draft
from oid_tree.identifiers import (
    DEFAULT_ROOT_PREFIX,
    IdentifierInfo,
    describe_identifier,
    parent_identifier,
    parse_arcs,
    to_fhir_system,
    to_urn,
    validate_identifier,
)
from oid_tree.seed import build_seed_tree
from oid_tree.tree import (
    OidNode,
    TreeCounts,
    append_child,
    compute_path,
    count_nodes,
    find_by_id,
    find_by_identifier,
    next_child_identifier,
    postorder_nodes,
    search_nodes,
    traverse_all_nodes,
)
from oid_tree.visualizer import (
    export_tree_json,
    format_path,
    load_tree_json,
    node_from_dict,
    node_to_dict,
    print_oid_tree,
)

__all__ = [
    "DEFAULT_ROOT_PREFIX",
    "IdentifierInfo",
    "NodeDraft",
    "NodeValidationError",
    "OidNode",
    "TreeCounts",
    "append_child",
    "build_child_node",
    "build_seed_tree",
    "compute_path",
    "count_nodes",
    "describe_identifier",
    "export_tree_json",
    "find_by_id",
    "find_by_identifier",
    "format_path",
    "load_tree_json",
    "next_child_identifier",
    "node_from_dict",
    "node_to_dict",
    "parent_identifier",
    "parse_arcs",
    "postorder_nodes",
    "print_oid_tree",
    "search_nodes",
    "slugify_name",
    "to_fhir_system",
    "to_urn",
    "traverse_all_nodes",
    "validate_draft",
    "validate_identifier",
]
