"""Session-owned registry state: current tree, selection, and search text."""

from __future__ import annotations

import logging
from typing import Optional

from oid_registry.store import KeyValueStore, load_registry_tree, save_registry_tree
from oid_tree.builder import NodeDraft, NodeValidationError, build_child_node, check_draft_text
from oid_tree.identifiers import DEFAULT_ROOT_PREFIX
from oid_tree.seed import build_seed_tree
from oid_tree.tree import OidNode, append_child, compute_path, find_by_id, search_nodes


LOGGER = logging.getLogger(__name__)


class RegistrySession:
    """Owns one registry tree value and replaces it wholesale on every mutation.

    ``version`` increases by one each time the tree reference changes, so callers holding an
    older tree or path can tell that it is a snapshot.
    """

    def __init__(self, store: KeyValueStore, root_prefix: str = DEFAULT_ROOT_PREFIX) -> None:
        self.store = store
        self.root_prefix = root_prefix
        self.tree: OidNode = build_seed_tree(root_prefix)
        self.version = 0
        self.selected_id: Optional[str] = None
        self.search_query = ""

    def load(self) -> OidNode:
        persisted = load_registry_tree(self.store)
        if persisted is None:
            LOGGER.info("No persisted registry found; using seed tree.")
            self._replace(build_seed_tree(self.root_prefix))
        else:
            LOGGER.info("Persisted registry loaded: root=%s", persisted.identifier)
            self._replace(persisted)
        return self.tree

    def _replace(self, tree: OidNode) -> None:
        self.tree = tree
        self.version += 1
        if self.selected_id is not None and find_by_id(tree, self.selected_id) is None:
            LOGGER.debug("Selected node '%s' no longer present; clearing selection.", self.selected_id)
            self.selected_id = None

    def _commit(self, tree: OidNode) -> None:
        save_registry_tree(self.store, tree)
        self._replace(tree)

    def replace_tree(self, tree: OidNode) -> None:
        """Adopt an externally updated tree without writing it back."""
        self._replace(tree)

    def reset(self) -> OidNode:
        self._commit(build_seed_tree(self.root_prefix))
        return self.tree

    def select(self, node_id: Optional[str]) -> Optional[OidNode]:
        node = find_by_id(self.tree, node_id) if node_id is not None else None
        self.selected_id = node.id if node is not None else None
        return node

    @property
    def selected_node(self) -> Optional[OidNode]:
        if self.selected_id is None:
            return None
        node = find_by_id(self.tree, self.selected_id)
        if node is None:
            self.selected_id = None
        return node

    @property
    def selected_path(self) -> list[OidNode]:
        if self.selected_id is None:
            return []
        return compute_path(self.tree, self.selected_id)

    def search(self, query: str) -> list[OidNode]:
        self.search_query = query
        return self.search_results

    @property
    def search_results(self) -> list[OidNode]:
        return search_nodes(self.tree, self.search_query)

    def add_child(self, draft: NodeDraft, parent_id: Optional[str] = None) -> OidNode:
        """Validate draft, append it under the parent, persist, and return the new node.

        The parent defaults to the current selection. Raises NodeValidationError and leaves the
        session untouched when a rule fails.
        """
        target_id = parent_id if parent_id is not None else self.selected_id
        parent = find_by_id(self.tree, target_id) if target_id is not None else None
        if target_id is not None and parent is None:
            raise NodeValidationError(check_draft_text(draft) or f"Parent node not found: {target_id}")

        node = build_child_node(draft, parent, existing_root=self.tree, root_prefix=self.root_prefix)
        self._commit(append_child(self.tree, parent.id, node))
        LOGGER.info("Node added: id=%s identifier=%s parent=%s", node.id, node.identifier, parent.id)
        return node
