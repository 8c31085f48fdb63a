from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

from contentbuild.core.paths import join_segments, segment
from contentbuild.models import FolderItem

_LOG = logging.getLogger(__name__)

KIND_PROJECT = "project"
KIND_FOLDER = "folder"
KIND_CONTENT = "content"


class TreeError(RuntimeError):
    pass


class DuplicateNodeError(TreeError):
    """Two children of one parent would share a label."""


@dataclass(eq=False)
class TreeNode:
    label: str
    kind: str  # project | folder | content
    item: Any = None
    parent: Optional["TreeNode"] = field(default=None, repr=False)
    children: List["TreeNode"] = field(default_factory=list, repr=False)
    expanded: bool = False

    @property
    def uid(self) -> Optional[str]:
        return getattr(self.item, "uid", None)

    def child(self, label: str) -> Optional["TreeNode"]:
        # exact, case-sensitive; first match wins
        for c in self.children:
            if c.label == label:
                return c
        return None

    def iter_subtree(self) -> Iterator["TreeNode"]:
        yield self
        for c in self.children:
            yield from c.iter_subtree()


class TreeIndex:
    """
    Hierarchical index of project items.

    Nodes are keyed by the item's ``uid`` (never by label), so the same item
    can be found, selected, refreshed or removed no matter where it sits.
    Listeners are plain objects with any of these optional methods:
    ``on_reset(root)``, ``on_node_added(node)``, ``on_node_removed(node)``,
    ``on_selected(node)``, ``on_refreshed(node)``.

    Not synchronized: call from the owning thread only.
    """

    def __init__(self) -> None:
        self.root: Optional[TreeNode] = None
        self.selected: Optional[TreeNode] = None
        self._by_uid: Dict[str, TreeNode] = {}
        self._listeners: List[Any] = []

    # -------------------------
    # Listeners
    # -------------------------
    def add_listener(self, listener: Any) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Any) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, event: str, *args: Any) -> None:
        for listener in list(self._listeners):
            cb = getattr(listener, event, None)
            if cb is not None:
                cb(*args)

    # -------------------------
    # Mutations
    # -------------------------
    def set_root(self, item: Any) -> Optional[TreeNode]:
        self._by_uid.clear()
        self.selected = None
        self.root = None

        if item is not None:
            self.root = TreeNode(label=item.name, kind=KIND_PROJECT, item=item)
            self._by_uid[item.uid] = self.root

        self._notify("on_reset", self.root)
        return self.root

    def insert(self, item: Any) -> TreeNode:
        if self.root is None:
            raise TreeError("No project root; call set_root() first.")

        existing = self.find(item)
        if existing is not None:
            return existing

        folders, _ = segment(item.location)

        # Conflicts can only be hit on nodes that already exist, so a raise
        # below never leaves half-created folders behind.
        parent = self.root
        walked: List[str] = []
        for folder in folders:
            walked.append(folder)
            node = parent.child(folder)
            if node is None:
                folder_item = FolderItem(location=join_segments(walked))
                node = self._attach(parent, TreeNode(label=folder, kind=KIND_FOLDER, item=folder_item))
            elif node.kind != KIND_FOLDER:
                raise DuplicateNodeError(
                    f"'{join_segments(walked)}' is a content item, not a folder (inserting {item.location})"
                )
            parent = node

        if parent.child(item.name) is not None:
            raise DuplicateNodeError(f"Label '{item.name}' already exists under '{self.path_of(parent) or parent.label}'")

        leaf = self._attach(parent, TreeNode(label=item.name, kind=KIND_CONTENT, item=item))
        self.root.expanded = True
        return leaf

    def _attach(self, parent: TreeNode, node: TreeNode) -> TreeNode:
        node.parent = parent
        parent.children.append(node)
        self._by_uid[node.uid] = node
        self._notify("on_node_added", node)
        return node

    def remove(self, item: Any) -> Optional[TreeNode]:
        node = self.find(item)
        if node is None:
            return None

        if node is self.root:
            self.set_root(None)
            return node

        node.parent.children.remove(node)
        for n in node.iter_subtree():
            self._by_uid.pop(n.uid, None)
            if n is self.selected:
                self.selected = None

        _LOG.debug("Removed '%s' and its subtree from the tree", node.label)
        self._notify("on_node_removed", node)
        node.parent = None
        return node

    # -------------------------
    # Lookups
    # -------------------------
    def find(self, item: Any) -> Optional[TreeNode]:
        if item is None:
            return None
        return self._by_uid.get(getattr(item, "uid", None))

    def get(self, uid: Optional[str]) -> Optional[TreeNode]:
        return self._by_uid.get(uid) if uid else None

    def select(self, item: Any) -> Optional[TreeNode]:
        node = self.find(item)
        if node is not None:
            self.selected = node
            self._notify("on_selected", node)
        return node

    def refresh(self, item: Any) -> Optional[TreeNode]:
        node = self.find(item)
        if node is not None:
            self._notify("on_refreshed", node)
        return node

    def walk(self) -> Iterator[TreeNode]:
        if self.root is not None:
            yield from self.root.iter_subtree()

    def path_of(self, node: TreeNode) -> str:
        """Labels from below the root down to ``node``, joined with '/'."""
        labels: List[str] = []
        cur: Optional[TreeNode] = node
        while cur is not None and cur is not self.root:
            labels.append(cur.label)
            cur = cur.parent
        return join_segments(reversed(labels))

    def __len__(self) -> int:
        return len(self._by_uid)

    def __contains__(self, item: Any) -> bool:
        return self.find(item) is not None
