from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Set

from contentbuild.core.paths import segment
from contentbuild.core.scanner import content_item_for, scan_content_folder
from contentbuild.core.tree import TreeIndex
from contentbuild.models import ContentItem, ProjectInfo

_LOG = logging.getLogger(__name__)


class ContentProject:
    """
    Owning controller for the content collection.

    Every change to the item list is mirrored onto the TreeIndex as
    set_root / insert / remove / select / refresh events.
    """

    def __init__(self, tree: Optional[TreeIndex] = None) -> None:
        self.tree = tree or TreeIndex()
        self.info: Optional[ProjectInfo] = None
        self.items: List[ContentItem] = []
        self.dirty = False

    @property
    def is_open(self) -> bool:
        return self.info is not None

    # -------------------------
    # Lifecycle
    # -------------------------
    def new_project(self, name: str, location: str = "") -> ProjectInfo:
        self.info = ProjectInfo(name=name, location=location)
        self.items = []
        self.dirty = False
        self.tree.set_root(self.info)
        _LOG.info("New project: %s", name)
        return self.info

    def open_folder(self, root: str, ignore_dirs: Optional[Set[str]] = None) -> ProjectInfo:
        items = scan_content_folder(root, ignore_dirs=ignore_dirs)
        root_path = Path(root).resolve()
        info = self.new_project(root_path.name or str(root_path), str(root_path))
        for item in items:
            self._add(item)
        _LOG.info("Opened %s (%d content item(s))", root_path, len(items))
        return info

    def close_project(self) -> None:
        self.info = None
        self.items = []
        self.dirty = False
        self.tree.set_root(None)

    # -------------------------
    # Items
    # -------------------------
    def _add(self, item: ContentItem) -> None:
        self.tree.insert(item)
        self.items.append(item)

    def find_item(self, location: str) -> Optional[ContentItem]:
        # same folders + leaf as the tree sees them
        key = segment(location)
        for item in self.items:
            if segment(item.location) == key:
                return item
        return None

    def include(self, location: str) -> ContentItem:
        if not self.is_open:
            raise RuntimeError("No project is open.")

        existing = self.find_item(location)
        if existing is not None:
            self.tree.select(existing)
            return existing

        item = content_item_for(location)
        self._add(item)
        self.dirty = True
        self.tree.select(item)
        _LOG.info("Included %s", item.location)
        return item

    def exclude(self, item: ContentItem) -> bool:
        if item not in self.items:
            return False
        self.items.remove(item)
        self.tree.remove(item)
        self.dirty = True
        _LOG.info("Excluded %s", item.location)
        return True

    def select(self, item) -> None:
        self.tree.select(item)

    # -------------------------
    # Property panel notifications
    # -------------------------
    def on_item_modified(self, item: ContentItem) -> None:
        self.dirty = True
        self.tree.refresh(item)

    def on_project_modified(self) -> None:
        self.dirty = True
        if self.info is not None:
            self.tree.refresh(self.info)

    def on_references_modified(self) -> None:
        self.dirty = True
