from __future__ import annotations

from typing import Any, Protocol

from contentbuild.models import ContentItem

ACTION_INCLUDE = "Add"
ACTION_EXCLUDE = "Remove"

PROPERTY_REFERENCES = "References"


class UnknownActionError(ValueError):
    pass


class ItemController(Protocol):
    def include(self, location: str) -> Any: ...

    def exclude(self, item: ContentItem) -> Any: ...


class PropertyController(Protocol):
    def on_item_modified(self, item: ContentItem) -> None: ...

    def on_project_modified(self) -> None: ...

    def on_references_modified(self) -> None: ...


def context_action_for(tag: Any) -> str:
    """Content items can be removed; anything else (folder, project) accepts new items."""
    return ACTION_EXCLUDE if isinstance(tag, ContentItem) else ACTION_INCLUDE


def dispatch_context_action(action: str, tag: Any, controller: ItemController) -> Any:
    if action == ACTION_INCLUDE:
        return controller.include(tag.location)
    if action == ACTION_EXCLUDE:
        return controller.exclude(tag)
    raise UnknownActionError(f"Unhandled menu item text={action}")


def dispatch_property_change(label: str, selected: Any, controller: PropertyController) -> None:
    if label == PROPERTY_REFERENCES:
        controller.on_references_modified()
    elif isinstance(selected, ContentItem):
        controller.on_item_modified(selected)
    else:
        controller.on_project_modified()
