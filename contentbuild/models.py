from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from contentbuild.core.paths import segment


def _new_uid() -> str:
    return uuid.uuid4().hex


# Project items compare by identity (eq=False): two items with the same
# location are still two different tree entries.
@dataclass(eq=False)
class ProjectInfo:
    name: str
    location: str = ""
    uid: str = field(default_factory=_new_uid)


@dataclass(eq=False)
class FolderItem:
    location: str  # path prefix this folder groups
    uid: str = field(default_factory=_new_uid)

    @property
    def name(self) -> str:
        _, leaf = segment(self.location)
        return leaf


@dataclass(eq=False)
class ContentItem:
    location: str  # project-relative path, e.g. "game/tiles/snow.png"
    name: str = ""
    importer: Optional[str] = None
    processor: Optional[str] = None
    parameters: Dict[str, Any] = field(default_factory=dict)
    uid: str = field(default_factory=_new_uid)

    def __post_init__(self) -> None:
        if not self.name:
            _, self.name = segment(self.location)


@dataclass(frozen=True)
class FailureRecord:
    source_path: str  # last path-marker line seen before the failure
    reason_text: str  # the failing line itself


@dataclass(frozen=True)
class RecoveryAction:
    original_path: str
    output_path: str           # rewritten path, original extension kept
    compiled_output_path: str  # stale artifact to delete
    requires_quantization: bool


@dataclass(frozen=True)
class RecoveryIssue:
    level: str  # INFO | WARNING | ERROR
    code: str   # stable short identifier (e.g. COPY_FAILED)
    message: str
    path: Optional[str] = None
