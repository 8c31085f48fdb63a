from __future__ import annotations

import re
from typing import Iterable, List, Tuple

_SEP_RE = re.compile(r"[\\/]")


def segment(location: str) -> Tuple[List[str], str]:
    """
    Split a slash-delimited location into (folders, leaf).

    Both "/" and "\\" separate; empty components are dropped, so doubled,
    leading or trailing separators never yield empty names. A trailing
    separator is treated like any other empty component: "a/b/" -> (["a"], "b").
    """
    parts = [p for p in _SEP_RE.split(location or "") if p]
    if not parts:
        return [], ""
    return parts[:-1], parts[-1]


def join_segments(parts: Iterable[str]) -> str:
    return "/".join(parts)
