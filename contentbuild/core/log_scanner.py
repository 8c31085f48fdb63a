from __future__ import annotations

from typing import Iterable, Iterator, List

from contentbuild.core.profiles import RecoveryProfile
from contentbuild.models import FailureRecord


def split_log_lines(text: str) -> List[str]:
    # Any line terminator; no filtering of blank lines
    return (text or "").splitlines()


def is_path_marker(line: str, profile: RecoveryProfile) -> bool:
    return any(line.startswith(p) for p in profile.path_prefixes if p)


def scan_log(lines: Iterable[str], profile: RecoveryProfile) -> Iterator[FailureRecord]:
    """
    Yield a FailureRecord for every failure-marker line, paired with the most
    recent path-marker line before it.

    A path marker stays current until a later path marker replaces it. Failure
    lines seen before any path marker are skipped. All state lives in this
    generator, so every call starts a fresh scan.
    """
    current_path = ""
    for line in lines:
        if is_path_marker(line, profile):
            current_path = line
            continue

        if current_path and line.startswith(profile.failure_marker):
            yield FailureRecord(source_path=current_path, reason_text=line)
