from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from contentbuild.core.profiles import RecoveryProfile
from contentbuild.models import RecoveryIssue

_LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuantizeSummary:
    total: int
    succeeded: int
    failed: int


def build_command(path: str, profile: RecoveryProfile) -> List[str]:
    return [profile.quantizer_executable, path, *profile.quantizer_args]


def _stderr_tail(raw, limit: int = 400) -> str:
    if not raw:
        return ""
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="ignore")
    return raw.strip()[-limit:]


def quantize_files(
    paths: Sequence[str],
    profile: RecoveryProfile,
    runner: Optional[Callable[..., subprocess.CompletedProcess]] = None,
    progress_cb: Optional[Callable[[int, int, str], None]] = None,
    is_cancelled: Optional[Callable[[], bool]] = None,
) -> Tuple[QuantizeSummary, List[RecoveryIssue]]:
    """
    Run the quantizer once per path, strictly one after another.

    Each call blocks until the tool exits (no timeout: a hung tool blocks the
    batch). Any launch or runtime failure, or a non-zero exit, is recorded as
    an ERROR issue and the next path is still attempted.
    """
    run = runner or subprocess.run
    issues: List[RecoveryIssue] = []

    total = len(paths)
    succeeded = 0
    failed = 0

    for idx, path in enumerate(paths, start=1):
        if is_cancelled and is_cancelled():
            issues.append(
                RecoveryIssue("WARNING", "QUANTIZE_CANCELLED", "Quantization cancelled by user.", path)
            )
            break

        if progress_cb:
            progress_cb(idx, total, path)

        cmd = build_command(path, profile)
        _LOG.info("Running %s on: %s", profile.quantizer_executable, path)

        try:
            completed = run(cmd, capture_output=True, check=False)
        except OSError as e:
            failed += 1
            _LOG.error("Could not launch %s: %s", profile.quantizer_executable, e)
            issues.append(
                RecoveryIssue(
                    "ERROR",
                    "QUANTIZE_LAUNCH_FAILED",
                    f"Could not start {profile.quantizer_executable} ({e})",
                    path,
                )
            )
            continue
        except Exception as e:
            failed += 1
            _LOG.error("Quantizer invocation failed for %s: %s", path, e)
            issues.append(
                RecoveryIssue("ERROR", "QUANTIZE_FAILED", f"Quantizer invocation failed ({e})", path)
            )
            continue

        if completed.returncode != 0:
            failed += 1
            detail = _stderr_tail(completed.stderr)
            msg = f"{profile.quantizer_executable} exited with code {completed.returncode}"
            if detail:
                msg += f": {detail}"
            _LOG.error("%s (%s)", msg, path)
            issues.append(RecoveryIssue("ERROR", "QUANTIZE_FAILED", msg, path))
            continue

        succeeded += 1

    summary = QuantizeSummary(total=total, succeeded=succeeded, failed=failed)
    return summary, issues

