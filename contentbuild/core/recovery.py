from __future__ import annotations

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence, Tuple, Union

from contentbuild.config import HASH_ALGO_DEFAULT
from contentbuild.core.hashing import same_content
from contentbuild.core.log_scanner import scan_log, split_log_lines
from contentbuild.core.profiles import RecoveryProfile
from contentbuild.core.quantizer import QuantizeSummary, quantize_files
from contentbuild.models import FailureRecord, RecoveryAction, RecoveryIssue

_LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecoverySummary:
    total: int
    repaired: int
    failed: int
    already_clean: int  # compiled artifact was not there to delete


def _has_ext(path: str, exts: Sequence[str]) -> bool:
    # case-sensitive: "a.PNG" is not a png here
    return any(path.endswith("." + ext) for ext in exts if ext)


def is_repairable(record: FailureRecord, profile: RecoveryProfile) -> bool:
    """Square-texture compression failure on one of the repairable raster formats."""
    if not profile.square_marker or profile.square_marker not in record.reason_text:
        return False
    return _has_ext(record.source_path.strip(), profile.repairable_extensions)


def derive_output_paths(source_path: str, profile: RecoveryProfile) -> Tuple[str, str]:
    """
    Map a source asset to (output_path, compiled_output_path).

    Every occurrence of the source segment is rewritten to the output segment;
    the compiled path swaps the extension for the compiled-artifact one.
    """
    output_path = source_path.replace(profile.source_segment, profile.output_segment)
    stem, _ = os.path.splitext(output_path)
    compiled = f"{stem}.{profile.compiled_extension}"
    return output_path, compiled


def plan_recovery(
    records: Iterable[FailureRecord],
    profile: RecoveryProfile,
) -> Tuple[List[RecoveryAction], List[RecoveryIssue]]:
    """
    Dry-run: turn failure records into repair actions.

    Records outside the repairable rule are dropped without an issue. A source
    reported several times yields one action.
    """
    issues: List[RecoveryIssue] = []
    actions: List[RecoveryAction] = []
    seen = set()

    for record in records:
        if not is_repairable(record, profile):
            _LOG.debug("Not repairable, skipped: %s | %s", record.source_path, record.reason_text)
            continue

        src = record.source_path.strip()
        if src in seen:
            continue
        seen.add(src)

        if not profile.source_segment or profile.source_segment not in src:
            # Without the rewrite the copy would land on the source itself
            issues.append(
                RecoveryIssue(
                    "WARNING",
                    "OUTPUT_REWRITE_MISSING",
                    f"Path does not contain '{profile.source_segment}'; cannot locate build output.",
                    src,
                )
            )
            continue

        output_path, compiled = derive_output_paths(src, profile)
        actions.append(
            RecoveryAction(
                original_path=src,
                output_path=output_path,
                compiled_output_path=compiled,
                requires_quantization=_has_ext(output_path, profile.quantize_extensions),
            )
        )

    return actions, issues


def execute_recovery(
    actions: Sequence[RecoveryAction],
    progress_cb: Optional[Callable[[int, int, RecoveryAction], None]] = None,
    is_cancelled: Optional[Callable[[], bool]] = None,
    verify_hash: bool = True,
    hash_algo: str = HASH_ALGO_DEFAULT,
) -> Tuple[RecoverySummary, List[RecoveryIssue], List[str]]:
    """
    Apply repair actions: delete the stale compiled artifact, then copy the
    original asset over the output path (overwrite).

    Returns:
      (summary, issues, quantize_worklist)

    A missing artifact counts as already clean. Any other failure is an ERROR
    issue for that action only; the remaining actions still run. Running the
    same actions twice leaves the same files on disk.
    """
    issues: List[RecoveryIssue] = []
    worklist: List[str] = []

    total = len(actions)
    repaired = 0
    failed = 0
    already_clean = 0

    for idx, action in enumerate(actions, start=1):
        if is_cancelled and is_cancelled():
            issues.append(
                RecoveryIssue(
                    level="WARNING",
                    code="RECOVERY_CANCELLED",
                    message="Recovery cancelled by user.",
                    path=action.original_path,
                )
            )
            break

        if progress_cb:
            progress_cb(idx, total, action)

        _LOG.info("Fixing: %s", action.original_path)

        src = Path(action.original_path)
        dst = Path(action.output_path)
        compiled = Path(action.compiled_output_path)

        try:
            compiled.unlink()
        except FileNotFoundError:
            already_clean += 1
            issues.append(
                RecoveryIssue(
                    "INFO",
                    "ARTIFACT_ALREADY_CLEAN",
                    f"No compiled artifact to delete: {compiled}",
                    action.original_path,
                )
            )
        except OSError as e:
            failed += 1
            issues.append(
                RecoveryIssue(
                    "ERROR",
                    "DELETE_FAILED",
                    f"Could not delete compiled artifact: {compiled} ({e})",
                    action.original_path,
                )
            )
            continue

        if not src.is_file():
            failed += 1
            issues.append(
                RecoveryIssue(
                    "ERROR",
                    "SRC_MISSING",
                    f"Source missing: {src}",
                    action.original_path,
                )
            )
            continue

        try:
            dst.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            failed += 1
            issues.append(
                RecoveryIssue(
                    "ERROR",
                    "DST_DIR_CREATE_FAILED",
                    f"Failed creating destination folder: {dst.parent} ({e})",
                    action.original_path,
                )
            )
            continue

        try:
            shutil.copy2(src, dst)
        except OSError as e:
            failed += 1
            issues.append(
                RecoveryIssue(
                    "ERROR",
                    "COPY_FAILED",
                    f"Copy failed: {src} -> {dst} ({e})",
                    action.original_path,
                )
            )
            continue

        if verify_hash:
            try:
                matches = same_content(src, dst, algo=hash_algo)
            except OSError as e:
                failed += 1
                issues.append(
                    RecoveryIssue(
                        "ERROR",
                        "HASH_DST_FAILED",
                        f"Failed hashing copied file: {dst} ({e})",
                        action.original_path,
                    )
                )
                continue

            if not matches:
                failed += 1
                issues.append(
                    RecoveryIssue(
                        "ERROR",
                        "HASH_MISMATCH",
                        f"Integrity check failed (src != dst) for: {dst.name}",
                        action.original_path,
                    )
                )
                continue

        repaired += 1
        if action.requires_quantization:
            worklist.append(action.output_path)

    summary = RecoverySummary(total=total, repaired=repaired, failed=failed, already_clean=already_clean)
    return summary, issues, worklist


@dataclass
class RecoveryRun:
    profile: RecoveryProfile
    records: List[FailureRecord] = field(default_factory=list)
    actions: List[RecoveryAction] = field(default_factory=list)
    summary: Optional[RecoverySummary] = None
    quantize_summary: Optional[QuantizeSummary] = None
    worklist: List[str] = field(default_factory=list)
    issues: List[RecoveryIssue] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return sum(1 for i in self.issues if i.level.upper() == "ERROR")


def run_recovery(
    log: Union[str, Iterable[str]],
    profile: RecoveryProfile,
    quantize: bool = True,
    verify_hash: bool = True,
    runner: Optional[Callable[..., subprocess.CompletedProcess]] = None,
    is_cancelled: Optional[Callable[[], bool]] = None,
) -> RecoveryRun:
    """Full pass: scan the log, repair what can be repaired, quantize the results."""
    lines = split_log_lines(log) if isinstance(log, str) else log

    run = RecoveryRun(profile=profile)
    run.records = list(scan_log(lines, profile))
    _LOG.info("Log scan found %d compression failure(s)", len(run.records))

    run.actions, plan_issues = plan_recovery(run.records, profile)
    run.issues.extend(plan_issues)

    run.summary, exec_issues, run.worklist = execute_recovery(
        run.actions,
        is_cancelled=is_cancelled,
        verify_hash=verify_hash,
    )
    run.issues.extend(exec_issues)
    for issue in exec_issues:
        if issue.level.upper() == "ERROR":
            _LOG.error("%s: %s", issue.code, issue.message)

    if quantize and run.worklist:
        run.quantize_summary, q_issues = quantize_files(
            run.worklist,
            profile,
            runner=runner,
            is_cancelled=is_cancelled,
        )
        run.issues.extend(q_issues)

    _LOG.info(
        "Recovery done: repaired=%d, failed=%d, quantized=%d",
        run.summary.repaired,
        run.summary.failed,
        run.quantize_summary.succeeded if run.quantize_summary else 0,
    )
    return run
