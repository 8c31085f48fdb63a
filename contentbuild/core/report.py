from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

from contentbuild.core.profiles import to_json_dict
from contentbuild.core.recovery import RecoveryRun


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def build_report_dict(tool_name: str, tool_version: str, run: RecoveryRun) -> Dict[str, Any]:
    return {
        "tool": tool_name,
        "version": tool_version,
        "timestamp_utc": _utc_now_iso(),
        "profile": to_json_dict(run.profile),
        "failures": [asdict(r) for r in run.records],
        "actions": [asdict(a) for a in run.actions],
        "quantize_worklist": list(run.worklist),
        "summary": asdict(run.summary) if run.summary else None,
        "quantize_summary": asdict(run.quantize_summary) if run.quantize_summary else None,
        "issues": [asdict(i) for i in run.issues],
    }


def write_report_json(report: Dict[str, Any], report_path: str) -> str:
    path = Path(report_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with path.open("w", encoding="utf-8") as f:
        json.dump(report, f, indent=2, ensure_ascii=False)

    return str(path)
