from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from contentbuild.app_logging import init_app_logging
from contentbuild.config import APP_NAME, APP_VERSION, DEFAULT_PROFILE, IGNORE_DIRS
from contentbuild.core.profiles import load_profile_file, resolve_profile

REPO_ROOT = str(Path(__file__).resolve().parents[1])


def _load_profile(args: argparse.Namespace):
    if args.profile_file:
        prof = load_profile_file(args.profile_file)
    else:
        prof = resolve_profile(REPO_ROOT, args.profile)
    if args.quantizer:
        prof = replace(prof, quantizer_executable=args.quantizer)
    if args.path_prefix:
        prof = replace(prof, path_prefixes=tuple(args.path_prefix))
    return prof


def _cmd_recover(args: argparse.Namespace) -> int:
    from contentbuild.core.recovery import run_recovery
    from contentbuild.core.report import build_report_dict, write_report_json

    try:
        profile = _load_profile(args)
    except (OSError, ValueError, KeyError) as e:
        print(f"[recover] Could not load profile: {e}", file=sys.stderr)
        return 2

    log_path = Path(args.log)
    try:
        text = log_path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        print(f"[recover] Could not read build log {log_path}: {e}", file=sys.stderr)
        return 2

    print("---- RECOVERY START ----")
    run = run_recovery(
        text,
        profile,
        quantize=not args.no_quantize,
        verify_hash=not args.no_verify,
    )

    for issue in run.issues:
        if issue.level.upper() == "INFO" and not args.verbose:
            continue
        suffix = f" ({issue.path})" if issue.path else ""
        print(f"[{issue.level}] {issue.code}: {issue.message}{suffix}")

    s = run.summary
    print(f"Failures found: {len(run.records)}, repairable: {len(run.actions)}")
    print(f"Repaired: {s.repaired}, failed: {s.failed}, already clean: {s.already_clean}")
    if run.quantize_summary:
        q = run.quantize_summary
        print(f"Quantized: {q.succeeded}/{q.total}, failed: {q.failed}")

    if args.report:
        written = write_report_json(build_report_dict(APP_NAME, APP_VERSION, run), args.report)
        print(f"Report written: {written}")

    print("---- RECOVERY DONE ----")
    return 1 if run.error_count else 0


def _cmd_tree(args: argparse.Namespace) -> int:
    from contentbuild.core.project import ContentProject
    from contentbuild.core.tree import KIND_CONTENT

    project = ContentProject()
    try:
        project.open_folder(args.path, ignore_dirs=IGNORE_DIRS)
    except ValueError as e:
        print(f"[tree] {e}", file=sys.stderr)
        return 2

    for node in project.tree.walk():
        depth = len(project.tree.path_of(node).split("/")) if node is not project.tree.root else 0
        marker = "/" if node.kind != KIND_CONTENT else ""
        print(f"{'  ' * depth}{node.label}{marker}")
    return 0


def _cmd_gui(_args: argparse.Namespace) -> int:
    from contentbuild.app import main as gui_main
    return gui_main([])


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="contentbuild", description=f"{APP_NAME} (v{APP_VERSION})")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_rec = sub.add_parser("recover", help="Fix failed square-texture compressions listed in a build log.")
    p_rec.add_argument("log", help="Build log text file.")
    p_rec.add_argument("--profile", default=DEFAULT_PROFILE, help=f"Recovery profile name (default: {DEFAULT_PROFILE}).")
    p_rec.add_argument("--profile-file", default="", help="Load the recovery profile from this JSON file instead.")
    p_rec.add_argument("--path-prefix", action="append", default=[], help="Path-marker prefix (repeatable; overrides profile).")
    p_rec.add_argument("--quantizer", default="", help="Quantizer executable (overrides profile).")
    p_rec.add_argument("--no-quantize", action="store_true", help="Repair files but do not run the quantizer.")
    p_rec.add_argument("--no-verify", action="store_true", help="Skip hash verification of copied files.")
    p_rec.add_argument("--report", default="", help="Write a JSON report to this path.")
    p_rec.add_argument("-v", "--verbose", action="store_true", help="Also print INFO issues.")
    p_rec.set_defaults(func=_cmd_recover)

    p_tree = sub.add_parser("tree", help="Print the content tree of a folder.")
    p_tree.add_argument("path", help="Content folder.")
    p_tree.set_defaults(func=_cmd_tree)

    p_gui = sub.add_parser("gui", help="Launch the editor window (PySide6).")
    p_gui.set_defaults(func=_cmd_gui)

    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.cmd != "gui":
        init_app_logging(component=args.cmd)
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
