from __future__ import annotations

import json
import os
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from contentbuild.config import ENV_PROFILES_DIR


@dataclass(frozen=True)
class RecoveryProfile:
    """
    Recognition literals and layout rules for one build target.

    Extensions are stored lower-case without the dot.
    """
    name: str
    path_prefixes: Tuple[str, ...] = ("D:/",)
    failure_marker: str = "Could not compress texture"
    square_marker: str = "PVRTC Compressed textures must be square"
    repairable_extensions: Tuple[str, ...] = ("png", "jpg")
    source_segment: str = "/IOS/"
    output_segment: str = "/IOS/bin/IOS/"
    compiled_extension: str = "xnb"
    quantize_extensions: Tuple[str, ...] = ("png",)
    quantizer_executable: str = "pngquant"
    quantizer_args: Tuple[str, ...] = ("--ext", ".png", "--force")


def default_profiles() -> Dict[str, RecoveryProfile]:
    return {
        "iOS": RecoveryProfile(name="iOS"),
    }


def profiles_dir(repo_root: str) -> Path:
    override = os.environ.get(ENV_PROFILES_DIR, "").strip()
    if override:
        return Path(override).resolve()
    return Path(repo_root).resolve() / "contentbuild" / "profiles"


def profile_path(repo_root: str, profile_name: str) -> Path:
    safe = "".join(c for c in profile_name if c.isalnum() or c in ("_", "-", " "))
    return profiles_dir(repo_root) / f"{safe}.json"


def _norm_exts(values: Any) -> Tuple[str, ...]:
    out = []
    for x in values or []:
        s = str(x).strip().lower().lstrip(".")
        if s and s not in out:
            out.append(s)
    return tuple(out)


def _str_tuple(values: Any) -> Tuple[str, ...]:
    return tuple(str(x) for x in (values or []) if str(x))


def to_json_dict(profile: RecoveryProfile) -> Dict[str, Any]:
    d = asdict(profile)
    for key in ("path_prefixes", "repairable_extensions", "quantize_extensions", "quantizer_args"):
        d[key] = list(d[key])
    return d


def from_json_dict(d: Dict[str, Any]) -> RecoveryProfile:
    base = RecoveryProfile(name=str(d.get("name") or "Custom"))

    def _get(key: str, default: Any) -> Any:
        v = d.get(key)
        return default if v is None else v

    return RecoveryProfile(
        name=base.name,
        path_prefixes=_str_tuple(_get("path_prefixes", base.path_prefixes)),
        failure_marker=str(_get("failure_marker", base.failure_marker)),
        square_marker=str(_get("square_marker", base.square_marker)),
        repairable_extensions=_norm_exts(_get("repairable_extensions", base.repairable_extensions)),
        source_segment=str(_get("source_segment", base.source_segment)),
        output_segment=str(_get("output_segment", base.output_segment)),
        compiled_extension=str(_get("compiled_extension", base.compiled_extension)).lower().lstrip("."),
        quantize_extensions=_norm_exts(_get("quantize_extensions", base.quantize_extensions)),
        quantizer_executable=str(_get("quantizer_executable", base.quantizer_executable)),
        quantizer_args=_str_tuple(_get("quantizer_args", base.quantizer_args)),
    )


def ensure_default_profiles_on_disk(repo_root: str) -> None:
    pdir = profiles_dir(repo_root)
    pdir.mkdir(parents=True, exist_ok=True)

    for name, prof in default_profiles().items():
        path = profile_path(repo_root, name)
        if not path.exists():
            path.write_text(json.dumps(to_json_dict(prof), indent=2), encoding="utf-8")


def load_profile_file(path: str) -> RecoveryProfile:
    d = json.loads(Path(path).read_text(encoding="utf-8"))
    return from_json_dict(d)


def load_profile(repo_root: str, name: str) -> RecoveryProfile:
    return load_profile_file(str(profile_path(repo_root, name)))


def resolve_profile(repo_root: str, name: str) -> RecoveryProfile:
    """Profile from disk when present, otherwise the built-in default of that name."""
    path = profile_path(repo_root, name)
    if path.exists():
        return load_profile_file(str(path))
    prof: Optional[RecoveryProfile] = default_profiles().get(name)
    if prof is None:
        raise KeyError(f"Unknown recovery profile: {name}")
    return prof


def save_profile(repo_root: str, profile: RecoveryProfile) -> Path:
    pdir = profiles_dir(repo_root)
    pdir.mkdir(parents=True, exist_ok=True)
    path = profile_path(repo_root, profile.name)
    path.write_text(json.dumps(to_json_dict(profile), indent=2), encoding="utf-8")
    return path
