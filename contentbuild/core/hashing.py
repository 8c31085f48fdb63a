from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Union

from contentbuild.config import HASH_ALGO_DEFAULT

_CHUNK = 1024 * 1024


def file_digest(path: Union[str, Path], algo: str = HASH_ALGO_DEFAULT) -> str:
    """Hex digest of a file, read in chunks so large textures stay cheap."""
    if algo not in hashlib.algorithms_guaranteed:
        raise ValueError(f"Unsupported hash algo: {algo}")

    h = hashlib.new(algo)
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(_CHUNK), b""):
            h.update(chunk)
    return h.hexdigest()


def same_content(a: Union[str, Path], b: Union[str, Path], algo: str = HASH_ALGO_DEFAULT) -> bool:
    if Path(a).stat().st_size != Path(b).stat().st_size:
        return False
    return file_digest(a, algo) == file_digest(b, algo)
