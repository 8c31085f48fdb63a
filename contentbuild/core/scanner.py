from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

from contentbuild.models import ContentItem

# ext -> (importer, processor) defaults for new content items
IMPORTERS: Dict[str, Tuple[str, str]] = {
    "png": ("TextureImporter", "TextureProcessor"),
    "jpg": ("TextureImporter", "TextureProcessor"),
    "jpeg": ("TextureImporter", "TextureProcessor"),
    "bmp": ("TextureImporter", "TextureProcessor"),
    "tga": ("TextureImporter", "TextureProcessor"),
    "dds": ("TextureImporter", "TextureProcessor"),
    "fbx": ("FbxImporter", "ModelProcessor"),
    "x": ("XImporter", "ModelProcessor"),
    "fx": ("EffectImporter", "EffectProcessor"),
    "spritefont": ("FontDescriptionImporter", "FontDescriptionProcessor"),
    "wav": ("WavImporter", "SoundEffectProcessor"),
    "mp3": ("Mp3Importer", "SongProcessor"),
    "wma": ("WmaImporter", "SongProcessor"),
    "xml": ("XmlImporter", "PassThroughProcessor"),
}


def _normalize_ext(p: Path) -> str:
    return p.suffix.lower().lstrip(".")


def content_item_for(relpath: str) -> ContentItem:
    rel = relpath.replace("\\", "/")
    importer, processor = IMPORTERS.get(_normalize_ext(Path(rel)), (None, None))
    return ContentItem(location=rel, importer=importer, processor=processor)


def scan_content_folder(
    root: str,
    ignore_dirs: Optional[Set[str]] = None,
    ignore_hidden: bool = True,
    follow_symlinks: bool = False,
) -> List[ContentItem]:
    """
    Recursively collect content items under ``root``.

    Locations are relative to ``root`` with '/' separators, in walk order
    (folders and files sorted by name so the tree is stable between runs).
    """
    root_path = Path(root).resolve()
    if not root_path.is_dir():
        raise ValueError(f"Content root is not a directory: {root}")

    ignore_dirs = ignore_dirs or set()
    items: List[ContentItem] = []

    for dirpath, dirnames, filenames in os.walk(root_path, followlinks=follow_symlinks):
        # Filter in-place so os.walk doesn't descend
        dirnames[:] = sorted(
            d for d in dirnames
            if d not in ignore_dirs and not (ignore_hidden and d.startswith("."))
        )

        for fn in sorted(filenames):
            if ignore_hidden and fn.startswith("."):
                continue
            full = Path(dirpath) / fn
            items.append(content_item_for(str(full.relative_to(root_path))))

    return items
