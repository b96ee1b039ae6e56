"""Utility helpers for variant naming and path handling."""

from __future__ import annotations

import re
from pathlib import PurePosixPath

PATH_PREFIX_PATTERN = re.compile(r"^.*/")


def variant_name(filename: str, width: int) -> str:
    """Insert ``-{width}`` before the extension, e.g. ``beach.jpg`` -> ``beach-500.jpg``."""
    path = PurePosixPath(filename)
    if not path.suffix:
        raise ValueError(f"Cannot derive a variant name without an extension: {filename}")
    return f"{path.stem}-{int(width)}{path.suffix}"


def filename_from_src(src: str) -> str:
    """Strip any path prefix so ``images/beach.jpg`` becomes ``beach.jpg``."""
    return PATH_PREFIX_PATTERN.sub("", src.strip())


def has_image_extension(filename: str, extensions) -> bool:
    return PurePosixPath(filename).suffix.lower() in extensions
