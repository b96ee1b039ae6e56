"""Variant planning, resizing and validation utilities."""

from __future__ import annotations

import asyncio
import logging
import shutil
from functools import partial
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from filetype import guess
from PIL import Image, ImageOps

from .config import PipelineConfig
from .errors import ResizeFailure
from .models import MasterImageRecord
from .utils import has_image_extension, variant_name

logger = logging.getLogger("respimg")

Resizer = Callable[[Path, int, Path], None]


def plan_variants(master_width: int, ladder: Iterable[int]) -> Tuple[int, ...]:
    """Return every ladder width strictly narrower than the master, in ladder order."""
    return tuple(width for width in ladder if width < master_width)


def discover_masters(images_dir: Path, extensions: Sequence[str]) -> List[Path]:
    """List master images in ``images_dir`` with a recognized extension."""
    if not images_dir.is_dir():
        raise FileNotFoundError(f"Images folder does not exist: {images_dir}")
    return [
        path
        for path in sorted(images_dir.iterdir())
        if path.is_file() and has_image_extension(path.name, extensions)
    ]


def resize_image(source: Path, target_width: int, destination: Path, quality: int = 85) -> None:
    """Write ``source`` scaled to ``target_width`` (aspect ratio preserved)."""
    with Image.open(source) as raw_image:
        image_format = raw_image.format
        image = ImageOps.exif_transpose(raw_image)
        width, height = image.size
        target_height = max(1, round(height * target_width / float(width)))
        resized = image.resize((target_width, target_height), Image.Resampling.LANCZOS)
        save_kwargs = {}
        if image_format == "JPEG":
            if resized.mode not in ("RGB", "L"):
                resized = resized.convert("RGB")
            save_kwargs.update({"quality": quality, "optimize": True})
        resized.save(destination, format=image_format, **save_kwargs)


def verify_variant(path: Path, target_width: int) -> None:
    """Raise ``ResizeFailure`` unless ``path`` is an image exactly ``target_width`` wide."""
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise ResizeFailure(f"Variant {path} was not written: {exc}") from exc
    kind = guess(data)
    if not kind or not kind.mime.startswith("image/"):
        raise ResizeFailure(f"Variant {path} is not a recognizable image")
    with Image.open(path) as image:
        width = image.width
    if width != target_width:
        raise ResizeFailure(
            f"Variant {path} is {width}px wide, expected {target_width}px"
        )


def _resize_and_verify(
    resizer: Resizer,
    source: Path,
    target_width: int,
    destination: Path,
) -> None:
    try:
        resizer(source, target_width, destination)
    except ResizeFailure:
        raise
    except Exception as exc:  # pylint: disable=broad-except
        raise ResizeFailure(
            f"Failed to resize {source.name} to {target_width}px: {exc}"
        ) from exc
    verify_variant(destination, target_width)
    logger.debug("Wrote %s", destination)


def read_master(source: Path, ladder: Sequence[int]) -> MasterImageRecord:
    """Collect metadata for a master image and plan its variants."""
    try:
        with Image.open(source) as image:
            width, height = ImageOps.exif_transpose(image).size
    except OSError as exc:
        raise ResizeFailure(f"Cannot read master image {source}: {exc}") from exc
    return MasterImageRecord(
        filename=source.name,
        source_path=source,
        byte_size=source.stat().st_size,
        width=width,
        height=height,
        variant_widths=plan_variants(width, ladder),
    )


async def _join(*aws: Awaitable[Any]) -> None:
    """Wait for every awaitable to finish, then raise the first failure."""
    results = await asyncio.gather(*aws, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result


async def generate_variants(
    record: MasterImageRecord,
    images_dir: Path,
    variants_dir: Path,
    resizer: Resizer,
) -> MasterImageRecord:
    """Copy the master verbatim and write one resized file per planned width."""
    shutil.copyfile(record.source_path, images_dir / record.filename)
    await _join(
        *(
            asyncio.to_thread(
                _resize_and_verify,
                resizer,
                record.source_path,
                width,
                variants_dir / variant_name(record.filename, width),
            )
            for width in record.variant_widths
        )
    )
    return record


async def generate_all_variants(
    config: PipelineConfig,
    resizer: Optional[Resizer] = None,
) -> Dict[str, MasterImageRecord]:
    """Plan and generate variants for every master image, joining on completion."""
    if resizer is None:
        resizer = partial(resize_image, quality=config.jpeg_quality)

    masters = discover_masters(config.source_images_dir, config.image_extensions)
    records = [read_master(path, config.variant_widths) for path in masters]
    for record in records:
        logger.debug(
            "%s: %dx%d, %d bytes -> variants %s",
            record.filename,
            record.width,
            record.height,
            record.byte_size,
            list(record.variant_widths) or "none",
        )

    await _join(
        *(
            generate_variants(
                record,
                config.output_images_dir,
                config.output_variants_dir,
                resizer,
            )
            for record in records
        )
    )
    logger.info(
        "Generated %d variant(s) for %d master image(s)",
        sum(len(record.variant_widths) for record in records),
        len(records),
    )
    return {record.filename: record for record in records}
