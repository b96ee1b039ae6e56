"""Configuration objects and constants for the responsive image pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence, Tuple

from .errors import PlanningError

VARIANT_WIDTHS: Tuple[int, ...] = (500, 800, 1080, 1400, 1800, 2400, 3200)
MEDIA_QUERIES: Tuple[int, ...] = (480, 768, 992, 1200)
MAX_VIEWABLE_QUERY = 10_000
DEFAULT_IMAGE_EXTENSIONS: Tuple[str, ...] = (".jpg", ".jpeg", ".png", ".webp")


def _validate_ascending(name: str, values: Sequence[int]) -> Tuple[int, ...]:
    widths = tuple(int(value) for value in values)
    if any(width <= 0 for width in widths):
        raise PlanningError(f"{name} must contain positive widths only: {widths}")
    if any(later <= earlier for earlier, later in zip(widths, widths[1:])):
        raise PlanningError(f"{name} must be strictly ascending: {widths}")
    return widths


@dataclass
class PipelineConfig:
    """Top-level settings that control variant generation and measurement."""

    source_root: Path = Path("src")
    output_root: Path = Path("gen")
    document_name: str = "index.html"
    images_dirname: str = "images"
    variants_dirname: str = "variants"
    variant_widths: Sequence[int] = VARIANT_WIDTHS
    media_queries: Sequence[int] = MEDIA_QUERIES
    max_viewable_query: int = MAX_VIEWABLE_QUERY
    probe_height: int = 800
    settle_delay: float = 0.1
    script_timeout: float = 60.0
    collapse_sizes: bool = False
    image_extensions: Sequence[str] = field(default=DEFAULT_IMAGE_EXTENSIONS)
    jpeg_quality: int = 85
    headless: bool = True

    def __post_init__(self) -> None:
        self.source_root = Path(self.source_root)
        self.output_root = Path(self.output_root)
        self.variant_widths = _validate_ascending("variant_widths", self.variant_widths)
        self.media_queries = _validate_ascending("media_queries", self.media_queries)
        if self.media_queries and self.max_viewable_query <= self.media_queries[-1]:
            raise PlanningError(
                "max_viewable_query must exceed every media query "
                f"({self.max_viewable_query} <= {self.media_queries[-1]})"
            )
        self.image_extensions = tuple(ext.lower() for ext in self.image_extensions)

    @property
    def breakpoints(self) -> Tuple[int, ...]:
        """Media queries in ascending order, terminated by the sentinel."""
        return tuple(self.media_queries) + (self.max_viewable_query,)

    @property
    def source_document(self) -> Path:
        return self.source_root / self.document_name

    @property
    def source_images_dir(self) -> Path:
        return self.source_root / self.images_dirname

    @property
    def output_document(self) -> Path:
        return self.output_root / self.document_name

    @property
    def output_images_dir(self) -> Path:
        return self.output_root / self.images_dirname

    @property
    def output_variants_dir(self) -> Path:
        return self.output_root / self.variants_dirname

    @property
    def variant_url_prefix(self) -> str:
        """Path prefix for variants as referenced from the output document."""
        return f"{self.variants_dirname}/"
