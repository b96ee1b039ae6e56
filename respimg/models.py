"""Data models shared by the pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Tuple


@dataclass(frozen=True)
class MasterImageRecord:
    """Metadata gathered from a master image and the variants planned for it."""

    filename: str
    source_path: Path
    byte_size: int
    width: int
    height: int
    variant_widths: Tuple[int, ...]


@dataclass(frozen=True)
class ImageReference:
    """An <img> element discovered while scanning the source document."""

    identifier: str
    src: str
    filename: str


@dataclass(frozen=True)
class ResponsiveAttributes:
    """Compiled attribute values for a single <img> element."""

    srcset: str
    sizes: str

    def as_dict(self) -> Dict[str, str]:
        return {"srcset": self.srcset, "sizes": self.sizes}


MeasurementTable = Dict[str, Dict[int, str]]


@dataclass
class RunContext:
    """State accumulated over a single pipeline run.

    Each field has exactly one writing stage: generation fills ``records``,
    the renderer fills ``binding``, the sweep fills ``measurements`` and the
    compiler fills ``compiled``.
    """

    records: Dict[str, MasterImageRecord] = field(default_factory=dict)
    binding: Dict[str, str] = field(default_factory=dict)
    measurements: MeasurementTable = field(default_factory=dict)
    compiled: Dict[str, ResponsiveAttributes] = field(default_factory=dict)

    def record_measurements(self, query: int, measurements: Dict[str, str]) -> None:
        """Store one breakpoint column of measurements."""
        for identifier, width in measurements.items():
            column = self.measurements.setdefault(identifier, {})
            if query in column:
                raise ValueError(
                    f"Measurement for {identifier!r} at {query}px already recorded"
                )
            column[query] = width
