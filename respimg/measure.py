"""Breakpoint sweep collecting rendered <img> widths from the renderer."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Optional

from .models import MeasurementTable, RunContext
from .renderer import RendererSession

logger = logging.getLogger("respimg")


async def measure_breakpoints(
    session: RendererSession,
    breakpoints: Iterable[int],
    probe_height: int,
    context: Optional[RunContext] = None,
) -> MeasurementTable:
    """Resize, settle and measure at each breakpoint in ascending order.

    The viewport is sized to the breakpoint value itself and results are keyed
    by that same value. Elements absent from a breakpoint's measurements are
    simply left without an entry for it.
    """
    context = context if context is not None else RunContext()
    for query in sorted(breakpoints):
        await session.resize_viewport(query, probe_height)
        logger.info("Measure images at %d pixels window width", query)
        await session.settle()
        measurements: Dict[str, str] = await session.measure_at(query)
        for identifier, width in sorted(measurements.items()):
            logger.debug("  %s -> %s", identifier, width)
        context.record_measurements(query, measurements)
    return context.measurements
