"""Compile variant metadata and measurements into srcset/sizes values."""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Tuple

from .errors import MissingMasterRecordError, UnboundIdentifierError
from .models import MasterImageRecord, ResponsiveAttributes, RunContext
from .utils import variant_name

logger = logging.getLogger("respimg")


def compile_srcset(record: MasterImageRecord, url_prefix: str = "variants/") -> str:
    """List each generated variant as ``{path} {width}w``; empty when none exist."""
    return ", ".join(
        f"{url_prefix}{variant_name(record.filename, width)} {width}w"
        for width in record.variant_widths
    )


def _collapse(entries: List[Tuple[int, str]]) -> List[Tuple[int, str]]:
    """Merge runs of equal widths into the entry covering the widest range."""
    collapsed: List[Tuple[int, str]] = []
    for index, (query, width) in enumerate(entries):
        following = entries[index + 1] if index + 1 < len(entries) else None
        if following is not None and following[1] == width:
            continue
        collapsed.append((query, width))
    return collapsed


def compile_sizes(
    measurements: Mapping[int, str],
    max_query: int,
    collapse: bool = False,
) -> str:
    """Emit ``(max-width: Npx) W`` clauses ascending, then the unbounded tail."""
    entries = sorted(measurements.items())
    if collapse:
        entries = _collapse(entries)
    clauses = []
    for query, width in entries:
        if query == max_query:
            clauses.append(width)
        else:
            clauses.append(f"(max-width: {query}px) {width}")
    return ", ".join(clauses)


def compile_attributes(
    identifier: str,
    context: RunContext,
    max_query: int,
    url_prefix: str = "variants/",
    collapse: bool = False,
) -> ResponsiveAttributes:
    """Build the srcset and sizes pair for one bound <img> element."""
    try:
        filename = context.binding[identifier]
    except KeyError as exc:
        raise UnboundIdentifierError(f"Image id {identifier!r} is not bound to a file") from exc
    try:
        record = context.records[filename]
    except KeyError as exc:
        raise MissingMasterRecordError(
            f"Image id {identifier!r} shows {filename!r}, which has no master record"
        ) from exc
    return ResponsiveAttributes(
        srcset=compile_srcset(record, url_prefix),
        sizes=compile_sizes(context.measurements.get(identifier, {}), max_query, collapse),
    )


def compile_all(
    context: RunContext,
    max_query: int,
    url_prefix: str = "variants/",
    collapse: bool = False,
) -> Dict[str, ResponsiveAttributes]:
    """Compile attributes for every bound element and store them on ``context``."""
    logger.info(
        "Compile srcset and sizes attributes from in-browser measurements and generated variants"
    )
    for identifier in context.binding:
        if identifier in context.compiled:
            continue
        attributes = compile_attributes(identifier, context, max_query, url_prefix, collapse)
        logger.debug("%s: srcset=%r sizes=%r", identifier, attributes.srcset, attributes.sizes)
        context.compiled[identifier] = attributes
    return context.compiled
