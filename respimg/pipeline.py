"""High-level orchestration of a single responsive-image run."""

from __future__ import annotations

import logging
import shutil
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from playwright.async_api import Playwright

from .compiler import compile_all
from .config import PipelineConfig
from .content import check_masters_available, read_image_references
from .errors import RenderLoadError, ResizeFailure
from .measure import measure_breakpoints
from .models import RunContext
from .renderer import RendererSession
from .variants import Resizer, discover_masters, generate_all_variants

logger = logging.getLogger("respimg")


@dataclass
class RunResult:
    """Summary of a completed run."""

    output_path: Path
    context: RunContext
    total_seconds: float


def prepare_output_dirs(config: PipelineConfig) -> None:
    """Re-create the output root with empty images and variants folders."""
    logger.info("Create %s folder", config.output_root)
    if config.output_root.exists():
        shutil.rmtree(config.output_root)
    config.output_images_dir.mkdir(parents=True)
    config.output_variants_dir.mkdir(parents=True)


async def render_and_measure(
    config: PipelineConfig,
    context: RunContext,
    playwright: Optional[Playwright] = None,
) -> str:
    """Bind, measure, compile and inject inside one renderer session."""
    async with RendererSession(config, playwright) as session:
        await session.load(config.source_document)
        await session.await_ready()
        context.binding.update(await session.bind_image_identifiers())

        logger.info("Get measurements")
        await measure_breakpoints(session, config.breakpoints, config.probe_height, context)

        compile_all(
            context,
            config.max_viewable_query,
            url_prefix=config.variant_url_prefix,
            collapse=config.collapse_sizes,
        )

        logger.info("Build output html")
        return await session.inject_attributes_and_serialize(context.compiled)


async def run_pipeline(
    config: PipelineConfig,
    resizer: Optional[Resizer] = None,
    playwright: Optional[Playwright] = None,
) -> RunResult:
    """Generate variants, measure the document and write the responsive copy."""
    start = time.perf_counter()
    context = RunContext()

    document = config.source_document
    if not document.is_file():
        raise RenderLoadError(f"Source document does not exist: {document}")
    references = read_image_references(document.read_text(encoding="utf-8"))
    masters = discover_masters(config.source_images_dir, config.image_extensions)
    check_masters_available(references, [path.name for path in masters])

    prepare_output_dirs(config)
    logger.info("Generate responsive variants")
    try:
        context.records.update(await generate_all_variants(config, resizer))
    except ResizeFailure:
        shutil.rmtree(config.output_root)
        raise

    html = await render_and_measure(config, context, playwright)

    output_path = config.output_document
    output_path.write_text(html, encoding="utf-8")
    logger.info("Saved output document to %s", output_path)

    return RunResult(
        output_path=output_path,
        context=context,
        total_seconds=time.perf_counter() - start,
    )
