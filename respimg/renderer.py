"""Playwright-backed renderer used as a layout oracle for <img> widths."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Awaitable, Dict, List, Mapping, Optional

from playwright.async_api import (
    Browser,
    Error as PlaywrightError,
    Page,
    Playwright,
    TimeoutError as PlaywrightTimeoutError,
    async_playwright,
)

from .config import PipelineConfig
from .errors import (
    BindingError,
    MissingAttributesError,
    RendererError,
    RenderLoadError,
    RenderTimeoutError,
)
from .models import ResponsiveAttributes
from .utils import filename_from_src

logger = logging.getLogger("respimg")

WAIT_UNTIL_READY_SCRIPT = """
() => new Promise((resolve) => {
  const check = () => {
    if (document.readyState === 'complete') {
      document.removeEventListener('readystatechange', check);
      resolve(true);
    }
  };
  document.addEventListener('readystatechange', check);
  check();
})
"""

LIST_IMAGES_SCRIPT = """
() => Array.from(document.querySelectorAll('img')).map((el) => ({
  id: el.getAttribute('id'),
  src: el.getAttribute('src'),
}))
"""

# Scrollbars shrink the layout viewport, so overflow is hidden while measuring
# and always restored afterwards.
MEASURE_IMAGES_SCRIPT = """
() => {
  const root = document.documentElement;
  const previous = root.style.overflow;
  root.style.overflow = 'hidden';
  try {
    const measurements = {};
    document.querySelectorAll('img').forEach((el) => {
      const id = el.getAttribute('id');
      if (id) {
        measurements[id] = el.clientWidth + 'px';
      }
    });
    return measurements;
  } finally {
    root.style.overflow = previous;
  }
}
"""

APPLY_ATTRIBUTES_SCRIPT = """
(attributes) => {
  const images = Array.from(document.querySelectorAll('img'));
  const missing = images
    .map((el) => el.getAttribute('id'))
    .filter((id) => !Object.prototype.hasOwnProperty.call(attributes, id));
  if (missing.length) {
    return missing;
  }
  images.forEach((el) => {
    const {srcset, sizes} = attributes[el.getAttribute('id')];
    el.setAttribute('sizes', sizes);
    el.setAttribute('srcset', srcset);
  });
  return [];
}
"""


class SessionState(Enum):
    UNINITIALIZED = "uninitialized"
    LOADED = "loaded"
    READY = "ready"
    MEASURING = "measuring"
    IDLE = "idle"
    CLOSED = "closed"


class RendererSession:
    """Lifecycle of one headless Chromium page for a single pipeline run.

    Use as an async context manager so the browser is released on every exit
    path. Operations are awaited one at a time; the session never has two
    requests in flight.
    """

    def __init__(
        self,
        config: PipelineConfig,
        playwright: Optional[Playwright] = None,
    ) -> None:
        self.config = config
        self.state = SessionState.UNINITIALIZED
        self._playwright = playwright
        self._owns_playwright = playwright is None
        self._browser: Optional[Browser] = None
        self._page: Optional[Page] = None

    async def __aenter__(self) -> "RendererSession":
        try:
            await self.start()
        except BaseException:
            await self.close()
            raise
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def start(self) -> None:
        """Launch Chromium and open a blank page at the first breakpoint size."""
        if self._playwright is None:
            self._playwright = await async_playwright().start()
        logger.info("Fire up Chromium")
        try:
            self._browser = await self._playwright.chromium.launch(
                headless=self.config.headless
            )
            self._page = await self._browser.new_page(
                viewport={
                    "width": self.config.breakpoints[0],
                    "height": self.config.probe_height,
                }
            )
        except PlaywrightError as exc:
            raise RendererError(f"Failed to start Chromium: {exc}") from exc
        self._page.set_default_timeout(self.config.script_timeout * 1000)

    def _require(self, *states: SessionState) -> Page:
        if self.state not in states or self._page is None:
            expected = ", ".join(state.value for state in states)
            raise RendererError(
                f"Renderer is {self.state.value}; expected one of: {expected}"
            )
        return self._page

    async def _call(self, awaitable: Awaitable[Any], description: str) -> Any:
        """Await a renderer request under the global script timeout."""
        try:
            return await asyncio.wait_for(awaitable, timeout=self.config.script_timeout)
        except (asyncio.TimeoutError, PlaywrightTimeoutError) as exc:
            await self.close()
            raise RenderTimeoutError(
                f"{description} exceeded {self.config.script_timeout:.0f}s"
            ) from exc
        except PlaywrightError as exc:
            await self.close()
            raise RendererError(f"{description} failed: {exc}") from exc

    async def load(self, document_path: Path) -> None:
        page = self._require(SessionState.UNINITIALIZED)
        path = Path(document_path).resolve()
        if not path.is_file():
            await self.close()
            raise RenderLoadError(f"Document does not exist: {path}")
        logger.info("Render %s", path)
        try:
            await page.goto(path.as_uri(), wait_until="domcontentloaded")
        except PlaywrightError as exc:
            await self.close()
            raise RenderLoadError(f"Failed to load {path}: {exc}") from exc
        self.state = SessionState.LOADED

    async def await_ready(self) -> None:
        """Wait for ``document.readyState`` to reach ``complete``."""
        page = self._require(SessionState.LOADED)
        await self._call(page.evaluate(WAIT_UNTIL_READY_SCRIPT), "Waiting for document ready")
        self.state = SessionState.READY

    async def resize_viewport(self, width: int, height: int) -> None:
        page = self._require(SessionState.READY, SessionState.IDLE)
        await self._call(
            page.set_viewport_size({"width": int(width), "height": int(height)}),
            f"Resizing viewport to {width}x{height}",
        )

    async def settle(self) -> None:
        """Give layout a chance to re-flow after a viewport change."""
        page = self._require(SessionState.READY, SessionState.IDLE)
        if self.config.settle_delay > 0:
            await page.wait_for_timeout(self.config.settle_delay * 1000)

    async def bind_image_identifiers(self) -> Dict[str, str]:
        """Map each <img> id in the rendered document to its master filename."""
        page = self._require(SessionState.READY, SessionState.IDLE)
        images: List[Dict[str, Optional[str]]] = await self._call(
            page.evaluate(LIST_IMAGES_SCRIPT), "Binding image identifiers"
        )
        binding: Dict[str, str] = {}
        for index, image in enumerate(images, start=1):
            identifier = image.get("id")
            src = image.get("src")
            if not identifier:
                raise BindingError(f"<img> element #{index} has no id attribute")
            if identifier in binding:
                raise BindingError(f"Duplicate <img> id {identifier!r}")
            if not src:
                raise BindingError(f"<img id={identifier!r}> has no src attribute")
            binding[identifier] = filename_from_src(src)
        logger.debug("Bound %d image element(s)", len(binding))
        return binding

    async def measure_at(self, query: int) -> Dict[str, str]:
        """Return the rendered width of every <img> at the current viewport."""
        page = self._require(SessionState.READY, SessionState.IDLE)
        self.state = SessionState.MEASURING
        try:
            measurements = await self._call(
                page.evaluate(MEASURE_IMAGES_SCRIPT),
                f"Measuring images at {query}px",
            )
        finally:
            if self.state is SessionState.MEASURING:
                self.state = SessionState.IDLE
        return dict(measurements)

    async def inject_attributes_and_serialize(
        self,
        compiled: Mapping[str, ResponsiveAttributes],
    ) -> str:
        """Set srcset/sizes on each <img> and return the serialized document."""
        page = self._require(SessionState.READY, SessionState.IDLE)
        payload = {identifier: attrs.as_dict() for identifier, attrs in compiled.items()}
        missing = await self._call(
            page.evaluate(APPLY_ATTRIBUTES_SCRIPT, payload), "Applying attributes"
        )
        if missing:
            raise MissingAttributesError(
                "No compiled attributes for image id(s): " + ", ".join(map(str, missing))
            )
        return await self._call(page.content(), "Serializing document")

    async def close(self) -> None:
        """Release the browser; safe to call more than once."""
        if self.state is SessionState.CLOSED:
            return
        self.state = SessionState.CLOSED
        browser, self._browser = self._browser, None
        self._page = None
        try:
            if browser is not None:
                await browser.close()
        finally:
            if self._owns_playwright and self._playwright is not None:
                playwright, self._playwright = self._playwright, None
                await playwright.stop()
