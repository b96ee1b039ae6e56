from __future__ import annotations

import asyncio
from pathlib import Path

import pytest
from PIL import Image
from playwright.async_api import Error as PlaywrightError, async_playwright

DOCUMENT = """<!DOCTYPE html>
<html>
<head>
<style>
  body { margin: 0; }
  .half { display: block; width: 50%; }
  .fixed { display: block; width: 300px; }
</style>
</head>
<body>
<img id="hero" class="half" src="images/beach.jpg" alt="Beach">
<img id="thumb" class="fixed" src="images/forest.png" alt="Forest">
</body>
</html>
"""


def make_image(path: Path, width: int, height: int, image_format: str | None = None) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", (width, height), (40, 120, 200)).save(path, format=image_format)
    return path


@pytest.fixture
def site(tmp_path: Path) -> Path:
    """A source tree with a two-image document and its masters."""
    source = tmp_path / "src"
    make_image(source / "images" / "beach.jpg", 2000, 1000)
    make_image(source / "images" / "forest.png", 600, 400)
    (source / "index.html").write_text(DOCUMENT, encoding="utf-8")
    return source


@pytest.fixture
def browser_runner():
    """Run ``scenario(playwright)`` in Chromium, skipping when it cannot launch."""

    def run(scenario):
        async def runner():
            async with async_playwright() as playwright:
                try:
                    browser = await playwright.chromium.launch(headless=True)
                    await browser.close()
                except PlaywrightError as exc:
                    return False, str(exc)
                return True, await scenario(playwright)

        launched, outcome = asyncio.run(runner())
        if not launched:
            pytest.skip(f"Chromium is not available: {outcome}")
        return outcome

    return run
