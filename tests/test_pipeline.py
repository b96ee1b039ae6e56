import asyncio
import time

import pytest
from bs4 import BeautifulSoup

from conftest import DOCUMENT
from respimg.config import PipelineConfig
from respimg.errors import MissingMasterRecordError, RenderLoadError, ResizeFailure
from respimg.pipeline import prepare_output_dirs, run_pipeline
from respimg.variants import resize_image


def test_prepare_output_dirs_recreates_tree(tmp_path):
    config = PipelineConfig(output_root=tmp_path / "gen")
    stale = config.output_root / "stale.txt"
    stale.parent.mkdir(parents=True)
    stale.write_text("old run")

    prepare_output_dirs(config)

    assert not stale.exists()
    assert config.output_images_dir.is_dir()
    assert config.output_variants_dir.is_dir()


def test_missing_document(tmp_path):
    config = PipelineConfig(source_root=tmp_path / "src", output_root=tmp_path / "gen")
    with pytest.raises(RenderLoadError):
        asyncio.run(run_pipeline(config))
    assert not config.output_root.exists()


def test_unknown_image_fails_before_any_output(site, tmp_path):
    (site / "images" / "forest.png").unlink()
    config = PipelineConfig(source_root=site, output_root=tmp_path / "gen")
    with pytest.raises(MissingMasterRecordError):
        asyncio.run(run_pipeline(config))
    assert not config.output_root.exists()


def test_resize_failure_discards_partial_output(site, tmp_path):
    config = PipelineConfig(source_root=site, output_root=tmp_path / "gen")

    def broken(source, width, destination):
        raise RuntimeError("no encoder")

    with pytest.raises(ResizeFailure):
        asyncio.run(run_pipeline(config, resizer=broken))
    assert not config.output_root.exists()


def test_full_run(site, tmp_path, browser_runner):
    config = PipelineConfig(
        source_root=site,
        output_root=tmp_path / "gen",
        settle_delay=0.05,
    )
    result = browser_runner(lambda playwright: run_pipeline(config, playwright=playwright))

    assert result.output_path == config.output_document
    assert sorted(path.name for path in config.output_images_dir.iterdir()) == [
        "beach.jpg",
        "forest.png",
    ]
    assert sorted(path.name for path in config.output_variants_dir.iterdir()) == [
        "beach-1080.jpg",
        "beach-1400.jpg",
        "beach-1800.jpg",
        "beach-500.jpg",
        "beach-800.jpg",
        "forest-500.png",
    ]

    output = BeautifulSoup(config.output_document.read_text(encoding="utf-8"), "html.parser")
    hero = output.find("img", id="hero")
    thumb = output.find("img", id="thumb")
    assert hero["src"] == "images/beach.jpg"
    assert hero["class"] == ["half"]
    assert hero["srcset"] == (
        "variants/beach-500.jpg 500w, variants/beach-800.jpg 800w, "
        "variants/beach-1080.jpg 1080w, variants/beach-1400.jpg 1400w, "
        "variants/beach-1800.jpg 1800w"
    )
    assert hero["sizes"] == (
        "(max-width: 480px) 240px, (max-width: 768px) 384px, "
        "(max-width: 992px) 496px, (max-width: 1200px) 600px, 5000px"
    )
    assert thumb["srcset"] == "variants/forest-500.png 500w"
    assert thumb["sizes"] == (
        "(max-width: 480px) 300px, (max-width: 768px) 300px, "
        "(max-width: 992px) 300px, (max-width: 1200px) 300px, 300px"
    )

    source = BeautifulSoup(DOCUMENT, "html.parser")
    for img in output.find_all("img"):
        del img["srcset"]
        del img["sizes"]
    assert [str(img) for img in output.find_all("img")] == [
        str(img) for img in source.find_all("img")
    ]


def test_resize_failure_leaves_no_late_writes(site, tmp_path):
    config = PipelineConfig(source_root=site, output_root=tmp_path / "gen")

    def slow_unless_smallest(source, width, destination):
        if width == 500:
            raise RuntimeError("no encoder")
        time.sleep(0.2)
        resize_image(source, width, destination)

    with pytest.raises(ResizeFailure):
        asyncio.run(run_pipeline(config, resizer=slow_unless_smallest))
    time.sleep(0.3)
    assert not config.output_root.exists()
