from pathlib import Path

import pytest

from respimg.config import MAX_VIEWABLE_QUERY, PipelineConfig
from respimg.errors import PlanningError


def test_defaults_follow_fixed_layout():
    config = PipelineConfig()
    assert config.source_document == Path("src") / "index.html"
    assert config.source_images_dir == Path("src") / "images"
    assert config.output_variants_dir == Path("gen") / "variants"
    assert config.variant_url_prefix == "variants/"
    assert config.breakpoints == (480, 768, 992, 1200, MAX_VIEWABLE_QUERY)


def test_rejects_non_ascending_ladder():
    with pytest.raises(PlanningError):
        PipelineConfig(variant_widths=[800, 500])


def test_rejects_duplicate_and_non_positive_widths():
    with pytest.raises(PlanningError):
        PipelineConfig(variant_widths=[500, 500])
    with pytest.raises(PlanningError):
        PipelineConfig(media_queries=[0, 480])


def test_sentinel_must_exceed_media_queries():
    with pytest.raises(PlanningError):
        PipelineConfig(media_queries=[480, 2000], max_viewable_query=1500)


def test_extensions_are_normalized():
    config = PipelineConfig(image_extensions=[".JPG"], output_root="out")
    assert config.image_extensions == (".jpg",)
    assert config.output_root == Path("out")
