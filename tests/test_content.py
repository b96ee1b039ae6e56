import pytest

from conftest import DOCUMENT
from respimg.content import check_masters_available, read_image_references
from respimg.errors import BindingError, MissingMasterRecordError
from respimg.models import ImageReference


def test_reads_references_in_document_order():
    references = read_image_references(DOCUMENT)
    assert references == [
        ImageReference("hero", "images/beach.jpg", "beach.jpg"),
        ImageReference("thumb", "images/forest.png", "forest.png"),
    ]


def test_missing_id_is_a_binding_error():
    with pytest.raises(BindingError, match="no id"):
        read_image_references('<img src="images/a.jpg">')


def test_duplicate_id_is_a_binding_error():
    html = '<img id="a" src="images/a.jpg"><img id="a" src="images/b.jpg">'
    with pytest.raises(BindingError, match="Duplicate"):
        read_image_references(html)


def test_missing_src_is_a_binding_error():
    with pytest.raises(BindingError, match="no src"):
        read_image_references('<img id="a">')


def test_document_without_images():
    assert read_image_references("<p>Nothing to see</p>") == []


def test_unknown_master_is_reported():
    references = read_image_references(DOCUMENT)
    check_masters_available(references, ["beach.jpg", "forest.png", "extra.jpg"])
    with pytest.raises(MissingMasterRecordError, match="forest.png"):
        check_masters_available(references, ["beach.jpg"])
