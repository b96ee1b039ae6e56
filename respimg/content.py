"""Static checks of the source document before anything is rendered."""

from __future__ import annotations

from typing import Iterable, List

from bs4 import BeautifulSoup

from .errors import BindingError, MissingMasterRecordError
from .models import ImageReference
from .utils import filename_from_src


def read_image_references(html: str) -> List[ImageReference]:
    """Collect every <img> element, enforcing unique ids and a src on each."""
    soup = BeautifulSoup(html, "html.parser")
    references: List[ImageReference] = []
    seen = set()
    for index, img in enumerate(soup.find_all("img"), start=1):
        identifier = (img.get("id") or "").strip()
        if not identifier:
            raise BindingError(f"<img> element #{index} has no id attribute")
        if identifier in seen:
            raise BindingError(f"Duplicate <img> id {identifier!r}")
        src = (img.get("src") or "").strip()
        if not src:
            raise BindingError(f"<img id={identifier!r}> has no src attribute")
        seen.add(identifier)
        references.append(ImageReference(identifier, src, filename_from_src(src)))
    return references


def check_masters_available(
    references: Iterable[ImageReference],
    filenames: Iterable[str],
) -> None:
    """Fail fast when the document shows an image that is not a master."""
    available = set(filenames)
    for reference in references:
        if reference.filename not in available:
            raise MissingMasterRecordError(
                f"<img id={reference.identifier!r}> references {reference.src!r}, "
                "which is not among the master images"
            )
