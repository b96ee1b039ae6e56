"""Exception hierarchy raised by the pipeline stages."""

from __future__ import annotations


class ResponsiveImagesError(Exception):
    """Base class for every fatal pipeline failure."""


class PlanningError(ResponsiveImagesError):
    """The variant width ladder or breakpoint set is malformed."""


class ResizeFailure(ResponsiveImagesError):
    """A resize call failed or produced output that is not the planned variant."""


class RendererError(ResponsiveImagesError):
    """Failure inside the hosted layout engine."""


class RenderLoadError(RendererError):
    """The document could not be loaded into the renderer."""


class RenderTimeoutError(RendererError):
    """An in-page script exceeded the global script timeout."""


class BindingError(RendererError):
    """An <img> element is missing an identifier or source, or reuses one."""


class MissingAttributesError(RendererError):
    """An element in the document has no compiled attributes to apply."""


class CompilationError(ResponsiveImagesError):
    """Upstream invariant violated while compiling srcset/sizes."""


class UnboundIdentifierError(CompilationError):
    """The identifier has no entry in the element binding."""


class MissingMasterRecordError(CompilationError):
    """The bound filename has no master image record."""
