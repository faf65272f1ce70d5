"""Preview artifacts, renderers, and the background preview worker."""

from .artifact import EMPTY_PREVIEW, Preview, PreviewKind
from .pipeline import PreviewPipeline, PreviewRequest, PreviewResult

__all__ = [
    "EMPTY_PREVIEW",
    "Preview",
    "PreviewKind",
    "PreviewPipeline",
    "PreviewRequest",
    "PreviewResult",
]
