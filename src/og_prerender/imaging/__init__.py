"""Image resolution: URL normalisation, probing, canvas fit and the fallback cascade."""

from .canvas import FALLBACK_GIF, fit
from .pipeline import ImageResolver
from .probe import ProbeResult, make_prober, probe
from .urls import mime_for_url, normalize, transform_url

__all__ = [
    "FALLBACK_GIF",
    "fit",
    "ImageResolver",
    "ProbeResult",
    "make_prober",
    "probe",
    "mime_for_url",
    "normalize",
    "transform_url",
]
