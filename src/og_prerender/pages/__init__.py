"""Preview page assembly: entity models, crawler detection and HTML output."""

from .builder import build_html, clean_description, escape_html
from .crawler import is_crawler
from .model import Expert, PageMetadata, ResolvedImage, Talk

__all__ = [
    "build_html",
    "clean_description",
    "escape_html",
    "is_crawler",
    "Expert",
    "Talk",
    "PageMetadata",
    "ResolvedImage",
]
