"""Crawler-facing Open Graph previews for expert and talk pages."""

__version__ = "0.3.0"
