"""Exception types raised inside the prerender service."""

from __future__ import annotations


class PrerenderError(Exception):
    """Base class for errors owned by this package."""


class StoreError(PrerenderError):
    """The data store could not be reached or returned an unusable response."""


class TransformError(PrerenderError):
    """A source image could not be downloaded or re-encoded."""
