"""
Image resolution cascade
========================
Sources are tried strictly in order until one satisfies the size policy:

1. ``candidate``   - the entity's own image, routed through the canvas-fit
                     endpoint so its declared size is exactly the OG size.
2. ``default``     - the configured site image, probed as-is.
3. ``placeholder`` - trusted to be exactly the OG size; never probed.

``ImageResolver.resolve`` never raises and never returns ``None``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Literal, Optional

from ..pages.model import ResolvedImage
from .probe import Prober
from .urls import mime_for_url, normalize, transform_url

logger = logging.getLogger(__name__)

SourceKind = Literal["candidate", "default", "placeholder"]


class CascadeState(Enum):
    TRYING = "trying"
    RESOLVED = "resolved"
    EXHAUSTED = "exhausted"


@dataclass(slots=True)
class ImageCandidate:
    ref: str
    source: SourceKind
    state: CascadeState = CascadeState.TRYING


class ImageResolver:
    """Walks the candidate -> default -> placeholder cascade for one request."""

    def __init__(
        self,
        prober: Prober,
        *,
        og_width: int = 1200,
        og_height: int = 630,
    ) -> None:
        self._probe = prober
        self.og_width = og_width
        self.og_height = og_height

    @staticmethod
    def candidates(candidate_ref: Optional[str], default_ref: Optional[str]) -> List[ImageCandidate]:
        """Ordered probe-able sources; blank references are skipped."""
        ordered: List[ImageCandidate] = []
        if candidate_ref and candidate_ref.strip():
            ordered.append(ImageCandidate(candidate_ref.strip(), "candidate"))
        if default_ref and default_ref.strip():
            ordered.append(ImageCandidate(default_ref.strip(), "default"))
        return ordered

    async def _try(self, cand: ImageCandidate, base: str, transform_base: str) -> ResolvedImage | None:
        url = normalize(cand.ref, base)
        if cand.source == "candidate":
            url = transform_url(url, transform_base)

        result = await self._probe(url)
        if result is None or result.too_small:
            logger.info(
                "Image %s rejected (%s): %s",
                cand.source, "unreachable" if result is None else "too small", url,
            )
            return None

        cand.state = CascadeState.RESOLVED
        if cand.source == "candidate":
            return ResolvedImage(url=url, width=self.og_width, height=self.og_height, content_type="image/jpeg")
        return ResolvedImage(url=url, width=result.width, height=result.height, content_type=mime_for_url(url))

    async def resolve(
        self,
        candidate_ref: Optional[str],
        default_ref: Optional[str],
        placeholder_ref: str,
        transform_base: str,
        *,
        base: Optional[str] = None,
    ) -> ResolvedImage:
        """
        Resolve the og:image for one page.

        :param candidate_ref: Raw image reference from the entity (may be ``None``).
        :param default_ref: Site-wide default image.
        :param placeholder_ref: Guaranteed image of exactly the OG size.
        :param transform_base: Public origin of the canvas-fit endpoint.
        :param base: Origin used to absolutise relative references
            (defaults to ``transform_base``).
        """
        base = base or transform_base
        for cand in self.candidates(candidate_ref, default_ref):
            try:
                resolved = await self._try(cand, base, transform_base)
            except Exception as exc:
                logger.warning("Image %s failed for %r: %s", cand.source, cand.ref, exc)
                resolved = None
            if resolved is not None:
                return resolved
            cand.state = CascadeState.EXHAUSTED

        url = normalize(placeholder_ref, base)
        logger.info("Image cascade exhausted; using placeholder %s", url)
        return ResolvedImage(
            url=url,
            width=self.og_width,
            height=self.og_height,
            content_type=mime_for_url(url),
        )
