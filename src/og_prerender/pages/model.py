"""Dataclass models for entities and preview pages.

``Expert`` and ``Talk`` are read-only projections of store rows. ``ResolvedImage``
is the output of the image cascade and is always fully populated.
``PageMetadata`` is everything :func:`~og_prerender.pages.builder.build_html`
needs to render one document.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional


ImageMime = Literal["image/jpeg", "image/png", "image/gif", "image/webp"]
OgType = Literal["article", "profile"]
EntityKind = Literal["expert", "talk"]


def _blank_to_none(value: Any) -> Optional[str]:
    """Return a stripped string, or ``None`` for missing/blank values."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(slots=True, frozen=True)
class Expert:
    id: str
    name: str
    roles: List[str] = field(default_factory=list)
    intro: Optional[str] = None
    image_ref: Optional[str] = None

    @classmethod
    def from_row(cls, entity_id: str, row: Dict[str, Any]) -> "Expert":
        roles = row.get("roles") or []
        if isinstance(roles, str):
            roles = [roles]
        return cls(
            id=str(entity_id),
            name=str(row.get("name") or "").strip(),
            roles=[str(r) for r in roles if r],
            intro=_blank_to_none(row.get("intro")),
            image_ref=_blank_to_none(row.get("profile_image_url")),
        )


@dataclass(slots=True, frozen=True)
class Talk:
    id: str
    title: str
    description: Optional[str] = None
    image_ref: Optional[str] = None
    expert: Optional[Expert] = None

    @classmethod
    def from_row(cls, entity_id: str, row: Dict[str, Any]) -> "Talk":
        related = row.get("experts")
        # PostgREST embeds a to-one relation as an object, to-many as a list
        if isinstance(related, list):
            related = related[0] if related else None
        expert = Expert.from_row("", related) if isinstance(related, dict) else None
        return cls(
            id=str(entity_id),
            title=str(row.get("title") or "").strip(),
            description=_blank_to_none(row.get("description")),
            image_ref=_blank_to_none(row.get("image_url")),
            expert=expert,
        )

    @property
    def image_candidate(self) -> Optional[str]:
        """Talk image first, then the speaker's portrait."""
        if self.image_ref:
            return self.image_ref
        return self.expert.image_ref if self.expert else None


@dataclass(slots=True, frozen=True)
class ResolvedImage:
    url: str
    width: int
    height: int
    content_type: ImageMime = "image/jpeg"


@dataclass(slots=True, frozen=True)
class PageMetadata:
    title: str
    description: str
    canonical_url: str
    og_url: str
    image: ResolvedImage
    og_type: OgType
    redirect_url: str

    @staticmethod
    def og_type_for(kind: EntityKind) -> OgType:
        return "article" if kind == "talk" else "profile"
