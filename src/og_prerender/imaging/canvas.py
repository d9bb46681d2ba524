"""
Canvas fit
==========
1. Decode the source (EXIF orientation applied, first frame of animations).
2. Resize to fit *inside* the target box, keeping aspect ratio. Small sources
   are upscaled; nothing is cropped.
3. Centre on a solid background canvas. Odd leftover pixels go to the
   bottom/right edge.
4. Encode as an optimised progressive JPEG.

Everything here is synchronous CPU work; the server runs it via
``asyncio.to_thread``.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from io import BytesIO
from typing import Tuple

from PIL import Image, ImageOps

from ..errors import TransformError

# 1x1 fully transparent GIF, served when a transform cannot produce anything better
FALLBACK_GIF = base64.b64decode("R0lGODlhAQABAIAAAAAAAP///yH5BAEAAAAALAAAAAABAAEAAAIBRAA7")


@dataclass(slots=True, frozen=True)
class Padding:
    top: int
    bottom: int
    left: int
    right: int


def fitted_size(src_w: int, src_h: int, box_w: int = 1200, box_h: int = 630) -> Tuple[int, int]:
    """Largest ``(w, h)`` with the source's aspect ratio that fits in the box."""
    if src_w <= 0 or src_h <= 0:
        raise TransformError(f"invalid source size {src_w}x{src_h}")
    if src_w * box_h >= src_h * box_w:
        # Width-bound
        return box_w, max(1, min(box_h, round(src_h * box_w / src_w)))
    return max(1, min(box_w, round(src_w * box_h / src_h))), box_h


def padding_for(w: int, h: int, box_w: int = 1200, box_h: int = 630) -> Padding:
    top = (box_h - h) // 2
    left = (box_w - w) // 2
    return Padding(top=top, bottom=box_h - h - top, left=left, right=box_w - w - left)


def _flatten(img: Image.Image, background: Tuple[int, int, int]) -> Image.Image:
    """Return an RGB image, compositing any transparency over ``background``."""
    if img.mode in ("RGBA", "LA", "PA") or (img.mode == "P" and "transparency" in img.info):
        rgba = img.convert("RGBA")
        base = Image.new("RGB", rgba.size, background)
        base.paste(rgba, mask=rgba.getchannel("A"))
        return base
    return img.convert("RGB")


def fit(
    source: bytes,
    *,
    width: int = 1200,
    height: int = 630,
    background: Tuple[int, int, int] = (26, 26, 46),
    quality: int = 90,
) -> bytes:
    """
    Letterbox ``source`` onto an exact ``width`` x ``height`` JPEG canvas.

    :raises TransformError: when the bytes cannot be decoded or encoded.
    """
    try:
        with Image.open(BytesIO(source)) as im:
            im.seek(0)
            oriented = ImageOps.exif_transpose(im)
            flat = _flatten(oriented, background)
    except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as exc:
        raise TransformError(f"cannot decode source image: {exc}") from exc

    w, h = fitted_size(flat.width, flat.height, width, height)
    resized = flat.resize((w, h), Image.Resampling.LANCZOS)
    pad = padding_for(w, h, width, height)

    canvas = Image.new("RGB", (width, height), background)
    canvas.paste(resized, (pad.left, pad.top))

    buf = BytesIO()
    try:
        canvas.save(buf, format="JPEG", quality=quality, optimize=True, progressive=True)
    except OSError as exc:
        raise TransformError(f"cannot encode JPEG: {exc}") from exc
    return buf.getvalue()
