import os
from typing import Tuple

from .loader import section


def _parse_rgb(raw) -> Tuple[int, int, int]:
    """Accept ``"26,26,46"``, ``"#1a1a2e"`` or a 3-item list."""
    if isinstance(raw, (list, tuple)):
        parts = [int(v) for v in raw]
    else:
        text = str(raw).strip()
        if text.startswith("#") and len(text) == 7:
            parts = [int(text[i:i + 2], 16) for i in (1, 3, 5)]
        else:
            parts = [int(v.strip()) for v in text.split(",") if v.strip()]
    if len(parts) != 3 or not all(0 <= v <= 255 for v in parts):
        raise ValueError(f"Invalid RGB colour: {raw!r}")
    return parts[0], parts[1], parts[2]


class Images:
    def __init__(self, config: dict | None = None) -> None:
        img_cfg = section(config, "images")

        # Cascade sources after the entity's own image
        self.DEFAULT_IMAGE_URL: str = str(
            img_cfg.get("default_image_url", os.getenv("DEFAULT_IMAGE_URL", "https://99expert.com/99expert-logo.png"))
        )
        # Must be exactly OG_WIDTH x OG_HEIGHT; it is never probed
        self.PLACEHOLDER_IMAGE_URL: str = str(
            img_cfg.get(
                "placeholder_image_url",
                os.getenv("PLACEHOLDER_IMAGE_URL", "https://99expert.com/og-placeholder.jpg"),
            )
        )

        self.OG_WIDTH: int = int(img_cfg.get("og_width", os.getenv("OG_IMAGE_WIDTH", "1200")))
        self.OG_HEIGHT: int = int(img_cfg.get("og_height", os.getenv("OG_IMAGE_HEIGHT", "630")))
        self.MIN_WIDTH: int = int(img_cfg.get("min_width", os.getenv("MIN_IMAGE_WIDTH", "200")))
        self.MIN_HEIGHT: int = int(img_cfg.get("min_height", os.getenv("MIN_IMAGE_HEIGHT", "200")))

        self.PROBE_TIMEOUT: float = float(img_cfg.get("probe_timeout", os.getenv("PROBE_TIMEOUT", "5")))
        self.PROBE_RETRIES: int = int(img_cfg.get("probe_retries", os.getenv("PROBE_RETRIES", "1")))

        self.TRANSFORM_TIMEOUT: float = float(img_cfg.get("transform_timeout", os.getenv("TRANSFORM_TIMEOUT", "10")))
        self.MAX_TRANSFORM_MB: int = int(img_cfg.get("max_transform_mb", os.getenv("MAX_TRANSFORM_MB", "10")))
        self.JPEG_QUALITY: int = int(img_cfg.get("jpeg_quality", os.getenv("JPEG_QUALITY", "90")))
        self.BACKGROUND: Tuple[int, int, int] = _parse_rgb(
            img_cfg.get("background_color", os.getenv("BACKGROUND_COLOR", "26,26,46"))
        )

    @property
    def max_transform_bytes(self) -> int:
        return self.MAX_TRANSFORM_MB * 1024 * 1024
