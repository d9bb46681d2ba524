import os, sys
from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image

# Add src/ to sys.path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

# Ensure required environment variables for Config
os.environ.setdefault("SUPABASE_URL", "https://store.test")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
# Never pick up a developer's local config.toml
os.environ.setdefault("PRERENDER_CONFIG", str(Path(__file__).resolve().parent / "missing-config.toml"))


@pytest.fixture
def config():
    from og_prerender.config import load_config

    cfg = load_config()
    cfg.server.BASE_URL = "https://site.test"
    cfg.server.PUBLIC_URL = "https://og.site.test"
    return cfg


@pytest.fixture
def make_image():
    """Return encoded image bytes of the requested size/format."""

    def _make(width: int, height: int, fmt: str = "PNG", mode: str = "RGB", color=(200, 30, 30)) -> bytes:
        if mode == "RGBA" and len(color) == 3:
            color = (*color, 255)
        img = Image.new(mode, (width, height), color)
        buf = BytesIO()
        img.save(buf, format=fmt)
        return buf.getvalue()

    return _make
