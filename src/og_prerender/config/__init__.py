"""Application configuration"""

import logging
from dotenv import load_dotenv

from .loader import load_raw_config
from .core import Server, Site
from .store import Store
from .images import Images

load_dotenv()

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s]: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logging.basicConfig(format=LOG_FORMAT, datefmt=DATE_FORMAT, level=logging.INFO)
# Requests are already logged by the server middleware
logging.getLogger("aiohttp.access").setLevel(logging.WARNING)


class Config:
    """Read-only bundle of every config section, handed to ``create_app``."""

    def __init__(self, raw: dict | None = None) -> None:
        self.server = Server(raw)
        self.site = Site(raw)
        self.store = Store(raw)
        self.images = Images(raw)


def load_config(path=None) -> Config:
    """Build a fresh :class:`Config` from ``path`` (or the default file) plus env."""
    return Config(load_raw_config(path))


__all__ = ["Config", "load_config", "Server", "Site", "Store", "Images"]
