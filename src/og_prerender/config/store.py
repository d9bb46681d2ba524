import os

from .loader import section


class Store:
    def __init__(self, config: dict | None = None) -> None:
        store_cfg = section(config, "store")

        url_env = str(store_cfg.get("url_env", "SUPABASE_URL"))
        key_env = str(store_cfg.get("key_env", "SUPABASE_ANON_KEY"))

        self.SUPABASE_URL: str | None = store_cfg.get("url") or os.getenv(url_env)
        self.SUPABASE_ANON_KEY: str | None = os.getenv(key_env)
        self.TIMEOUT: float = float(store_cfg.get("timeout", os.getenv("STORE_TIMEOUT", "5")))

        required = [
            ("SUPABASE_URL", self.SUPABASE_URL),
            ("SUPABASE_ANON_KEY", self.SUPABASE_ANON_KEY),
        ]
        missing = [name for name, val in required if not val]
        if missing:
            raise ValueError(f"Missing environment variables: {', '.join(missing)}")

        self.SUPABASE_URL = self.SUPABASE_URL.rstrip("/")
