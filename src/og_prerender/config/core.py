import os

from .loader import section


class Server:
    def __init__(self, config: dict | None = None) -> None:
        server_cfg = section(config, "server")
        self.HOST: str = str(server_cfg.get("host", os.getenv("HOST", "0.0.0.0")))
        self.PORT: int = int(server_cfg.get("port", os.getenv("PORT", "3000")))

        # Human-facing site that redirects land on
        self.BASE_URL: str = str(server_cfg.get("base_url", os.getenv("BASE_URL", "https://99expert.com"))).rstrip("/")

        # Public origin of this service; empty means "derive from the request"
        self.PUBLIC_URL: str = str(server_cfg.get("public_url", os.getenv("PUBLIC_URL", ""))).rstrip("/")

        self.SHUTDOWN_GRACE_SECONDS: float = float(
            server_cfg.get("shutdown_grace_seconds", os.getenv("SHUTDOWN_GRACE_SECONDS", "10"))
        )

        if not self.BASE_URL.startswith(("http://", "https://")):
            raise ValueError(f"BASE_URL must be an absolute http(s) URL, got {self.BASE_URL!r}")


class Site:
    def __init__(self, config: dict | None = None) -> None:
        site_cfg = section(config, "site")
        self.NAME: str = str(site_cfg.get("name", os.getenv("SITE_NAME", "99expert")))
        self.LOCALE: str = str(site_cfg.get("locale", os.getenv("SITE_LOCALE", "da_DK")))
        self.LANG: str = str(site_cfg.get("lang", os.getenv("SITE_LANG", "da")))
        self.DEFAULT_ROLE: str = str(site_cfg.get("default_role", os.getenv("DEFAULT_ROLE", "Ekspert")))
