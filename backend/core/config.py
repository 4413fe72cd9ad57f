# backend/core/config.py
import os
from typing import List
from dotenv import load_dotenv

DEFAULT_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:5174",
    "http://localhost:5175",
]


def _parse_origins(raw: str, frontend_url: str) -> List[str]:
    """Split a comma-separated origin list, add the frontend URL, drop blanks and duplicates."""
    candidates = [o.strip() for o in raw.split(",")] if raw else list(DEFAULT_ORIGINS)
    candidates.append(frontend_url)

    origins: List[str] = []
    for origin in candidates:
        origin = origin.rstrip("/")
        if origin and origin not in origins:
            origins.append(origin)
    return origins


class Settings:
    """
    Setup environment variables.
        - HOST / PORT where uvicorn binds
        - FRONTEND_URL the chat frontend, always part of the origin allow-list
        - ALLOWED_ORIGINS comma-separated origins allowed to open /ws and call the REST API
        - LOG_LEVEL root logger level
    """

    # Load environment variables from the .env file
    load_dotenv()

    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8085"))

    FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:5173")
    ALLOWED_ORIGINS: List[str] = _parse_origins(os.getenv("ALLOWED_ORIGINS", ""), FRONTEND_URL)

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    def is_origin_allowed(self, origin: str | None) -> bool:
        """Requests without an Origin header (mobile apps, curl) are let through."""
        if not origin:
            return True
        return origin.rstrip("/") in self.ALLOWED_ORIGINS

settings = Settings()
