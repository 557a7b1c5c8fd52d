"""Client configuration resolved from the environment.

The backend base URL is the only setting the session core depends on. It is
read once at startup; when STORYFORGE_BACKEND_URL is not set the client
assumes the backend runs next to the frontend on port 8000 instead of 3000.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_ORIGIN = "http://localhost:3000"
DEFAULT_TIMEOUT = 30.0

FRONTEND_PORT = "3000"
BACKEND_PORT = "8000"


def fallback_backend_url(origin: str) -> str:
    """Same-origin guess: swap the frontend port for the backend port.

    "http://localhost:3000" → "http://localhost:8000"
    """
    return origin.replace(FRONTEND_PORT, BACKEND_PORT)


def resolve_backend_url(configured: str | None, origin: str = DEFAULT_ORIGIN) -> str:
    if configured and configured.strip():
        return configured.strip().rstrip("/")
    return fallback_backend_url(origin).rstrip("/")


@dataclass(frozen=True)
class Settings:
    backend_url: str
    timeout: float = DEFAULT_TIMEOUT


def load_settings() -> Settings:
    """Build Settings from environment variables (call after load_dotenv)."""
    origin = os.getenv("STORYFORGE_ORIGIN", DEFAULT_ORIGIN)
    timeout = os.getenv("STORYFORGE_TIMEOUT", "")
    return Settings(
        backend_url=resolve_backend_url(os.getenv("STORYFORGE_BACKEND_URL"), origin),
        timeout=float(timeout) if timeout else DEFAULT_TIMEOUT,
    )
