"""
Process-wide settings, built once at startup.

Values come from the environment (and a local .env file, if present). The
resulting Settings object is passed explicitly to the pipeline and fetcher;
nothing below main.py reads os.environ directly.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

_ROOT = Path(__file__).resolve().parent.parent  # repo root
_ENV_PATH = _ROOT / ".env"


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    port: int = 4000
    frontend_url: str = "*"
    fetch_timeout_seconds: float = 30.0
    fallback_timeout_seconds: float = 15.0
    probe_timeout_seconds: float = 10.0
    decode_timeout_seconds: float = 60.0
    max_redirects: int = 10
    max_body_bytes: int = 2 * 1024 * 1024
    log_level: str = "INFO"

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.frontend_url.split(",") if origin.strip()] or ["*"]


# env var → Settings field
_ENV_FIELDS = {
    "PORT": "port",
    "FRONTEND_URL": "frontend_url",
    "FETCH_TIMEOUT_SECONDS": "fetch_timeout_seconds",
    "FALLBACK_TIMEOUT_SECONDS": "fallback_timeout_seconds",
    "PROBE_TIMEOUT_SECONDS": "probe_timeout_seconds",
    "DECODE_TIMEOUT_SECONDS": "decode_timeout_seconds",
    "MAX_REDIRECTS": "max_redirects",
    "MAX_BODY_BYTES": "max_body_bytes",
    "LOG_LEVEL": "log_level",
}


def load_settings(env: dict[str, str] | None = None) -> Settings:
    """Build Settings from env vars, falling back to defaults for unset keys.

    Pydantic handles the str → int/float coercion, so a malformed value
    (e.g. PORT=abc) fails loudly at startup instead of deep in a request.
    """
    if env is None:
        if _ENV_PATH.exists():
            load_dotenv(_ENV_PATH)
        env = dict(os.environ)

    values = {
        field: env[name]
        for name, field in _ENV_FIELDS.items()
        if env.get(name, "").strip()
    }
    return Settings(**values)
