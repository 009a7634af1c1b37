"""
inventory/config.py
===================

Centralised settings helper.

Lookup order
------------
1. Environment variables (including those loaded from an .env file).
2. Google Secret Manager   (only if GOOGLE_CLOUD_PROJECT is set).
3. Optional default passed to get_setting().

When deployed, the secret is mounted as `/secrets/.env`; in local dev we look
for a project-root `.env`.  Either way, `python-dotenv` loads the file once
at import time and exposes the keys via `os.environ`.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from google.cloud import secretmanager  # type: ignore
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_PORT = 3000


# ────────────────────────────────
# 🔐  Load .env (mounted or local)
# ────────────────────────────────
for _env in (Path("/secrets/.env"), Path(__file__).resolve().parent.parent / ".env"):
    if _env.exists():
        load_dotenv(_env, override=False)
        break


# ────────────────────────────────
# 🔑  Secret Manager client (lazy)
# ────────────────────────────────
@lru_cache(maxsize=None)
def _sm_client() -> secretmanager.SecretManagerServiceClient:
    return secretmanager.SecretManagerServiceClient()


# ────────────────────────────────
# 🎛️  Public helpers
# ────────────────────────────────
def get_setting(
    name: str,
    *,
    secret_id: str | None = None,
    version: str = "latest",
    default: str | None = None,
) -> str:
    """
    Fetch a configuration value.

    Parameters
    ----------
    name : str
        Environment variable to look for.
    secret_id : str, optional
        Override the Secret Manager name (defaults to name in kebab-case).
    version : str, default "latest"
        Secret Manager version to fetch.
    default : str, optional
        Fallback value if nothing else is found.

    Returns
    -------
    str
        The requested setting.

    Raises
    ------
    RuntimeError
        If the setting is not found and no default is provided.
    """
    if val := os.getenv(name):
        return val

    project_id = os.getenv("GOOGLE_CLOUD_PROJECT") or os.getenv("GCP_PROJECT")
    if project_id:
        sid = secret_id or name.lower().replace("_", "-")
        path = f"projects/{project_id}/secrets/{sid}/versions/{version}"
        try:
            resp = _sm_client().access_secret_version(name=path)
            return resp.payload.data.decode("utf-8")
        except Exception as exc:
            logger.debug("Secret %s not available from Secret Manager: %s", sid, exc)

    if default is not None:
        return default

    raise RuntimeError(f"Missing required setting: {name}")


def get_bool_setting(name: str, *, default: bool = False) -> bool:
    """Read a true/false flag ("1", "true", "yes" count as true)."""
    raw = get_setting(name, default="true" if default else "false")
    return raw.strip().lower() in ("1", "true", "yes")


@dataclass(frozen=True)
class Settings:
    """Options recognised by the application."""

    database_url: str
    bucket_name: str
    credentials: str | None = None
    project: str | None = None
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    debug: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Collect settings; raises RuntimeError when a required one is missing."""
        return cls(
            database_url=get_setting("DATABASE_URL"),
            bucket_name=get_setting("BUCKET_NAME"),
            credentials=os.getenv("GOOGLE_APPLICATION_CREDENTIALS") or None,
            project=os.getenv("GOOGLE_CLOUD_PROJECT") or os.getenv("GCP_PROJECT") or None,
            host=get_setting("HOST", default="0.0.0.0"),
            port=int(get_setting("PORT", default=str(DEFAULT_PORT))),
            debug=get_bool_setting("DEBUG"),
            log_level=get_setting("LOG_LEVEL", default="INFO").upper(),
        )
