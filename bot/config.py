from __future__ import annotations

from dataclasses import dataclass
import logging
import os

from dotenv import load_dotenv

log = logging.getLogger(__name__)

DEFAULT_ROLE_NAME = "voice"
DEFAULT_SYNC_SECONDS = 60


class MissingTokenError(RuntimeError):
    pass


def _normalize_env(v: str | None) -> str:
    """
    Returns 'dev' or 'prod' only.
    Defaults to 'prod' if unset/unknown.
    """
    s = (v or "").strip().lower()
    if s in ("dev", "development", "test", "testing"):
        return "dev"
    if s in ("prod", "production", "main", "live"):
        return "prod"
    return "prod"


def _env_bool(key: str) -> bool | None:
    raw = (os.getenv(key) or "").strip().lower()
    if not raw:
        return None
    return raw in ("1", "true", "yes", "on")


def _env_positive_int(key: str, default: int) -> int:
    raw = (os.getenv(key) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        log.warning("ignoring %s=%r (not an integer), using %d", key, raw, default)
        return default
    if value < 1:
        log.warning("ignoring %s=%d (must be >= 1), using %d", key, value, default)
        return default
    return value


def _env_log_level(key: str, default: str) -> str:
    raw = (os.getenv(key) or "").strip().upper()
    if not raw:
        return default
    # getLevelName maps known names to ints, anything else to "Level <x>"
    if not isinstance(logging.getLevelName(raw), int):
        log.warning("ignoring %s=%r (unknown log level), using %s", key, raw, default)
        return default
    return raw


@dataclass(frozen=True)
class Settings:
    token: str
    env: str = "prod"  # dev or prod

    # ---------------- Voice role ----------------
    role_name: str = DEFAULT_ROLE_NAME           # exact, case-sensitive
    sync_interval_seconds: int = DEFAULT_SYNC_SECONDS

    # ---------------- Logging ----------------
    log_json: bool = True                        # JSON records in prod, text in dev
    log_level: str = "INFO"


def load_settings() -> Settings:
    # loads .env locally, but will NOT override real env vars
    load_dotenv(override=False)

    env = _normalize_env(os.getenv("VOICEROLE_ENV") or os.getenv("ENV") or os.getenv("APP_ENV"))

    # ---------- Token selection ----------
    # Priority:
    # 1) DISCORD_TOKEN_DEV / DISCORD_TOKEN_PROD depending on env
    # 2) legacy DISCORD_TOKEN / TOKEN / DISCORD_BOT_TOKEN
    if env == "dev":
        token = os.getenv("DISCORD_TOKEN_DEV", "").strip()
    else:
        token = os.getenv("DISCORD_TOKEN_PROD", "").strip()

    if not token:
        token = (
            os.getenv("DISCORD_TOKEN", "").strip()
            or os.getenv("TOKEN", "").strip()
            or os.getenv("DISCORD_BOT_TOKEN", "").strip()
        )

    if not token:
        raise MissingTokenError(
            "Missing bot token.\n"
            "Set VOICEROLE_ENV=dev and DISCORD_TOKEN_DEV=... for dev, OR\n"
            "set VOICEROLE_ENV=prod and DISCORD_TOKEN_PROD=... for prod.\n"
            "Fallback supported: DISCORD_TOKEN / TOKEN / DISCORD_BOT_TOKEN."
        )

    role_name = (os.getenv("VOICEROLE_ROLE_NAME") or "").strip() or DEFAULT_ROLE_NAME
    interval = _env_positive_int("VOICEROLE_SYNC_SECONDS", DEFAULT_SYNC_SECONDS)

    log_json = _env_bool("VOICEROLE_LOG_JSON")
    if log_json is None:
        log_json = env == "prod"

    log_level = _env_log_level("VOICEROLE_LOG_LEVEL", "INFO")

    return Settings(
        token=token,
        env=env,
        role_name=role_name,
        sync_interval_seconds=interval,
        log_json=log_json,
        log_level=log_level,
    )
