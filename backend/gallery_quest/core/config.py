from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from gallery_quest.core.logging import get_logger

log = get_logger(__name__)

DEFAULT_CACHE_TTL_SECONDS = 15 * 60
CACHE_BACKENDS: tuple[str, ...] = ("db", "memory")


@dataclass(frozen=True, slots=True)
class Settings:
    app_env: str
    database_url: str
    secret_key: str
    editor_username: str
    editor_password: str
    media_base_url: str
    cache_backend: str
    cache_ttl_s: int
    auto_create_schema: bool

    @property
    def is_prod(self) -> bool:
        return self.app_env in {"prod", "production"}


def _get(env: Mapping[str, str], key: str, default: str) -> str:
    value = env.get(key, default)
    return value.strip()


def _get_bool(env: Mapping[str, str], key: str, default: bool) -> bool:
    raw = _get(env, key, "1" if default else "0").lower()
    if raw in {"1", "true", "yes", "y", "on"}:
        return True
    if raw in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _get_int(env: Mapping[str, str], key: str, default: int, *, min_v: int, max_v: int) -> int:
    try:
        value = int(_get(env, key, str(default)) or str(default))
    except Exception:
        log.warning("config_invalid_int key=%s default=%s", key, default)
        value = int(default)
    return max(min_v, min(int(value), max_v))


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    env = env if env is not None else os.environ

    app_env = _get(env, "APP_ENV", "dev").lower()
    is_prod = app_env in {"prod", "production"}

    database_url = _get(env, "DATABASE_URL", "sqlite+aiosqlite:///./data/gallery_quest.db")
    secret_key = _get(env, "SECRET_KEY", "" if is_prod else "dev-secret-key")
    editor_username = _get(env, "EDITOR_USERNAME", "editor")
    editor_password = _get(env, "EDITOR_PASSWORD", "" if is_prod else "editor")

    media_base_url = _get(env, "MEDIA_BASE_URL", "/uploads").rstrip("/")

    cache_backend = _get(env, "CACHE_BACKEND", "db").lower()
    if cache_backend not in CACHE_BACKENDS:
        raise ValueError(f"Unsupported CACHE_BACKEND: {cache_backend}")
    cache_ttl_s = _get_int(env, "CACHE_TTL_SECONDS", DEFAULT_CACHE_TTL_SECONDS, min_v=1, max_v=24 * 60 * 60)

    auto_create_schema = _get_bool(env, "AUTO_CREATE_SCHEMA", not is_prod)

    settings = Settings(
        app_env=app_env,
        database_url=database_url,
        secret_key=secret_key,
        editor_username=editor_username,
        editor_password=editor_password,
        media_base_url=media_base_url,
        cache_backend=cache_backend,
        cache_ttl_s=cache_ttl_s,
        auto_create_schema=auto_create_schema,
    )

    if settings.is_prod:
        missing: list[str] = []
        if not settings.secret_key:
            missing.append("SECRET_KEY")
        if not settings.editor_password:
            missing.append("EDITOR_PASSWORD")
        if missing:
            raise ValueError(f"Missing required env vars for prod: {', '.join(missing)}")

    return settings
