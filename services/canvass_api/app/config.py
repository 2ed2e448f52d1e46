from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from packages.address_pipeline.geocode import DEFAULT_NOMINATIM_URL
from packages.address_pipeline.overpass import DEFAULT_OVERPASS_ENDPOINTS


def _parse_env_file(path: Path) -> dict[str, str]:
    values: dict[str, str] = {}
    if not path.exists() or not path.is_file():
        return values
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip("'").strip('"')
        if key:
            values[key] = value
    return values


def bootstrap_env(root: Optional[Path] = None) -> None:
    """Load env vars from project-level files without overriding the process env."""
    root = root or Path(__file__).resolve().parents[3]
    for env_path in (root / ".env.local", root / ".env"):
        for key, value in _parse_env_file(env_path).items():
            os.environ.setdefault(key, value)


def _env_flag(name: str, default: str) -> bool:
    return str(os.getenv(name, default)).strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    app_name: str = "canvass"
    app_url: str = ""
    app_env: str = "production"
    database_url: str = "sqlite:///./canvass.db"
    nominatim_url: str = DEFAULT_NOMINATIM_URL
    overpass_endpoints: tuple[str, ...] = field(default=DEFAULT_OVERPASS_ENDPOINTS)
    geocode_timeout_sec: float = 8
    overpass_timeout_sec: float = 20
    geocoding_enabled: bool = True
    log_level: str = "INFO"

    def user_agent(self) -> str:
        # The public OSM services reject anonymous clients.
        if self.app_url:
            return f"{self.app_name} ({self.app_url})"
        return self.app_name

    def is_local(self) -> bool:
        return self.app_env == "local"


def load_settings() -> Settings:
    bootstrap_env()
    endpoints = tuple(
        item.strip() for item in str(os.getenv("OVERPASS_ENDPOINTS") or "").split(",") if item.strip()
    )
    return Settings(
        app_name=os.getenv("APP_NAME", "canvass"),
        app_url=os.getenv("APP_URL", ""),
        app_env=os.getenv("APP_ENV", "production"),
        database_url=str(os.getenv("DATABASE_URL") or "sqlite:///./canvass.db").strip(),
        nominatim_url=os.getenv("NOMINATIM_URL", DEFAULT_NOMINATIM_URL),
        overpass_endpoints=endpoints or DEFAULT_OVERPASS_ENDPOINTS,
        geocode_timeout_sec=float(os.getenv("GEOCODE_TIMEOUT_SEC", "8")),
        overpass_timeout_sec=float(os.getenv("OVERPASS_TIMEOUT_SEC", "20")),
        geocoding_enabled=_env_flag("GEOCODING_ENABLED", "1"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
