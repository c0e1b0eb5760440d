"""Application configuration loaded from config.yaml."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

DEFAULT_SITE_URL = "http://localhost:3000"


@dataclass(frozen=True)
class GatewayConfig:
    base_url: str = "https://openrouter.ai/api/v1"
    app_title: str = "CV Tailor App"
    site_url: str = ""
    default_model: str = "openai/gpt-4.1-mini"
    timeout: float = 60.0

    @property
    def referer(self) -> str:
        """HTTP-Referer sent to the gateway; env var wins over the file."""
        return os.environ.get("CV_TAILOR_SITE_URL") or self.site_url or DEFAULT_SITE_URL

    @property
    def default_headers(self) -> dict[str, str]:
        return {"HTTP-Referer": self.referer, "X-Title": self.app_title}


@dataclass(frozen=True)
class GenerationConfig:
    structured_temperature: float = 0.3
    structured_max_tokens: int = 8000
    prose_temperature: float = 0.7
    prose_max_tokens: int = 2000


@dataclass(frozen=True)
class RetryConfig:
    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 4.0


@dataclass(frozen=True)
class StorageConfig:
    db_path: str = "~/.cv-tailor/library.db"

    @property
    def resolved_db_path(self) -> Path:
        return Path(self.db_path).expanduser()


@dataclass(frozen=True)
class AppConfig:
    gateway: GatewayConfig = field(default_factory=GatewayConfig)
    generation: GenerationConfig = field(default_factory=GenerationConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load config from YAML file, falling back to defaults."""
    if path is None:
        candidates = [
            Path.cwd() / "config.yaml",
            Path(__file__).resolve().parent.parent.parent / "config.yaml",
        ]
        for c in candidates:
            if c.exists():
                path = c
                break

    raw: dict = {}
    if path is not None:
        p = Path(path)
        if p.exists():
            raw = yaml.safe_load(p.read_text()) or {}

    return AppConfig(
        gateway=GatewayConfig(**raw.get("gateway", {})),
        generation=GenerationConfig(**raw.get("generation", {})),
        retry=RetryConfig(**raw.get("retry", {})),
        storage=StorageConfig(**raw.get("storage", {})),
    )


def resolve_api_key(api_key: str | None = None) -> str:
    """Return the explicit key, or the one found in the environment."""
    if api_key:
        return api_key
    return os.environ.get("OPENROUTER_API_KEY", "")
