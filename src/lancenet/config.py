"""Lightweight configuration for the lancenet tools."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from lancenet.domain.rules_config import C3Rules, RulesConfig


class Settings(BaseSettings):
    """Minimal application settings."""

    model_config = SettingsConfigDict(
        env_prefix="LANCENET_", env_file=".env", env_file_encoding="utf-8"
    )

    data_dir: Path = Field(default=Path("forces"), description="Where force snapshots live")
    log_level: str = Field(default="INFO", description="Root log level for the API process")
    enforce_network_limits: bool = Field(
        default=False,
        description="Reject connections that would exceed the per-class network size",
    )
    detect_hierarchy_cycles: bool = Field(
        default=True,
        description="Reject master links that would close a loop longer than two units",
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://127.0.0.1:5173"],
        description="Origins allowed to call the HTTP API",
    )

    def rules(self) -> RulesConfig:
        """Rule configuration reflecting the topology switches above."""

        return RulesConfig(
            c3=C3Rules(
                enforce_network_limits=self.enforce_network_limits,
                detect_hierarchy_cycles=self.detect_hierarchy_cycles,
            )
        )


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""

    settings = Settings()
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    return settings
