"""Provider profiles and the settings they are resolved from."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

_ENV_PREFIX = "SCRIBE_"


@dataclass(frozen=True)
class ProviderProfile:
    """One backend's connection triple."""

    endpoint_base: str = ""
    api_key: str = ""
    model: str = ""

    @property
    def is_configured(self) -> bool:
        return len(self.api_key.strip()) > 0


def _pick(preferred: str, fallback: str) -> str:
    return preferred if preferred.strip() else fallback


def resolve_provider(
    primary: ProviderProfile,
    secondary: ProviderProfile,
    use_secondary: bool,
) -> ProviderProfile:
    """Return ``primary`` as-is, or ``secondary`` with blank fields filled from ``primary``.

    Each field falls back independently, so a secondary profile that only sets
    a model still talks to the primary endpoint with the primary key.
    """
    if not use_secondary:
        return primary
    return ProviderProfile(
        endpoint_base=_pick(secondary.endpoint_base, primary.endpoint_base),
        api_key=_pick(secondary.api_key, primary.api_key),
        model=_pick(secondary.model, primary.model),
    )


@dataclass(frozen=True)
class ConfigSnapshot:
    """Immutable view of both profiles, captured once per call."""

    primary: ProviderProfile
    secondary: ProviderProfile

    def resolve(self, use_secondary: bool = False) -> ProviderProfile:
        return resolve_provider(self.primary, self.secondary, use_secondary)


class Settings(BaseModel):
    """Mutable provider settings as persisted by the editor.

    Field aliases match the editor's stored keys (``aiProvider``, ``aliveModel``...),
    so a saved settings dict validates directly.
    """

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    ai_provider: str = Field(default="", alias="aiProvider")
    ai_api_key: str = Field(default="", alias="aiApiKey")
    ai_model: str = Field(default="", alias="aiModel")
    alive_provider: str = Field(default="", alias="aliveProvider")
    alive_api_key: str = Field(default="", alias="aliveApiKey")
    alive_model: str = Field(default="", alias="aliveModel")

    @classmethod
    def from_env(cls, dotenv_path: str | Path | None = None) -> Settings:
        """Build settings from ``SCRIBE_*`` environment variables (and an optional .env)."""
        load_dotenv(dotenv_path)
        values = {}
        for name in cls.model_fields:
            env_value = os.getenv(f"{_ENV_PREFIX}{name.upper()}")
            if env_value is not None:
                values[name] = env_value.strip()
        return cls(**values)

    def snapshot(self) -> ConfigSnapshot:
        return ConfigSnapshot(
            primary=ProviderProfile(
                endpoint_base=self.ai_provider or "",
                api_key=self.ai_api_key or "",
                model=self.ai_model or "",
            ),
            secondary=ProviderProfile(
                endpoint_base=self.alive_provider or "",
                api_key=self.alive_api_key or "",
                model=self.alive_model or "",
            ),
        )
