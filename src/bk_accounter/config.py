"""Configuration management for bk-accounter."""

from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .buildkite.client import GRAPHQL_ENDPOINT
from .errors import ConfigError


class AccounterSettings(BaseSettings):
    """Run configuration, read from the environment and an optional YAML file."""

    model_config = SettingsConfigDict(
        env_prefix="BUILDKITE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    token: str = Field(default="", description="Buildkite GraphQL API token")
    org_slugs: list[str] = Field(default_factory=list, description="Organization slugs to fetch")
    graphql_endpoint: str = Field(default=GRAPHQL_ENDPOINT, description="GraphQL endpoint URL")
    timeout: float = Field(default=30.0, description="Request timeout in seconds")
    cache: bool = Field(default=False, description="Serve org members from a disk cache")
    cache_dir: Path = Field(default=Path(".cache"), description="Disk cache directory")
    dedupe: list[str] = Field(default_factory=list, description="Dedupe keys (email, name)")
    output: str = Field(default="json", description="Output mode (count, json, csv)")
    email: str | None = Field(default=None, description="Only report on this email")
    csv_file: Path = Field(default=Path("output.csv"), description="CSV output path")
    debug: bool = Field(default=False, description="Debug logging and request dumps")

    @field_validator("dedupe")
    @classmethod
    def validate_dedupe(cls, v: list[str]) -> list[str]:
        """Only ``email`` and ``name`` are valid dedupe keys."""
        invalid = [key for key in v if key not in ("email", "name")]
        if invalid:
            raise ValueError(f"invalid dedupe key(s): {', '.join(invalid)}")
        return v

    @field_validator("output")
    @classmethod
    def validate_output(cls, v: str) -> str:
        if v not in ("count", "json", "csv"):
            raise ValueError(f"invalid output mode: {v}")
        return v

    @classmethod
    def from_yaml(cls, path: Path) -> "AccounterSettings":
        """Load settings from a YAML file, falling back to env/defaults if absent."""
        if not path.exists():
            return cls()

        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ConfigError(f"{path} must contain a mapping")

        return cls(**data)

    def merged(self, **overrides: Any) -> "AccounterSettings":
        """Return a copy with every non-None override applied and re-validated."""
        data = self.model_dump()
        data.update({k: v for k, v in overrides.items() if v is not None})
        try:
            return type(self).model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"invalid configuration: {e}") from e


def load_settings(config_path: Path | None = None) -> AccounterSettings:
    """Load settings from environment and an optional YAML file."""
    try:
        if config_path:
            return AccounterSettings.from_yaml(config_path)
        return AccounterSettings()
    except (ValidationError, yaml.YAMLError) as e:
        raise ConfigError(f"invalid configuration: {e}") from e
