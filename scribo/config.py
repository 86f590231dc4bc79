from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AWSSettings(BaseSettings):
    """Configuration for the Bedrock integration."""

    region_name: str | None = None
    profile_name: str | None = None
    use_bedrock: bool = True

    model_config = SettingsConfigDict(env_prefix="SCRIBO_AWS_", env_file=None)


class AnalyzerSettings(BaseSettings):
    """Controls for the analyzer service and the client that calls it."""

    model_id: str = "anthropic.claude-3-5-sonnet-20240620-v1:0"
    temperature: float = Field(default=0.3, ge=0.0, le=1.0)
    max_tokens: int = Field(default=4096, ge=1)
    base_url: str = "http://localhost:8890"
    request_timeout_seconds: float = Field(default=120.0, gt=0)

    model_config = SettingsConfigDict(env_prefix="SCRIBO_ANALYZER_", env_file=None)


class Settings(BaseSettings):
    """Application configuration."""

    state_file: Path = Path.home() / ".scribo" / "state.json"
    aws: AWSSettings = Field(default_factory=AWSSettings)
    analyzer: AnalyzerSettings = Field(default_factory=AnalyzerSettings)

    model_config = SettingsConfigDict(env_prefix="SCRIBO_", env_file=None)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
