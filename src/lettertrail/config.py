"""Configuration management using pydantic-settings."""

import tomllib
from enum import Enum
from pathlib import Path
from typing import Self
from urllib.parse import urlparse

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATA_DIR = "~/.local/share/lettertrail"
DEFAULT_PDF_SCALE = 1.5
STORE_FILENAME = "documents.json"
CONFIG_PATH = Path("~/.config/lettertrail/config.toml").expanduser()


class LLMProvider(str, Enum):
    """Available extraction providers."""

    OLLAMA = "ollama"
    CLAUDE_API = "claude-api"


class LLMConfig(BaseSettings):
    """Extraction provider configuration."""

    provider: LLMProvider = LLMProvider.OLLAMA
    model: str = "gemma3:4b"
    ollama_url: str = "http://localhost:11434"
    timeout: float | None = None  # No limit: a hung call stays analyzing

    @field_validator("ollama_url")
    @classmethod
    def check_scheme(cls, v: str) -> str:
        scheme = urlparse(v).scheme
        if scheme not in ("http", "https"):
            raise ValueError(f"Invalid ollama_url scheme: {scheme}")
        return v


class PathsConfig(BaseSettings):
    data_dir: Path = Path(DEFAULT_DATA_DIR)

    @field_validator("data_dir", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path) -> Path:
        return Path(v).expanduser()

    @property
    def store(self) -> Path:
        return self.data_dir / STORE_FILENAME


class IntakeConfig(BaseSettings):
    pdf_scale: float = DEFAULT_PDF_SCALE

    @field_validator("pdf_scale")
    @classmethod
    def positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("pdf_scale must be positive")
        return v


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="LETTERTRAIL_", env_nested_delimiter="__")

    paths: PathsConfig = PathsConfig()
    llm: LLMConfig = LLMConfig()
    intake: IntakeConfig = IntakeConfig()

    @model_validator(mode="after")
    def ensure_dirs(self) -> Self:
        self.paths.data_dir.mkdir(parents=True, exist_ok=True)
        return self


def load_settings(config_path: Path | None = None) -> Settings:
    """Load settings from TOML file, falling back to defaults."""
    path = config_path or CONFIG_PATH

    if path.exists():
        with open(path, "rb") as f:
            data = tomllib.load(f)

        paths = PathsConfig(**data.get("paths", {}))
        llm = LLMConfig(**data.get("llm", {}))
        intake = IntakeConfig(**data.get("intake", {}))
        return Settings(paths=paths, llm=llm, intake=intake)

    return Settings()
