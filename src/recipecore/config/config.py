"""
Configuration management for recipecore using Pydantic.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Setup Logging ---
log = logging.getLogger(__name__)

DEFAULT_SECTION_KEYWORDS: List[str] = [
    "ingredients",
    "instructions",
    "directions",
    "preparation",
    "method",
    "recipe",
    "steps",
    "cook",
    "bake",
]

# --- Nested Configuration Models ---


class StructuredDataConfig(BaseModel):
    """JSON-LD recipe extraction settings."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    min_completeness: int = Field(
        default=70, ge=0, le=100, description="Minimum share (0-100) of expected recipe fields present."
    )


class SectionBasedConfig(BaseModel):
    """Keyword/structure section scoring settings."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    min_confidence: int = Field(default=70, ge=0, le=100, description="Minimum section confidence (0-100).")
    keywords: List[str] = Field(default_factory=lambda: list(DEFAULT_SECTION_KEYWORDS))

    @field_validator("keywords")
    @classmethod
    def normalize_keywords(cls, v: List[str]) -> List[str]:
        """Lower-case, strip and de-duplicate keywords, keeping their order."""
        cleaned: List[str] = []
        for keyword in v:
            keyword = keyword.strip().lower()
            if keyword and keyword not in cleaned:
                cleaned.append(keyword)
        if not cleaned:
            raise ValueError("keywords must contain at least one non-blank keyword")
        return cleaned


class ContentFilterConfig(BaseModel):
    """Generic noise filtering settings."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    min_output_size: int = Field(default=100, ge=0, description="Minimum filtered output size in characters.")


class FallbackConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    min_safe_size: int = Field(
        default=300, ge=0, description="Smallest best-effort output accepted before returning the raw HTML."
    )


class CleanupMetricsConfig(BaseModel):
    """Names of the metrics emitted once per cleanup call."""

    model_config = ConfigDict(frozen=True)

    strategy_counter: str = "recipecore_cleanup_strategy_total"
    original_size: str = "recipecore_cleanup_original_size_chars"
    cleaned_size: str = "recipecore_cleanup_cleaned_size_chars"


class HtmlCleanupConfig(BaseModel):
    """Configuration for the HTML cleanup strategy cascade."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    structured_data: StructuredDataConfig = Field(default_factory=StructuredDataConfig)
    section_based: SectionBasedConfig = Field(default_factory=SectionBasedConfig)
    content_filter: ContentFilterConfig = Field(default_factory=ContentFilterConfig)
    fallback: FallbackConfig = Field(default_factory=FallbackConfig)
    metrics: CleanupMetricsConfig = Field(default_factory=CleanupMetricsConfig)


class MonitoringConfig(BaseModel):
    """Configuration for logging output."""

    model_config = ConfigDict(frozen=True)

    log_level: str = Field(default="INFO", description="Logging level (e.g., DEBUG, INFO, WARNING).")
    log_file: str | None = Field(default=None, description="Path to log file. If None, logs to console.")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("log_file", mode="before")
    @classmethod
    def create_parent_dir(cls, v: str | Path | None) -> str | None:
        if v is None:
            return None
        path = Path(v)
        path.parent.mkdir(parents=True, exist_ok=True)
        return str(path)


# --- Main Configuration Class ---


class Config(BaseSettings):
    project_name: str = "recipecore"
    version: str = "0.1.0"
    cleanup: HtmlCleanupConfig = Field(default_factory=HtmlCleanupConfig)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)

    model_config = SettingsConfigDict(
        env_prefix="RECIPECORE_", env_nested_delimiter="__", case_sensitive=False, frozen=True
    )

    @classmethod
    def from_yaml(cls, path: Path) -> Config:
        log.debug("Loading configuration from YAML file: %s", path)
        if not path.is_file():
            raise FileNotFoundError(f"Configuration file not found or is not a file: {path}")
        with open(path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f)
        if not yaml_data:
            log.warning("Configuration file is empty: %s. Using default settings.", path)
            return cls.model_validate({})
        return cls.model_validate(yaml_data)


def find_config_file() -> Path | None:
    current_dir = Path.cwd()
    paths_to_check = [
        current_dir / "config.yaml",
        current_dir / "config.yml",
    ]
    for path in paths_to_check:
        if path.exists():
            return path

    example_path = current_dir / "config.example.yaml"
    if example_path.exists():
        return example_path

    return None


def load_config(path: Path | None = None) -> Config:
    """
    Load configuration once at startup.

    An explicit ``path`` must exist and be valid. Without one, the working
    directory is searched; an invalid discovered file is logged and the
    defaults are used instead.
    """
    if path is not None:
        return Config.from_yaml(path)

    config_path = find_config_file()
    if config_path:
        try:
            log.info("Loading configuration from: %s", config_path)
            return Config.from_yaml(config_path)
        except (ValidationError, yaml.YAMLError) as e:
            log.error(
                "Failed to load or validate configuration from '%s': %s. "
                "Falling back to default settings. Please check your config file.",
                config_path,
                e,
                exc_info=log.getEffectiveLevel() <= logging.DEBUG,
            )
    else:
        log.info("No config file found. Using default settings.")

    return Config()
