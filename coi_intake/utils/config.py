"""Configuration management for the COI intake system.

Loads a YAML file into validated pydantic sections. Every setting has a
default, so a missing file yields a usable configuration.
"""

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, model_validator

logger = logging.getLogger(__name__)


class ExtractionConfig(BaseModel):
    """Configuration for certificate field extraction."""

    excerpt_length: int = 5000
    scan_window: int = 1000
    producer_window: int = 500
    insurer_max_length: int = 100
    min_term_days: int = 350
    max_term_days: int = 380
    synthesized_term_days: int = 365


class MatchingConfig(BaseModel):
    """Thresholds for resolving an insured name to an employee.

    ``min_confidence`` gates suggestions while ``high_confidence`` gates
    automatic selection; the two are tuned independently. Scores at or
    above ``fuzzy_threshold`` are labelled FUZZY, lower ones PARTIAL.
    """

    min_confidence: int = Field(default=75, ge=0, le=100)
    high_confidence: int = Field(default=80, ge=0, le=100)
    fuzzy_threshold: int = Field(default=80, ge=0, le=100)
    candidate_floor: int = Field(default=40, ge=0, le=100)
    max_suggestions: int = Field(default=5, ge=1)
    min_name_length: int = 3

    @model_validator(mode="after")
    def _check_floor(self) -> "MatchingConfig":
        if self.candidate_floor > self.min_confidence:
            raise ValueError("candidate_floor must not exceed min_confidence")
        return self


class TablesConfig(BaseModel):
    """Location of the nickname and exclusion tables.

    ``None`` selects the tables shipped with the package.
    """

    name_tables_path: str | None = None


class ClassificationConfig(BaseModel):
    """Configuration for routing documents to a parser."""

    templates_path: str = "configs/templates.yaml"


class ServerConfig(BaseModel):
    """Bind address of the API server."""

    host: str = "127.0.0.1"
    port: int = Field(default=8000, ge=1, le=65535)


class AppConfig(BaseModel):
    """Top-level application configuration."""

    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    tables: TablesConfig = Field(default_factory=TablesConfig)
    classification: ClassificationConfig = Field(default_factory=ClassificationConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    log_level: str = "INFO"


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.
            Defaults to configs/config.yaml.

    Returns:
        Validated application configuration.
    """
    if path is None:
        path = Path("configs/config.yaml")

    if path.exists():
        logger.info("Loading configuration from %s", path)
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
        return AppConfig(**raw)

    logger.info("No config file found at %s, using defaults", path)
    return AppConfig()
