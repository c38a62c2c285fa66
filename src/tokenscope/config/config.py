"""
Configuration management for tokenscope using Pydantic.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, ClassVar, Dict, List, Tuple, cast

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Setup Logging ---
log = logging.getLogger(__name__)

SUB_SCORES: Tuple[str, ...] = (
    "color_consistency",
    "typography_hierarchy",
    "spacing_regularity",
    "accessibility_compliance",
    "pattern_consistency",
    "performance_optimization",
    "modernity_score",
)

# --- Nested Configuration Models ---


class ColorConfig(BaseModel):
    delta_e_threshold: float = Field(default=6.0, gt=0, description="CIE76 distance below which colors merge.")
    neutral_chroma_max: float = Field(default=10.0, ge=0, description="Lab chroma under which a color is neutral.")
    min_cluster_size: int = Field(default=2, ge=1, description="Samples needed for a cluster to count as recognized.")
    large_text_px: float = 24.0
    large_bold_text_px: float = 18.66
    contrast_normal: float = 4.5
    contrast_large: float = 3.0
    # HSL hue ranges (degrees); red wraps around 0.
    semantic_hues: Dict[str, List[Tuple[float, float]]] = Field(
        default_factory=lambda: {
            "error": [(345.0, 360.0), (0.0, 15.0)],
            "warning": [(30.0, 55.0)],
            "success": [(90.0, 160.0)],
            "info": [(190.0, 240.0)],
        }
    )
    semantic_cues: Dict[str, List[str]] = Field(
        default_factory=lambda: {
            "error": ["error", "danger", "alert", "invalid", "destructive"],
            "warning": ["warning", "warn", "caution"],
            "success": ["success", "valid", "confirm", "positive"],
            "info": ["info", "notice", "status", "help"],
        }
    )


class TypographyConfig(BaseModel):
    root_font_size_px: float = 16.0
    fit_tolerance: float = Field(default=0.05, gt=0, description="Max RMS residual of log sizes for a modular fit.")
    max_font_families: int = 3
    named_ratios: List[float] = Field(default_factory=lambda: [1.125, 1.2, 1.25, 1.333, 1.414, 1.5, 1.618])


class SpacingConfig(BaseModel):
    candidate_units: List[int] = Field(default_factory=lambda: [4, 8, 12, 16])
    tolerance: float = Field(default=0.1, ge=0, lt=0.5, description="Fraction of the base unit a value may deviate.")

    @field_validator("candidate_units")
    @classmethod
    def positive_units(cls, v: List[int]) -> List[int]:
        if not v or any(unit <= 0 for unit in v):
            raise ValueError("candidate_units must be a non-empty list of positive integers")
        return v


class LayoutConfig(BaseModel):
    gutter_range: Tuple[float, float] = (8.0, 32.0)
    container_range: Tuple[float, float] = (600.0, 1600.0)
    breakpoints: Dict[str, int] = Field(
        default_factory=lambda: {"sm": 640, "md": 768, "lg": 1024, "xl": 1280, "2xl": 1536}
    )
    viewports: Dict[str, int] = Field(
        default_factory=lambda: {"mobile": 375, "tablet": 768, "desktop": 1440, "wide": 1920}
    )


class PatternConfig(BaseModel):
    min_type_score: float = Field(default=0.4, ge=0, le=1)
    min_confidence: float = Field(default=0.7, ge=0, le=1)
    max_patterns_per_type: int = Field(default=10, ge=1)
    min_variant_instances: int = Field(default=2, ge=1)


class PerformanceBudget(BaseModel):
    fcp: float = 1800.0
    lcp: float = 2500.0
    tti: float = 3800.0
    tbt: float = 300.0
    cls: float = 0.1
    speed_index: float = 3400.0


class ScoringConfig(BaseModel):
    weights: Dict[str, float] = Field(default_factory=lambda: {name: 1.0 for name in SUB_SCORES})
    severity_weights: Dict[str, float] = Field(
        default_factory=lambda: {"critical": 40.0, "serious": 20.0, "moderate": 10.0, "minor": 5.0}
    )
    compliance_weights: Dict[str, float] = Field(
        default_factory=lambda: {"pass": 1.0, "warning": 1.5, "fail": 2.0}
    )
    warning_factor: float = 1.2
    acceptable_threshold: float = Field(default=0.7, ge=0, le=1)
    budget: PerformanceBudget = Field(default_factory=PerformanceBudget)

    @field_validator("weights")
    @classmethod
    def validate_weights(cls, v: Dict[str, float]) -> Dict[str, float]:
        unknown = set(v) - set(SUB_SCORES)
        if unknown:
            raise ValueError(f"Unknown sub-score weights: {sorted(unknown)}")
        if any(weight < 0 for weight in v.values()):
            raise ValueError("Sub-score weights must be non-negative")
        if v and not any(weight > 0 for weight in v.values()):
            raise ValueError("At least one sub-score weight must be positive")
        return v


class ArchitectureConfig(BaseModel):
    top_keywords_per_page: int = 8
    min_shared_keywords: int = 2
    max_site_keywords: int = 25
    max_topics: int = 10
    max_opportunities_per_cluster: int = 5


class PipelineConfig(BaseModel):
    max_concurrency: int = Field(default=8, ge=1)
    deadline_seconds: float | None = None
    max_recommendations: int = Field(default=10, ge=0)


class MonitoringConfig(BaseModel):
    """Configuration for logging and metrics."""

    enabled: bool = True
    log_level: str = Field(default="INFO", description="Logging level (e.g., DEBUG, INFO, WARNING).")
    log_file: str | None = Field(default=None, description="Path to log file. If None, logs to console.")

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
    project_name: str = "tokenscope"
    version: str = "0.1.0"
    legacy_schema_version: str = "legacy-v1"
    color: ColorConfig = Field(default_factory=ColorConfig)
    typography: TypographyConfig = Field(default_factory=TypographyConfig)
    spacing: SpacingConfig = Field(default_factory=SpacingConfig)
    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    patterns: PatternConfig = Field(default_factory=PatternConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    architecture: ArchitectureConfig = Field(default_factory=ArchitectureConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)

    model_config = SettingsConfigDict(env_prefix="TOKENSCOPE_", env_nested_delimiter="__", case_sensitive=False)

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
    for path in (current_dir / "tokenscope.yaml", current_dir / "tokenscope.yml"):
        if path.exists():
            return path
    return None


# --- Lazy Configuration Loader ---


class LazyConfig:
    """
    A proxy for the Config object that delays its loading and validation
    until an attribute is first accessed.
    """

    _config: ClassVar[Config | None] = None
    _lock: ClassVar[threading.Lock] = threading.Lock()

    def __getattr__(self, name: str) -> Any:
        if self.__class__._config is None:
            with self.__class__._lock:
                if self.__class__._config is None:
                    self.__class__._config = self._load_config_with_fallback()
        return getattr(self.__class__._config, name)

    def _load_config_with_fallback(self) -> Config:
        """Load configuration from file or fall back to defaults."""
        config_path = find_config_file()
        if config_path:
            try:
                log.info("Lazy loading configuration from: %s", config_path)
                return Config.from_yaml(config_path)
            except (ValidationError, FileNotFoundError, yaml.YAMLError) as e:
                log.error(
                    "Failed to load or validate configuration from '%s': %s. Falling back to default settings.",
                    config_path,
                    e,
                )
        else:
            log.info("No config file found. Using default settings for lazy load.")

        try:
            return Config()
        except ValidationError as e:
            log.critical("FATAL: Default configuration is invalid: %s", e, exc_info=True)
            raise RuntimeError(f"Default configuration is invalid, cannot start: {e}") from e


# --- Global Settings Instance ---
settings: "Config" = cast("Config", LazyConfig())
