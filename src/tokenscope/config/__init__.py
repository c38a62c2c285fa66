from .config import (
    SUB_SCORES,
    ArchitectureConfig,
    ColorConfig,
    Config,
    LayoutConfig,
    MonitoringConfig,
    PatternConfig,
    PerformanceBudget,
    PipelineConfig,
    ScoringConfig,
    SpacingConfig,
    TypographyConfig,
    settings,
)

__all__ = [
    "SUB_SCORES",
    "ArchitectureConfig",
    "ColorConfig",
    "Config",
    "LayoutConfig",
    "MonitoringConfig",
    "PatternConfig",
    "PerformanceBudget",
    "PipelineConfig",
    "ScoringConfig",
    "SpacingConfig",
    "TypographyConfig",
    "settings",
]
