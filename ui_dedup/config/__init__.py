"""Configuration for the deduplication analyzer."""

from .loader import (
    CONFIG_FILENAME,
    AnalysisConfig,
    DedupConfig,
    LoggingConfig,
    load_config,
    save_config,
)
from .thresholds import DEFAULT_THRESHOLDS, SimilarityThresholds, ensure_thresholds

__all__ = [
    "CONFIG_FILENAME",
    "AnalysisConfig",
    "DedupConfig",
    "LoggingConfig",
    "load_config",
    "save_config",
    "DEFAULT_THRESHOLDS",
    "SimilarityThresholds",
    "ensure_thresholds",
]
