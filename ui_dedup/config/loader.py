"""Deduplication configuration loader.

Loads ``ui-dedup.config.json`` files and environment overrides. Only
the CLI layer reads files or the environment; the analysis core takes
the resulting values as plain arguments.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ..dedup_logging import get_logger
from ..errors import ConfigFileError
from .thresholds import SimilarityThresholds

logger = get_logger()

# Default configuration file name
CONFIG_FILENAME = "ui-dedup.config.json"

# Environment variable -> threshold field
ENV_THRESHOLD_OVERRIDES = {
    "UI_DEDUP_MIN_SIMILARITY": "min_similarity_score",
    "UI_DEDUP_MIN_COMPLEXITY": "min_structure_complexity",
    "UI_DEDUP_MIN_RATIO": "min_complexity_ratio",
    "UI_DEDUP_NAME_DISTANCE": "name_distance_threshold",
}


@dataclass
class AnalysisConfig:
    """Execution settings for the comparison pass."""

    max_workers: int = 1  # 0 = one worker per CPU
    yield_every: int = 100  # comparisons between cooperative yields
    chunk_size: int = 500  # pairs per worker task
    prefilter: bool = False  # apply naming/path pre-filter before comparing

    def resolved_workers(self) -> int:
        """Effective worker count."""
        if self.max_workers <= 0:
            return os.cpu_count() or 1
        return self.max_workers

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "maxWorkers": self.max_workers,
            "yieldEvery": self.yield_every,
            "chunkSize": self.chunk_size,
            "prefilter": self.prefilter,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AnalysisConfig":
        """Create from dictionary."""
        return cls(
            max_workers=int(data.get("maxWorkers", 1)),
            yield_every=max(1, int(data.get("yieldEvery", 100))),
            chunk_size=max(1, int(data.get("chunkSize", 500))),
            prefilter=bool(data.get("prefilter", False)),
        )


@dataclass
class LoggingConfig:
    """Logging settings applied by the CLI."""

    level: str = "INFO"
    log_file: str | None = None
    log_format: str = "text"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "level": self.level,
            "logFile": self.log_file,
            "logFormat": self.log_format,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LoggingConfig":
        """Create from dictionary."""
        return cls(
            level=str(data.get("level", "INFO")).upper(),
            log_file=data.get("logFile"),
            log_format=data.get("logFormat", "text"),
        )


@dataclass
class DedupConfig:
    """Root configuration for a deduplication run."""

    thresholds: SimilarityThresholds = field(default_factory=SimilarityThresholds)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "thresholds": self.thresholds.to_dict(),
            "analysis": self.analysis.to_dict(),
            "logging": self.logging.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DedupConfig":
        """Create from dictionary.

        Raises:
            InvalidThresholds: If the thresholds section is invalid.
            ConfigFileError: If another section has values of the wrong type.
        """
        thresholds = SimilarityThresholds.from_mapping(data.get("thresholds", {}))
        try:
            analysis = AnalysisConfig.from_dict(data.get("analysis", {}))
            logging_config = LoggingConfig.from_dict(data.get("logging", {}))
        except (TypeError, ValueError, AttributeError) as e:
            raise ConfigFileError(f"Invalid configuration value: {e}") from e
        return cls(thresholds=thresholds, analysis=analysis, logging=logging_config)


def find_config_file(project_path: Path | None = None) -> Path | None:
    """Find ``ui-dedup.config.json`` in the given directory."""
    search_dir = project_path or Path.cwd()
    candidate = search_dir / CONFIG_FILENAME
    return candidate if candidate.is_file() else None


def read_config_file(config_path: Path) -> dict[str, Any]:
    """Read a JSON config file.

    Raises:
        ConfigFileError: If the file is missing or not a JSON object.
    """
    try:
        with open(config_path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ConfigFileError(
            f"Config file not found: {config_path}", config_file=str(config_path)
        ) from e
    except json.JSONDecodeError as e:
        raise ConfigFileError(
            f"Invalid JSON in config file: {e}", config_file=str(config_path)
        ) from e

    if not isinstance(data, dict):
        raise ConfigFileError(
            "Config file must contain a JSON object", config_file=str(config_path)
        )
    return data


def apply_env_overrides(
    config: DedupConfig, environ: dict[str, str] | None = None
) -> DedupConfig:
    """Apply ``UI_DEDUP_*`` environment overrides.

    Raises:
        InvalidThresholds: If an override is not a valid threshold.
    """
    env = os.environ if environ is None else environ

    overrides: dict[str, Any] = {}
    for env_var, field_name in ENV_THRESHOLD_OVERRIDES.items():
        if env_var in env:
            overrides[field_name] = env[env_var]
            logger.debug(f"Threshold {field_name} overridden by {env_var}")
    if overrides:
        values = config.thresholds.model_dump()
        values.update(overrides)
        config.thresholds = SimilarityThresholds.from_mapping(values)

    if "UI_DEDUP_MAX_WORKERS" in env:
        try:
            config.analysis.max_workers = int(env["UI_DEDUP_MAX_WORKERS"])
        except ValueError:
            logger.warning(
                f"Ignoring non-integer UI_DEDUP_MAX_WORKERS={env['UI_DEDUP_MAX_WORKERS']!r}"
            )
    return config


def load_config(
    config_path: Path | None = None,
    project_path: Path | None = None,
    environ: dict[str, str] | None = None,
) -> DedupConfig:
    """Load configuration from a file (if any) plus environment overrides.

    Args:
        config_path: Explicit config file. Must exist when given.
        project_path: Directory searched for ``ui-dedup.config.json``.
        environ: Environment mapping (defaults to ``os.environ``).

    Returns:
        The effective configuration.
    """
    if config_path is None:
        config_path = find_config_file(project_path)

    if config_path is None:
        logger.debug("No dedup config found, using defaults")
        config = DedupConfig()
    else:
        logger.debug(f"Loading dedup config from {config_path}")
        config = DedupConfig.from_dict(read_config_file(Path(config_path)))

    return apply_env_overrides(config, environ)


def save_config(config: DedupConfig, config_path: Path) -> None:
    """Write a configuration file."""
    with open(config_path, "w", encoding="utf-8") as f:
        json.dump(config.to_dict(), f, indent=2)
    logger.info(f"Saved dedup config to {config_path}")
