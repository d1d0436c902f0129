"""Configuration management for docflow.

Loads from ~/.docflow/config.yaml with environment variable overrides.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from . import defaults as D

logger = logging.getLogger(__name__)


@dataclass
class RetryConfig:
    """Backoff settings for remote calls."""

    max_attempts: int = D.DEFAULT_MAX_ATTEMPTS
    initial_delay: float = D.DEFAULT_INITIAL_DELAY  # seconds
    jitter_ratio: float = D.DEFAULT_JITTER_RATIO


@dataclass
class TaskConfig:
    """Task registry and reporting settings."""

    pipeline_prefix: str = D.DEFAULT_PIPELINE_PREFIX
    cancel_all_prefixes: list[str] = field(
        default_factory=lambda: D.DEFAULT_CANCEL_ALL_PREFIXES.copy()
    )
    log_level: str = D.DEFAULT_LOG_LEVEL


@dataclass
class DocflowConfig:
    """Top-level configuration."""

    retry: RetryConfig = field(default_factory=RetryConfig)
    tasks: TaskConfig = field(default_factory=TaskConfig)

    CONFIG_FILE: Path = field(
        default_factory=lambda: Path.home() / ".docflow" / "config.yaml",
        repr=False,
    )

    @classmethod
    def load(cls, config_path: Path | None = None) -> DocflowConfig:
        """Load config from file and environment variables.

        Priority (highest wins):
          1. Environment variables (DOCFLOW_MAX_ATTEMPTS, DOCFLOW_LOG_LEVEL, etc.)
          2. Config file (~/.docflow/config.yaml or custom path)
          3. Defaults

        Args:
            config_path: Optional path to a YAML config file.

        Returns:
            Populated DocflowConfig instance.
        """
        config = cls()
        file_path = config_path or config.CONFIG_FILE

        if file_path.exists():
            try:
                with open(file_path) as f:
                    data = yaml.safe_load(f) or {}
                config._apply_file(data)
            except (yaml.YAMLError, OSError, ValueError, TypeError, AttributeError) as e:
                logger.warning("Ignoring unreadable config file %s: %s", file_path, e)

        if env_attempts := os.environ.get("DOCFLOW_MAX_ATTEMPTS"):
            config.retry.max_attempts = int(env_attempts)
        if env_delay := os.environ.get("DOCFLOW_INITIAL_DELAY"):
            config.retry.initial_delay = float(env_delay)
        if env_jitter := os.environ.get("DOCFLOW_JITTER_RATIO"):
            config.retry.jitter_ratio = float(env_jitter)
        config.tasks.pipeline_prefix = os.environ.get(
            "DOCFLOW_PIPELINE_PREFIX", config.tasks.pipeline_prefix
        )
        config.tasks.log_level = os.environ.get("DOCFLOW_LOG_LEVEL", config.tasks.log_level)

        return config

    def _apply_file(self, data: dict) -> None:
        retry = data.get("retry") or {}
        self.retry.max_attempts = int(retry.get("max_attempts", self.retry.max_attempts))
        self.retry.initial_delay = float(retry.get("initial_delay", self.retry.initial_delay))
        self.retry.jitter_ratio = float(retry.get("jitter_ratio", self.retry.jitter_ratio))

        tasks = data.get("tasks") or {}
        self.tasks.pipeline_prefix = tasks.get("pipeline_prefix", self.tasks.pipeline_prefix)
        if "cancel_all_prefixes" in tasks:
            self.tasks.cancel_all_prefixes = [str(p) for p in tasks["cancel_all_prefixes"]]
        self.tasks.log_level = tasks.get("log_level", self.tasks.log_level)

    def save(self, config_path: Path | None = None) -> None:
        """Save current config to file.

        Args:
            config_path: Optional path override.
        """
        file_path = config_path or self.CONFIG_FILE
        file_path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "retry": {
                "max_attempts": self.retry.max_attempts,
                "initial_delay": self.retry.initial_delay,
                "jitter_ratio": self.retry.jitter_ratio,
            },
            "tasks": {
                "pipeline_prefix": self.tasks.pipeline_prefix,
                "cancel_all_prefixes": list(self.tasks.cancel_all_prefixes),
                "log_level": self.tasks.log_level,
            },
        }

        with open(file_path, "w") as f:
            yaml.safe_dump(data, f, default_flow_style=False)
