"""Default configuration values for docflow.

These can be overridden by:
1. Config file (~/.docflow/config.yaml)
2. Environment variables (DOCFLOW_*)

Priority (highest to lowest):
Environment > Config file > Defaults
"""

from __future__ import annotations

# =============================================================================
# RETRY
# =============================================================================

# Attempts per remote call, including the first one
DEFAULT_MAX_ATTEMPTS: int = 3

# Delay before the first retry, in seconds; doubles on each further retry
DEFAULT_INITIAL_DELAY: float = 1.0

# Upper bound of random jitter, as a fraction of the backoff delay
DEFAULT_JITTER_RATIO: float = 0.2

# =============================================================================
# TASKS
# =============================================================================

# Id prefix of the multi-stage crawl/synthesize/embed pipeline task
DEFAULT_PIPELINE_PREFIX: str = "get-llms-full"

# Task types affected by "cancel all"
DEFAULT_CANCEL_ALL_PREFIXES: list[str] = ["crawl", "process", "embed", "get-llms-full"]

# =============================================================================
# LOGGING
# =============================================================================

DEFAULT_LOG_LEVEL: str = "INFO"

DEFAULT_LOG_FORMAT: str = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
