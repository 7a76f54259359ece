"""Runtime settings read from the environment."""

from __future__ import annotations

import math
import os
from dataclasses import dataclass

from . import logging as structured_logging
from .constants import (
    ENV_MAX_WORKERS,
    ENV_METRICS_PORT,
    ENV_REPORTING_INSTANCE,
    ENV_REQUEST_TIMEOUT,
    ENV_RETRY_DELAY,
    ENV_STATUS_CONFLICT_RETRIES,
    REPORTING_INSTANCE,
)


@dataclass(frozen=True)
class Settings:
    request_timeout: float = 30.0
    status_conflict_retries: int = 3
    retry_delay: float = 10.0
    metrics_port: int = 8080
    reporting_instance: str = REPORTING_INSTANCE
    max_workers: int = 4

    @classmethod
    def from_env(cls) -> Settings:
        """Build settings from ``SCHEDULED_CRONJOB_*`` variables.

        Anything that is not a finite non-negative number falls back to the
        default. The request timeout and the worker count must also be non-zero.
        """
        defaults = cls()
        return cls(
            request_timeout=_read_number(
                ENV_REQUEST_TIMEOUT, float, defaults.request_timeout, positive=True
            ),
            status_conflict_retries=_read_number(
                ENV_STATUS_CONFLICT_RETRIES, int, defaults.status_conflict_retries
            ),
            retry_delay=_read_number(ENV_RETRY_DELAY, float, defaults.retry_delay),
            metrics_port=_read_number(ENV_METRICS_PORT, int, defaults.metrics_port),
            reporting_instance=os.getenv(ENV_REPORTING_INSTANCE) or defaults.reporting_instance,
            max_workers=_read_number(
                ENV_MAX_WORKERS, int, defaults.max_workers, positive=True
            ),
        )


def _read_number(variable: str, type_: type, default, *, positive: bool = False):
    raw = os.getenv(variable)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = type_(raw)
    except ValueError:
        value = None
    if value is None or not math.isfinite(value) or value < 0 or (positive and value == 0):
        structured_logging.logger.warning(
            f"Ignoring invalid value for {variable}",
            event="config",
            reason="InvalidSetting",
            variable=variable,
            value=raw,
        )
        return default
    return value
