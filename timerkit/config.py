"""Runtime configuration for timer registries.

Settings come from a :class:`TimerConfig` dataclass, either built directly or
read from the environment with :meth:`TimerConfig.from_env`.

Environment variables:
    TIMERKIT_SCHEDULER: ``threading`` (default), ``asyncio`` or ``manual``.
    TIMERKIT_DAEMON: Run threaded schedules on daemon threads (default ``1``).
    TIMERKIT_LOG_LEVEL: Level applied by :func:`apply_logging` (default ``WARNING``).
    TIMERKIT_RICH_TRACEBACKS: Render listener errors with rich tracebacks (default ``1``).
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import os

from .logger import configure_logging
from .scheduler import AsyncioScheduler, ManualScheduler, Scheduler, ThreadingScheduler

SCHEDULERS = ("threading", "asyncio", "manual")

_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUTHY


@dataclass
class TimerConfig:
    """Configuration for a timer registry."""

    scheduler: str = "threading"
    daemon: bool = True  # threaded schedules never keep the interpreter alive
    log_level: str = "WARNING"
    rich_tracebacks: bool = True

    @classmethod
    def from_env(cls) -> TimerConfig:
        """Build a configuration from ``TIMERKIT_*`` environment variables."""
        return cls(
            scheduler=os.environ.get("TIMERKIT_SCHEDULER", cls.scheduler).strip().lower(),
            daemon=_env_flag("TIMERKIT_DAEMON", cls.daemon),
            log_level=os.environ.get("TIMERKIT_LOG_LEVEL", cls.log_level).strip().upper(),
            rich_tracebacks=_env_flag("TIMERKIT_RICH_TRACEBACKS", cls.rich_tracebacks),
        )


def build_scheduler(config: TimerConfig | None = None) -> Scheduler:
    """Create the scheduling primitive named by ``config.scheduler``.

    Args:
        config: Configuration to read. Uses defaults if None.

    Returns:
        Scheduler: A fresh adapter instance.

    Raises:
        ValueError: If the scheduler name is unknown.
    """
    config = config or TimerConfig()
    if config.scheduler == "threading":
        return ThreadingScheduler(daemon=config.daemon)
    if config.scheduler == "asyncio":
        return AsyncioScheduler()
    if config.scheduler == "manual":
        return ManualScheduler()

    msg = f"Unknown scheduler {config.scheduler!r}, expected one of {', '.join(SCHEDULERS)}"
    raise ValueError(msg)


def apply_logging(config: TimerConfig | None = None) -> logging.Logger:
    """Configure the package logger from ``config``."""
    config = config or TimerConfig()
    return configure_logging(config.log_level, rich_tracebacks=config.rich_tracebacks)
