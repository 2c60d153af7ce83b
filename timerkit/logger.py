"""Package logger backed by a rich console handler.

Importing timerkit never configures logging; the ``"timerkit"`` logger only
carries a ``NullHandler`` until :func:`configure_logging` is called.

Example:
    >>> from timerkit.logger import configure_logging
    >>> configure_logging("DEBUG")  # transitions now show up on the console
"""

import logging
from typing import Final

from rich.console import Console
from rich.logging import RichHandler

CONSOLE: Final[Console] = Console(stderr=True)

time_format: Final[str] = "%Y-%m-%d %H:%M:%S"

log: Final[logging.Logger] = logging.getLogger("timerkit")
log.addHandler(logging.NullHandler())


def configure_logging(
    level: int | str = logging.INFO,
    console: Console | None = None,
    rich_tracebacks: bool = True,
) -> logging.Logger:
    """Attach a ``RichHandler`` to the package logger.

    Calling it again replaces the previously attached rich handler instead of
    stacking a second one.

    Args:
        level: Logging level name or number.
        console: Console to render to. Defaults to the module console (stderr).
        rich_tracebacks: Render listener exceptions with rich tracebacks.

    Returns:
        logging.Logger: The configured package logger.
    """
    if isinstance(level, str):
        name = level
        level = logging.getLevelName(name.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {name}")

    for handler in list(log.handlers):
        if isinstance(handler, RichHandler):
            log.removeHandler(handler)

    handler = RichHandler(
        console=console or CONSOLE,
        rich_tracebacks=rich_tracebacks,
        show_path=False,
        log_time_format=time_format,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    log.addHandler(handler)
    log.setLevel(level)
    return log
