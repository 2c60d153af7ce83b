"""Rich renderables describing the timers of a registry.

Example:
    >>> from timerkit.report import print_timers
    >>> print_timers()  # table of timers followed by a per-state panel
"""

from __future__ import annotations

from collections import Counter

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .registry import TimerRegistry, get_registry
from .timer import TimerStatus

STATUS_STYLES = {
    TimerStatus.STOPPED: "red",
    TimerStatus.STARTED: "green",
    TimerStatus.PAUSED: "yellow",
}


def timers_table(registry: TimerRegistry | None = None) -> Table:
    """Build a table with one row per live timer, in creation order."""
    if registry is None:
        registry = get_registry()

    table = Table(title="Timers")
    table.add_column("uid", justify="right")
    table.add_column("id")
    table.add_column("status")
    table.add_column("delay", justify="right")
    table.add_column("repeat")
    table.add_column("callbacks", justify="right")

    for timer in registry.all():
        status = timer.status
        table.add_row(
            str(timer.uid),
            str(timer.id),
            Text(status.value, style=STATUS_STYLES[status]),
            "-" if timer.delay is None else f"{timer.delay} ms",
            "yes" if timer.repeat else "no",
            str(len(timer.callbacks)),
        )
    return table


def status_panel(registry: TimerRegistry | None = None) -> Panel:
    """Build a panel counting live timers per state."""
    if registry is None:
        registry = get_registry()

    timers = registry.all()
    counts = Counter(timer.status for timer in timers)

    t = Table.grid(padding=(0, 2))
    for status in TimerStatus:
        t.add_row(f"[b]{status.name.title()}[/b]: ", Text(str(counts[status]), style=STATUS_STYLES[status]))
    t.add_section()
    t.add_row("[b]Total[/b]: ", Text(str(len(timers))))

    return Panel(t, title="Timer States", padding=(1, 2))


def print_timers(registry: TimerRegistry | None = None, console: Console | None = None) -> None:
    """Print the timers table and the state panel."""
    console = console or Console()
    console.print(timers_table(registry))
    console.print(status_panel(registry))
