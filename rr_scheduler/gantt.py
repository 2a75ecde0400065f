from __future__ import annotations

from typing import Dict, List

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import ScheduledSlice


def _label(slice_: ScheduledSlice, width: int) -> str:
    # Never cut a pid short: fall back to the bare number, then to no label.
    for label in (f"P{slice_.pid}", str(slice_.pid)):
        if len(label) <= width:
            return label.ljust(width)
    return " " * width


def build_rich_gantt(slices: List[ScheduledSlice]) -> tuple[Panel, str]:
    """
    Build a Rich Panel containing a colored Gantt chart and a string with time marks.
    """
    if not slices:
        panel = Panel("No execution", title="Gantt Chart")
        return panel, ""

    slices = sorted(slices, key=lambda s: (s.start_time, s.end_time))

    colors = ["red", "green", "yellow", "blue", "magenta", "cyan"]
    pid_to_color: Dict[int, str] = {}

    def pid_color(pid: int) -> str:
        if pid not in pid_to_color:
            idx = len(pid_to_color) % len(colors)
            pid_to_color[pid] = colors[idx]
        return pid_to_color[pid]

    timeline = Text()
    labels = Text()
    time_marks = "0"
    last_time = 0

    for sl in slices:
        idle_gap = sl.start_time - last_time
        if idle_gap > 0:
            timeline.append("." * idle_gap, style="dim")
            labels.append(" " * idle_gap)
            last_time = sl.start_time
            time_marks += f" {last_time}"

        width = max(1, sl.end_time - sl.start_time)
        timeline.append(" " * width, style=f"on {pid_color(sl.pid)}")
        labels.append(_label(sl, width), style="bold")

        last_time = sl.end_time
        time_marks += f" {last_time}"

    table = Table.grid(padding=(0, 0))
    table.add_row(timeline)
    table.add_row(labels)

    panel = Panel.fit(table, title="Gantt Chart")
    return panel, f"Time marks: {time_marks}"
