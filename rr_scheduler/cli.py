from __future__ import annotations

import argparse
import logging
from dataclasses import asdict
from pathlib import Path

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .gantt import build_rich_gantt
from .metrics import DEFAULT_CONTEXT_SWITCH_TIME, compute_statistics
from .models import SimulationResult
from .simulator import schedule_rr
from .workload_io import load_processes

logger = logging.getLogger(__name__)


class UsageError(Exception):
    """Raised instead of exiting when the command line cannot be parsed."""


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        raise UsageError(f"{self.format_usage().strip()}\n{self.prog}: error: {message}")


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="rr-sim",
        description="Round Robin CPU scheduling simulator.",
    )
    parser.add_argument(
        "source",
        help="Path to the process file (CSV lines 'pid,arrival,burst', or a .json list).",
    )
    parser.add_argument(
        "quantum",
        help="Time quantum, a positive integer.",
    )
    parser.add_argument(
        "--context-switch-time",
        type=int,
        default=DEFAULT_CONTEXT_SWITCH_TIME,
        help=f"Overhead per context switch counted as idle time (default: {DEFAULT_CONTEXT_SWITCH_TIME}).",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the report as JSON instead of tables.",
    )
    parser.add_argument(
        "--gantt",
        action="store_true",
        help="Show a Gantt chart of the run after the statistics.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging on stderr.",
    )
    return parser


def parse_quantum(text: str) -> int:
    try:
        quantum = int(text)
    except ValueError:
        raise ValueError("Time quantum must be an integer.") from None
    if quantum <= 0:
        raise ValueError("Time quantum must be a positive integer.")
    return quantum


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _print_result(result: SimulationResult, console: Console, show_gantt: bool = False) -> None:
    console.print("[bold]=== Round Robin CPU Scheduling Simulation ===[/bold]")
    console.print(f"[bold]Time quantum:[/bold] {result.quantum}")
    console.print("Input processes (pid, arrive, burst):")
    for p in sorted(result.processes, key=lambda p: p.arrival_time):
        console.print(f"  P{p.pid}: arrive={p.arrival_time}, burst={p.burst_time}", highlight=False)

    console.print()
    console.print("[bold]=== Event Log (timestamped) ===[/bold]")
    for line in result.event_log():
        console.print(line, markup=False, highlight=False, soft_wrap=True)

    console.print()

    headers = ["PID", "Arrive", "Burst", "Completion", "Turnaround", "Waiting", "Response"]

    proc_table = Table(title="Per-Process Statistics", box=box.SIMPLE_HEAVY)
    for h in headers:
        justify = "center" if h == "PID" else "right"
        proc_table.add_column(h, justify=justify)

    for m in result.process_metrics:
        proc_table.add_row(
            f"P{m.pid}",
            str(m.arrival_time),
            str(m.burst_time),
            str(m.completion_time),
            str(m.turnaround_time),
            str(m.waiting_time),
            str(m.response_time),
        )

    console.print(proc_table)
    console.print()

    if result.system:
        sys = result.system
        sys_table = Table(title="Overall Performance Metrics", box=box.SIMPLE_HEAVY)
        sys_table.add_column("Metric")
        sys_table.add_column("Value", justify="right")

        sys_table.add_row("Total processes", str(sys.process_count))
        sys_table.add_row("Total execution time", str(sys.total_execution_time))
        sys_table.add_row("Context switches", str(sys.context_switches))
        sys_table.add_row("Context switch time (per switch)", str(sys.context_switch_time))
        sys_table.add_row("Total idle time (incl. switches)", str(sys.total_idle_time))
        sys_table.add_row("CPU utilization", f"{sys.cpu_utilization * 100:.2f}%")
        sys_table.add_row("Throughput (proc/time)", f"{sys.throughput:.4f}")
        sys_table.add_row("Avg turnaround", f"{sys.avg_turnaround:.2f}")
        sys_table.add_row("Avg waiting", f"{sys.avg_waiting:.2f}")
        sys_table.add_row("Avg response", f"{sys.avg_response:.2f}")

        console.print(sys_table)

    if show_gantt:
        console.print()
        panel, time_marks = build_rich_gantt(result.timeline)
        console.print(panel)
        if time_marks:
            console.print(time_marks, highlight=False)


def result_to_dict(result: SimulationResult) -> dict:
    return {
        "quantum": result.quantum,
        "context_switch_time": result.system.context_switch_time if result.system else None,
        "event_log": result.event_log(),
        "events": [{**asdict(e), "kind": e.kind.value} for e in result.events],
        "processes": [asdict(m) for m in result.process_metrics],
        "system": asdict(result.system) if result.system else None,
    }


def main(argv: list[str] | None = None) -> int:
    console = Console()
    parser = build_parser()

    try:
        args = parser.parse_args(argv)
    except UsageError as exc:
        console.print(escape(str(exc)), highlight=False, soft_wrap=True)
        return 1

    _configure_logging(args.verbose)

    try:
        quantum = parse_quantum(args.quantum)
    except ValueError as exc:
        console.print(str(exc), highlight=False)
        return 1

    if args.context_switch_time < 0:
        console.print("Context switch time must be a non-negative integer.", highlight=False)
        return 1

    try:
        processes = load_processes(Path(args.source))
    except (OSError, UnicodeDecodeError) as exc:
        console.print(f"Error reading file: {escape(str(exc))}", highlight=False, soft_wrap=True)
        return 1

    if not processes:
        console.print("No valid processes found in file.", highlight=False)
        return 1

    logger.debug("Simulating %d processes with quantum %d", len(processes), quantum)
    result = schedule_rr(processes, quantum)
    try:
        compute_statistics(result, context_switch_time=args.context_switch_time)
    except ValueError as exc:
        console.print(f"[red]Error: {escape(str(exc))}[/red]", soft_wrap=True)
        return 1

    if args.json:
        console.print_json(data=result_to_dict(result), highlight=False)
    else:
        _print_result(result, console, show_gantt=args.gantt)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
