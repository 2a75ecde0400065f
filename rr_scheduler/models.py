from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


@dataclass
class Process:
    pid: int
    arrival_time: int
    burst_time: int

    # Simulation state, owned by the simulator while a run is in progress.
    remaining_time: int = field(init=False)
    completion_time: Optional[int] = field(default=None, init=False)
    first_response_time: Optional[int] = field(default=None, init=False)

    def __post_init__(self) -> None:
        self.remaining_time = self.burst_time

    @property
    def is_completed(self) -> bool:
        return self.completion_time is not None


class EventKind(str, Enum):
    ARRIVAL = "arrival"
    IDLE = "idle"
    FIRST_RESPONSE = "first_response"
    CONTEXT_SWITCH = "context_switch"
    RUN = "run"
    COMPLETION = "completion"


@dataclass(frozen=True)
class Event:
    """
    One entry of the simulation trace.

    ``time`` is the instant the event happened, or the start of the span for
    IDLE and RUN events, which also carry ``end``.
    """

    kind: EventKind
    time: int
    end: Optional[int] = None
    pid: Optional[int] = None
    burst_time: Optional[int] = None
    remaining_before: Optional[int] = None
    remaining_after: Optional[int] = None

    @property
    def duration(self) -> int:
        return 0 if self.end is None else self.end - self.time

    def describe(self) -> str:
        if self.kind is EventKind.ARRIVAL:
            return f"[t={self.time}] P{self.pid} arrives (burst={self.burst_time})"
        if self.kind is EventKind.IDLE:
            return f"[t={self.time}-{self.end}] CPU idle"
        if self.kind is EventKind.FIRST_RESPONSE:
            return f"[t={self.time}] P{self.pid} gets CPU first time (response)"
        if self.kind is EventKind.CONTEXT_SWITCH:
            return f"[t={self.time}] Context switch to P{self.pid}"
        if self.kind is EventKind.RUN:
            return (
                f"[t={self.time}-{self.end}] P{self.pid} runs "
                f"(remaining before={self.remaining_before}, after={self.remaining_after})"
            )
        return f"[t={self.time}] P{self.pid} completes"


@dataclass
class SimulationCounters:
    idle_time: int = 0
    context_switches: int = 0
    final_time: int = 0


@dataclass
class ScheduledSlice:
    """
    One contiguous slice of execution for a process in the Gantt chart.
    """

    pid: int
    start_time: int
    end_time: int


@dataclass
class ProcessMetrics:
    pid: int
    arrival_time: int
    burst_time: int
    first_response_time: int
    completion_time: int
    turnaround_time: int
    waiting_time: int
    response_time: int


@dataclass
class SystemMetrics:
    process_count: int
    total_execution_time: int
    context_switches: int
    context_switch_time: int
    idle_time: int
    total_idle_time: int
    cpu_utilization: float
    throughput: float
    avg_turnaround: float
    avg_waiting: float
    avg_response: float


@dataclass
class SimulationResult:
    quantum: int
    processes: List[Process] = field(default_factory=list)
    events: List[Event] = field(default_factory=list)
    counters: SimulationCounters = field(default_factory=SimulationCounters)
    process_metrics: List[ProcessMetrics] = field(default_factory=list)
    system: Optional[SystemMetrics] = None

    def event_log(self) -> List[str]:
        return [event.describe() for event in self.events]

    @property
    def timeline(self) -> List[ScheduledSlice]:
        return [
            ScheduledSlice(pid=e.pid, start_time=e.time, end_time=e.end)
            for e in self.events
            if e.kind is EventKind.RUN
        ]
