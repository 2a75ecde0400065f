from __future__ import annotations

import logging
from collections import deque
from typing import Deque, List

from .models import Event, EventKind, Process, SimulationCounters, SimulationResult

logger = logging.getLogger(__name__)


def schedule_rr(processes: List[Process], quantum: int) -> SimulationResult:
    """
    Round Robin scheduling with a fixed time quantum.

    Runs every process to completion on a single simulated CPU. The Process
    objects are updated in place (remaining, completion and first response
    times) and returned in their original order on the result, together with
    the event trace and run counters.

    Every dispatch counts as a context switch, including the first one and a
    process that is re-dispatched straight after its own quantum expired.

    Raises ValueError if any process already carries state from an earlier run.
    """
    if isinstance(quantum, bool) or not isinstance(quantum, int) or quantum <= 0:
        raise ValueError(f"Round Robin requires a positive integer quantum, got {quantum!r}")

    for p in processes:
        if p.remaining_time != p.burst_time or p.first_response_time is not None or p.completion_time is not None:
            raise ValueError(f"P{p.pid} has already been scheduled; load a fresh process list")

    # Stable sort: equal arrival times keep their input order.
    backlog: Deque[Process] = deque(sorted(processes, key=lambda p: p.arrival_time))
    ready: Deque[Process] = deque()

    time = 0
    events: List[Event] = []
    counters = SimulationCounters()

    def enqueue_new_arrivals(current_time: int) -> None:
        while backlog and backlog[0].arrival_time <= current_time:
            p = backlog.popleft()
            ready.append(p)
            # Stamped with the arrival itself, which may lie behind the clock.
            events.append(Event(EventKind.ARRIVAL, p.arrival_time, pid=p.pid, burst_time=p.burst_time))

    while True:
        enqueue_new_arrivals(time)

        if not ready:
            if not backlog:
                break
            # Jump to next arrival if CPU is idle
            next_arrival = backlog[0].arrival_time
            if next_arrival > time:
                events.append(Event(EventKind.IDLE, time, end=next_arrival))
                counters.idle_time += next_arrival - time
                logger.debug("CPU idle from t=%d to t=%d", time, next_arrival)
            time = next_arrival
            continue

        p = ready.popleft()
        counters.context_switches += 1

        if p.first_response_time is None:
            p.first_response_time = time
            events.append(Event(EventKind.FIRST_RESPONSE, time, pid=p.pid))
        else:
            events.append(Event(EventKind.CONTEXT_SWITCH, time, pid=p.pid))

        run_time = min(quantum, p.remaining_time)
        logger.debug("Dispatch P%d at t=%d for %d (remaining %d)", p.pid, time, run_time, p.remaining_time)
        events.append(
            Event(
                EventKind.RUN,
                time,
                end=time + run_time,
                pid=p.pid,
                remaining_before=p.remaining_time,
                remaining_after=p.remaining_time - run_time,
            )
        )
        p.remaining_time -= run_time
        time += run_time

        # Arrivals during the slice go ahead of the preempted process.
        enqueue_new_arrivals(time)

        if p.remaining_time == 0:
            p.completion_time = time
            events.append(Event(EventKind.COMPLETION, time, pid=p.pid))
        else:
            ready.append(p)

    counters.final_time = time
    logger.debug(
        "Simulated %d processes: final time %d, %d context switches, idle %d",
        len(processes),
        counters.final_time,
        counters.context_switches,
        counters.idle_time,
    )

    return SimulationResult(quantum=quantum, processes=list(processes), events=events, counters=counters)
