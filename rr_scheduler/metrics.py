from __future__ import annotations

from typing import List

from .models import Process, ProcessMetrics, SimulationResult, SystemMetrics

DEFAULT_CONTEXT_SWITCH_TIME = 0


def compute_process_metrics(processes: List[Process]) -> List[ProcessMetrics]:
    """
    Derive turnaround, waiting and response times for completed processes.
    """
    metrics: List[ProcessMetrics] = []
    for p in processes:
        if p.completion_time is None or p.first_response_time is None:
            raise ValueError(f"P{p.pid} has not completed; run the simulation first")

        turnaround_time = p.completion_time - p.arrival_time
        metrics.append(
            ProcessMetrics(
                pid=p.pid,
                arrival_time=p.arrival_time,
                burst_time=p.burst_time,
                first_response_time=p.first_response_time,
                completion_time=p.completion_time,
                turnaround_time=turnaround_time,
                waiting_time=turnaround_time - p.burst_time,
                response_time=p.first_response_time - p.arrival_time,
            )
        )
    return metrics


def summarize_process_metrics(processes: List[ProcessMetrics]) -> dict:
    """
    Return averages of the key per-process metrics for quick comparison.
    """
    if not processes:
        return {"avg_waiting": 0.0, "avg_turnaround": 0.0, "avg_response": 0.0}

    n = len(processes)
    return {
        "avg_waiting": sum(p.waiting_time for p in processes) / n,
        "avg_turnaround": sum(p.turnaround_time for p in processes) / n,
        "avg_response": sum(p.response_time for p in processes) / n,
    }


def compute_statistics(
    result: SimulationResult, context_switch_time: int = DEFAULT_CONTEXT_SWITCH_TIME
) -> SystemMetrics:
    """
    Compute utilization, throughput and average times for a finished run.

    Each context switch adds ``context_switch_time`` units to the idle total.
    The switch overhead is not added to the simulated clock, so the execution
    time span is the final clock value either way.

    Raises ValueError when the run spans zero time units, since utilization
    and throughput are undefined there.
    """
    if context_switch_time < 0:
        raise ValueError(f"Context switch time must be non-negative, got {context_switch_time}")

    counters = result.counters
    total_execution_time = counters.final_time
    if total_execution_time <= 0:
        raise ValueError("Total execution time is zero; utilization and throughput are undefined")

    process_metrics = compute_process_metrics(result.processes)
    summary = summarize_process_metrics(process_metrics)

    total_idle_time = counters.idle_time + counters.context_switches * context_switch_time

    system = SystemMetrics(
        process_count=len(result.processes),
        total_execution_time=total_execution_time,
        context_switches=counters.context_switches,
        context_switch_time=context_switch_time,
        idle_time=counters.idle_time,
        total_idle_time=total_idle_time,
        cpu_utilization=1.0 - total_idle_time / total_execution_time,
        throughput=len(result.processes) / total_execution_time,
        avg_turnaround=summary["avg_turnaround"],
        avg_waiting=summary["avg_waiting"],
        avg_response=summary["avg_response"],
    )
    result.process_metrics = process_metrics
    result.system = system
    return system
