"""
Round Robin scheduler package.

Simulates Round Robin CPU scheduling over a fixed set of processes and
reports the event trace together with utilization, throughput and
per-process timing statistics.
"""

__all__ = ["cli"]
