from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from .models import Process

logger = logging.getLogger(__name__)


def load_processes(path: str | Path) -> List[Process]:
    """
    Load processes from a delimited text file (``pid,arrival,burst`` per line)
    or a JSON list of process objects.

    Malformed records are skipped. The result is sorted by arrival time,
    keeping file order for equal arrivals. OSError propagates when the file
    cannot be read.
    """
    path = Path(path)

    if path.suffix.lower() == ".json":
        records = _load_json(path)
    else:
        records = _load_csv(path)

    processes: List[Process] = []
    seen_pids: set[int] = set()
    for lineno, record in records:
        p = _process_from_fields(record)
        if p is None:
            logger.debug("%s:%d: skipping malformed record %r", path, lineno, record)
            continue
        if p.pid in seen_pids:
            logger.debug("%s:%d: skipping duplicate pid %d", path, lineno, p.pid)
            continue
        seen_pids.add(p.pid)
        processes.append(p)

    processes.sort(key=lambda p: p.arrival_time)
    logger.debug("Loaded %d processes from %s", len(processes), path)
    return processes


def _load_csv(path: Path) -> List[tuple[int, Sequence]]:
    records = []
    with path.open("r", encoding="utf-8", newline="") as f:
        for lineno, row in enumerate(csv.reader(f), start=1):
            if not row or not "".join(row).strip():
                continue
            records.append((lineno, row))
    return records


def _load_json(path: Path) -> List[tuple[int, Sequence]]:
    with path.open("r", encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as exc:
            logger.debug("%s: not valid JSON (%s)", path, exc)
            return []

    if not isinstance(raw, list):
        logger.debug("%s: JSON workload must be a list of process objects", path)
        return []

    records = []
    for idx, entry in enumerate(raw, start=1):
        if isinstance(entry, dict):
            fields = [entry.get("pid"), entry.get("arrival_time"), entry.get("burst_time")]
        elif isinstance(entry, list):
            fields = entry
        else:
            fields = []
        records.append((idx, fields))
    return records


def _process_from_fields(fields: Sequence) -> Optional[Process]:
    if len(fields) < 3:
        return None

    try:
        pid, arrival_time, burst_time = (_to_int(v) for v in fields[:3])
    except (TypeError, ValueError):
        return None

    if pid <= 0 or arrival_time < 0 or burst_time <= 0:
        return None

    return Process(pid=pid, arrival_time=arrival_time, burst_time=burst_time)


def _to_int(value) -> int:
    # Reject 1.5 and True rather than letting int() truncate them.
    if isinstance(value, (bool, float)):
        raise TypeError(f"not an integer: {value!r}")
    if isinstance(value, str):
        value = value.strip()
    return int(value)
