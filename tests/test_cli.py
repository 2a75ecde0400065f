import json
from pathlib import Path

import pytest

from rr_scheduler.cli import main, parse_quantum


@pytest.fixture
def workload(tmp_path: Path) -> Path:
    p = tmp_path / "procs.csv"
    p.write_text("1,0,5\n2,1,3\nbogus line\n3,2,1\n,,\n")
    return p


def test_run_prints_event_log_and_statistics(workload: Path, capsys):
    assert main([str(workload), "2"]) == 0
    out = capsys.readouterr().out
    assert "Time quantum: 2" in out
    assert "[t=0] P1 gets CPU first time (response)" in out
    assert "[t=4-5] P3 runs (remaining before=1, after=0)" in out
    assert "[t=9] P1 completes" in out
    assert "Per-Process Statistics" in out
    assert "Overall Performance Metrics" in out
    assert "100.00%" in out
    assert "bogus" not in out


def test_run_with_gantt(workload: Path, capsys):
    assert main([str(workload), "2", "--gantt"]) == 0
    out = capsys.readouterr().out
    assert "Time marks: 0 2 4 5 7 8 9" in out


def test_json_output(workload: Path, capsys):
    assert main([str(workload), "2", "--json", "--context-switch-time", "1"]) == 0
    report = json.loads(capsys.readouterr().out)
    assert report["quantum"] == 2
    assert report["context_switch_time"] == 1
    assert report["event_log"][-1] == "[t=9] P1 completes"
    assert report["events"][0]["kind"] == "arrival"
    assert len(report["events"]) == len(report["event_log"])
    assert report["events"][2] == {
        "kind": "run",
        "time": 0,
        "end": 2,
        "pid": 1,
        "burst_time": None,
        "remaining_before": 5,
        "remaining_after": 3,
    }
    assert [p["pid"] for p in report["processes"]] == [1, 2, 3]
    assert report["system"]["context_switches"] == 6
    assert report["system"]["total_idle_time"] == 6
    assert report["system"]["throughput"] == pytest.approx(3 / 9)


def test_idle_gap_report(tmp_path: Path, capsys):
    p = tmp_path / "late.csv"
    p.write_text("1,5,3\n")
    assert main([str(p), "2", "--json"]) == 0
    report = json.loads(capsys.readouterr().out)
    assert report["event_log"][0] == "[t=0-5] CPU idle"
    assert report["system"]["cpu_utilization"] == pytest.approx(0.375)


def test_missing_arguments(capsys):
    assert main([]) == 1
    out = capsys.readouterr().out
    assert "usage: rr-sim" in out


@pytest.mark.parametrize(
    "quantum, message",
    [
        ("abc", "Time quantum must be an integer."),
        ("0", "Time quantum must be a positive integer."),
        ("-3", "Time quantum must be a positive integer."),
    ],
)
def test_bad_quantum(workload: Path, capsys, quantum, message):
    assert main([str(workload), quantum]) == 1
    out = capsys.readouterr().out
    assert message in out
    assert "P1" not in out


def test_negative_context_switch_time(workload: Path, capsys):
    assert main([str(workload), "2", "--context-switch-time", "-1"]) == 1
    assert "non-negative" in capsys.readouterr().out


def test_unreadable_source(tmp_path: Path, capsys):
    assert main([str(tmp_path / "missing.csv"), "2"]) == 1
    assert "Error reading file:" in capsys.readouterr().out


def test_no_valid_processes(tmp_path: Path, capsys):
    p = tmp_path / "junk.csv"
    p.write_text("a,b,c\n1,2\n")
    assert main([str(p), "2"]) == 1
    assert "No valid processes found in file." in capsys.readouterr().out


def test_parse_quantum():
    assert parse_quantum("3") == 3
    with pytest.raises(ValueError):
        parse_quantum("1.5")


def test_verbose_enables_debug_logging(workload: Path, capsys):
    assert main([str(workload), "2", "--json"]) == 0
    assert "Simulating 3 processes" not in capsys.readouterr().err

    assert main([str(workload), "2", "--json", "-v"]) == 0
    err = capsys.readouterr().err
    assert "Simulating 3 processes with quantum 2" in err
    assert "DEBUG" in err

    assert main([str(workload), "2", "--json"]) == 0
    assert "Simulating 3 processes" not in capsys.readouterr().err
