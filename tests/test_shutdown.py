import sys
import time
import subprocess

import psutil
import pytest

from devhost.local.config import effective_settings
from devhost.local.supervisor.shutdown import identify_processes_to_stop, terminate_child

SLEEPER = "import time; time.sleep(60)"
PARENT_WITH_CHILD = (
    "import subprocess, sys, time; "
    f"subprocess.Popen([sys.executable, '-c', {SLEEPER!r}]); "
    "time.sleep(60)"
)


def _wait_for_children(pid: int, count: int) -> None:
    proc = psutil.Process(pid)
    for _ in range(100):
        if len(proc.children(recursive=True)) >= count:
            return
        time.sleep(0.05)
    pytest.fail("child process did not start")


def test_identify_missing_process_returns_empty() -> None:
    proc = subprocess.Popen([sys.executable, "-c", "pass"])
    proc.wait()
    assert identify_processes_to_stop(proc.pid) == []


def test_terminate_child_stops_process_tree(monkeypatch) -> None:
    monkeypatch.setattr(effective_settings, "TERMINATE_TIMEOUT", 5)
    proc = subprocess.Popen([sys.executable, "-c", PARENT_WITH_CHILD])
    try:
        _wait_for_children(proc.pid, 1)
        grandchild = psutil.Process(proc.pid).children(recursive=True)[0]

        terminate_child(proc.pid)

        assert proc.wait(timeout=10) is not None
        grandchild.wait(timeout=10)
        assert not grandchild.is_running()
    finally:
        if proc.poll() is None:
            proc.kill()


def test_terminate_child_on_exited_process_is_a_no_op() -> None:
    proc = subprocess.Popen([sys.executable, "-c", "pass"])
    proc.wait()
    terminate_child(proc.pid)
