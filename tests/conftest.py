"""Shared fixtures: a synthetic procfs tree under tmp_path."""

import errno
import io
from pathlib import Path
from types import SimpleNamespace

import pytest

STATUS_TEMPLATE = "Name:\t{name}\nState:\tS (sleeping)\nPid:\t{pid}\nPPid:\t1\nThreads:\t1\n"
CPUINFO = "".join(f"cpu line {i}\n" for i in range(15))
MEMINFO = "MemTotal:       16318480 kB\nMemFree:         1234567 kB\nMemAvailable:    7654321 kB\n"
VERSION = "Linux version 6.1.0-test (builder@example) (gcc 12.2.0) #1 SMP PREEMPT_DYNAMIC\n"


def add_process(root: Path, pid: str, name: str, cmdline: bytes | None) -> Path:
    """Create <root>/<pid>/ with a status file and, unless None, a cmdline file."""
    proc_dir = root / pid
    proc_dir.mkdir()
    (proc_dir / "status").write_text(STATUS_TEMPLATE.format(name=name, pid=pid))
    if cmdline is not None:
        (proc_dir / "cmdline").write_bytes(cmdline)
    return proc_dir


@pytest.fixture
def fake_proc(tmp_path: Path) -> Path:
    """procfs root with processes 1, 2 (kernel thread) and 42, plus a non-pid dir."""
    root = tmp_path / "proc"
    root.mkdir()
    add_process(root, "1", "init", b"/sbin/init\0splash\0")
    add_process(root, "2", "kthreadd", b"")
    add_process(root, "42", "sleep", b"sleep\x0060\0")
    (root / "abc").mkdir()
    (root / "cpuinfo").write_text(CPUINFO)
    (root / "meminfo").write_text(MEMINFO)
    (root / "version").write_text(VERSION)
    return root


class FakeListing:
    """Stands in for os.scandir(); can fail on iteration or on close."""

    def __init__(self, names, fail_next=False, fail_close=False):
        self._entries = [SimpleNamespace(name=name) for name in names]
        self._fail_next = fail_next
        self._fail_close = fail_close
        self.closed = False

    def __iter__(self):
        return self

    def __next__(self):
        if self._fail_next:
            raise OSError(errno.EIO, "Input/output error")
        if not self._entries:
            raise StopIteration
        return self._entries.pop(0)

    def close(self):
        self.closed = True
        if self._fail_close:
            raise OSError(errno.EIO, "Input/output error")


class UnreadableHandle(io.BytesIO):
    """Binary file whose line iteration fails."""

    def __next__(self):
        raise OSError(errno.EIO, "Input/output error")


class BrokenPipeStream(io.StringIO):
    """Text stream whose reader has gone away."""

    def write(self, text):
        raise BrokenPipeError(errno.EPIPE, "Broken pipe")
