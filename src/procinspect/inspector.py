"""Process inspection operations for procinspect."""

import codecs
import logging
import sys
from collections.abc import Iterable
from enum import Enum
from pathlib import Path
from typing import TextIO

from procinspect.errors import ProcOpenError, ProcReadError
from procinspect.models import EXIT_FAILURE, EXIT_OK, SectionResult
from procinspect.procfs import (
    CHUNK_SIZE,
    CMDLINE_LIMIT,
    PROCFS_ROOT,
    PathArg,
    is_pid_name,
    open_process_listing,
    process_path,
    read_chunks,
    read_cmdline,
    read_lines,
)

logger = logging.getLogger(__name__)

MAX_LINES = 10

# (label, file under the procfs root)
SYSTEM_SECTIONS = (
    ("CPU", "cpuinfo"),
    ("Memory", "meminfo"),
)


class ReadMethod(Enum):
    """Strategies for reading a file."""

    SYSCALLS = "syscalls"
    LIBRARY = "library"


class ProcessInspector:
    """
    Point-in-time inspector over a procfs tree.

    Every operation reads synchronously from the procfs root and writes
    human-readable text to the output stream. Read failures surface as
    ProcReadError subclasses; run() converts them into exit codes.
    """

    # operation -> (minimum, maximum) operand count
    OPERATIONS = {
        "list": (0, 0),
        "info": (1, 1),
        "sysinfo": (0, 0),
        "compare": (0, 1),
        "cat": (1, 2),
    }

    def __init__(
        self,
        stream: TextIO | None = None,
        root: PathArg | None = None,
        max_lines: int = MAX_LINES,
        chunk_size: int = CHUNK_SIZE,
        cmdline_limit: int = CMDLINE_LIMIT,
    ) -> None:
        """
        Initialize the ProcessInspector.

        Args:
            stream: Where output is written. Defaults to sys.stdout at call time.
            root: procfs mount point. Defaults to psutil.PROCFS_PATH (/proc).
            max_lines: Lines printed per system snapshot section. Default 10.
            chunk_size: Bytes requested per unbuffered read() call. Default 1024.
            cmdline_limit: Maximum bytes captured from a cmdline record. Default 4096.
        """
        self._stream = stream
        self._root = Path(root if root is not None else PROCFS_ROOT)
        self.max_lines = max_lines
        self.chunk_size = chunk_size
        self.cmdline_limit = cmdline_limit

    @property
    def root(self) -> Path:
        """The procfs root being inspected."""
        return self._root

    @property
    def stream(self) -> TextIO:
        """The output stream."""
        return self._stream if self._stream is not None else sys.stdout

    @property
    def max_lines(self) -> int:
        return self._max_lines

    @max_lines.setter
    def max_lines(self, value: int) -> None:
        self._max_lines = max(1, value)

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    @chunk_size.setter
    def chunk_size(self, value: int) -> None:
        self._chunk_size = max(1, value)

    @property
    def cmdline_limit(self) -> int:
        return self._cmdline_limit

    @cmdline_limit.setter
    def cmdline_limit(self, value: int) -> None:
        self._cmdline_limit = max(1, value)

    def _write(self, text: str) -> None:
        self.stream.write(text)

    def _write_row(self, first: str, second: str) -> None:
        self._write(f"{first:<8} {second:<20}\n")

    def _write_chunks(self, chunks: Iterable[bytes]) -> None:
        """
        Write raw file content.

        Bytes go straight to the binary buffer when the stream has one, so
        non-UTF-8 content is forwarded unchanged. Other streams get the
        content decoded, with characters split across chunks reassembled.
        """
        buffer = getattr(self.stream, "buffer", None)
        if buffer is not None:
            self.stream.flush()
            for chunk in chunks:
                buffer.write(chunk)
            buffer.flush()
            return

        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        for chunk in chunks:
            self._write(decoder.decode(chunk))
        self._write(decoder.decode(b"", final=True))

    def list_processes(self) -> int:
        """
        Print a PID/Type table of every numeric entry under the root.

        Rows follow filesystem enumeration order.

        Returns:
            Number of process directories found.
        """
        count = 0
        with open_process_listing(self._root) as entries:
            self._write(f"Process directories in {self._root}:\n")
            self._write_row("PID", "Type")
            self._write_row("---", "----")

            for entry in entries:
                self._write_row(entry.name, entry.kind)
                count += 1

        self._write(f"Found {count} process directories\n")
        return count

    def read_process_info(self, pid: str) -> None:
        """
        Print the status block and command line of a process.

        The command line is not read when the status read fails.

        Args:
            pid: Process identifier as it appears under the root.
        """
        status_path = process_path(self._root, pid, "status")
        if not is_pid_name(pid):
            raise ProcOpenError(status_path, f"{pid!r} is not a process id")

        self._write(f"\n--- Process Information for PID {pid} ---\n")
        self._write_chunks(read_chunks(status_path, chunk_size=self._chunk_size))

        self._write("\n--- Command Line ---\n")
        cmdline = read_cmdline(
            process_path(self._root, pid, "cmdline"),
            limit=self._cmdline_limit,
            chunk_size=self._chunk_size,
        )
        self._write(f"{cmdline}\n")

    def show_system_info(self) -> list[SectionResult]:
        """
        Print the first max_lines lines of cpuinfo and meminfo.

        Each section is attempted even if the previous one failed.

        Returns:
            One SectionResult per section, in print order.
        """
        results: list[SectionResult] = []
        for label, name in SYSTEM_SECTIONS:
            path = self._root / name
            result = SectionResult(label=label, path=str(path))
            self._write(f"\n--- {label} Information (first {self._max_lines} lines) ---\n")
            try:
                lines = read_lines(path, limit=self._max_lines)
            except ProcReadError as exc:
                self.stream.flush()
                logger.error("%s information unavailable: %s", label, exc)
                result.error = exc
            else:
                self._write_chunks(lines)
                result.lines_printed = len(lines)
            results.append(result)
        return results

    def cat_file(self, path: PathArg, method: ReadMethod | str = ReadMethod.SYSCALLS) -> None:
        """Print a whole file using the given read strategy."""
        method = ReadMethod(method)
        if method is ReadMethod.SYSCALLS:
            self._write_chunks(read_chunks(path, chunk_size=self._chunk_size))
        else:
            self._write_chunks(read_lines(path))

    def compare_file_methods(self, path: PathArg | None = None) -> bool:
        """
        Print a file twice, once per read strategy.

        Both reads are attempted; failures are logged, not raised.

        Args:
            path: File to read. Defaults to <root>/version.

        Returns:
            True if both reads succeeded.
        """
        target = Path(path) if path is not None else self._root / "version"
        self._write(f"Comparing file reading methods for: {target}\n\n")

        self._write("=== Method 1: Using System Calls ===\n")
        syscalls_ok = self._try_cat(target, ReadMethod.SYSCALLS)

        self._write("\n=== Method 2: Using Library Functions ===\n")
        library_ok = self._try_cat(target, ReadMethod.LIBRARY)

        self._write("\nNOTE: Run this program with strace to see the difference!\n")
        self._write("Example: strace -e trace=openat,read,write,close procinspect compare\n")
        return syscalls_ok and library_ok

    def _try_cat(self, path: Path, method: ReadMethod) -> bool:
        try:
            self.cat_file(path, method)
        except ProcReadError as exc:
            self.stream.flush()
            logger.error("%s read: %s", method.value, exc)
            return False
        return True

    def run(self, operation: str, *args: str) -> int:
        """
        Run an operation by name and report the outcome as an exit code.

        Args:
            operation: One of OPERATIONS.
            *args: Operation arguments (the PID for "info", a path for "cat"
                and optionally "compare", and a read method for "cat").

        Returns:
            EXIT_OK on success, EXIT_FAILURE otherwise.

        Raises:
            ValueError: Unknown operation or wrong number of operands.
        """
        if operation not in self.OPERATIONS:
            raise ValueError(f"unknown operation: {operation!r}")
        minimum, maximum = self.OPERATIONS[operation]
        if not minimum <= len(args) <= maximum:
            raise ValueError(
                f"{operation!r} takes {minimum} to {maximum} operands, got {len(args)}"
            )

        try:
            ok = self._dispatch(operation, *args)
        except ProcReadError as exc:
            self.stream.flush()
            logger.error("%s: %s", operation, exc)
            return EXIT_FAILURE

        self.stream.flush()
        return EXIT_OK if ok else EXIT_FAILURE

    def _dispatch(self, operation: str, *args: str) -> bool:
        if operation == "list":
            self.list_processes()
            return True
        if operation == "info":
            self.read_process_info(*args)
            return True
        if operation == "sysinfo":
            return all(result.ok for result in self.show_system_info())
        if operation == "compare":
            return self.compare_file_methods(*args)
        self.cat_file(*args)
        return True
