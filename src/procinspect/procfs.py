"""
Low-level procfs readers.

Two read strategies are provided so their system-call patterns can be
compared: read_chunks() drives os.open/os.read/os.close directly with a
fixed chunk size, read_lines() goes through Python's buffered file objects.
Every handle is released through a context manager on all exit paths, and
failures are raised as ProcOpenError, ProcReadFailure or ProcCloseError.
"""

import functools
import itertools
import logging
import os
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path

import psutil

from procinspect.errors import ProcCloseError, ProcOpenError, ProcReadFailure
from procinspect.models import ProcessEntry

logger = logging.getLogger(__name__)

DIGITS = frozenset("0123456789")
CHUNK_SIZE = 1024
CMDLINE_LIMIT = 4096
EMPTY_CMDLINE = "(empty command line)"

PathArg = str | os.PathLike

# psutil only defines PROCFS_PATH on platforms that have a procfs.
PROCFS_ROOT = getattr(psutil, "PROCFS_PATH", "/proc")


def is_pid_name(name: str | None) -> bool:
    """
    Check whether a directory entry name is a process identifier.

    Only ASCII digits count; str.isdigit() would also accept characters
    like '²' or Arabic-Indic digits.

    Args:
        name: Entry name, may be None.

    Returns:
        True if name is non-empty and made only of the characters 0-9.
    """
    return bool(name) and all(ch in DIGITS for ch in name)


def decode(data: bytes) -> str:
    """Decode procfs bytes for a text stream."""
    return data.decode("utf-8", errors="replace")


@contextmanager
def _closing(path: PathArg, close: Callable[[], None]) -> Iterator[None]:
    """Run close() on exit, mapping its failure to ProcCloseError."""
    try:
        yield
    except BaseException:
        # The pending error wins over a close failure.
        try:
            close()
        except OSError:
            logger.debug("close of %s failed while another error was pending", path)
        raise
    try:
        close()
    except OSError as exc:
        raise ProcCloseError(path, exc) from exc


@contextmanager
def open_process_listing(root: PathArg) -> Iterator[Iterator[ProcessEntry]]:
    """
    Open root for listing and yield an iterator of its numeric entries.

    The root is opened on entering the block, so an unreadable root fails
    before any of the block runs. The listing is closed when the block
    exits, however it exits.
    """
    try:
        listing = os.scandir(root)
    except OSError as exc:
        raise ProcOpenError(root, exc) from exc

    with _closing(root, listing.close):
        yield _numeric_entries(root, listing)


def _numeric_entries(root: PathArg, listing: Iterator[os.DirEntry]) -> Iterator[ProcessEntry]:
    while True:
        try:
            entry = next(listing, None)
        except OSError as exc:
            raise ProcReadFailure(root, exc) from exc
        if entry is None:
            break
        if is_pid_name(entry.name):
            yield ProcessEntry(entry.name)


def iter_process_entries(root: PathArg) -> Iterator[ProcessEntry]:
    """
    Yield a ProcessEntry for every numeric entry under root.

    Entries come in the order the filesystem enumerates them.
    """
    with open_process_listing(root) as entries:
        yield from entries


def read_chunks(
    path: PathArg,
    chunk_size: int = CHUNK_SIZE,
    limit: int | None = None,
) -> list[bytes]:
    """
    Read a file with unbuffered os.read() calls.

    Args:
        path: File to read.
        chunk_size: Maximum bytes requested per read() call.
        limit: Stop after this many bytes; extra content is dropped.

    Returns:
        The chunks in read order. Their concatenation is the file content
        (truncated to limit).
    """
    try:
        fd = os.open(path, os.O_RDONLY)
    except OSError as exc:
        raise ProcOpenError(path, exc) from exc

    chunks: list[bytes] = []
    total = 0
    with _closing(path, functools.partial(os.close, fd)):
        while limit is None or total < limit:
            size = chunk_size if limit is None else min(chunk_size, limit - total)
            try:
                chunk = os.read(fd, size)
            except OSError as exc:
                raise ProcReadFailure(path, exc) from exc
            if not chunk:
                break
            chunks.append(chunk)
            total += len(chunk)

    logger.debug("read %d bytes from %s in %d chunks", total, path, len(chunks))
    return chunks


def read_lines(path: PathArg, limit: int | None = None) -> list[bytes]:
    """
    Read newline-delimited lines through a buffered file object.

    Args:
        path: File to read.
        limit: Maximum number of lines; None reads to end of file.

    Returns:
        Lines with their line endings kept.
    """
    try:
        handle = open(path, "rb")
    except OSError as exc:
        raise ProcOpenError(path, exc) from exc

    with _closing(path, handle.close):
        try:
            lines = list(itertools.islice(handle, limit))
        except OSError as exc:
            raise ProcReadFailure(path, exc) from exc

    logger.debug("read %d lines from %s", len(lines), path)
    return lines


def format_cmdline(raw: bytes) -> str:
    """
    Render a NUL-separated command line record as one line of text.

    Trailing separators are dropped, so b"ls\\0-la\\0" becomes "ls -la".
    A record with no arguments (kernel threads, zombies) gives EMPTY_CMDLINE.
    """
    args = raw.rstrip(b"\0")
    if not args:
        return EMPTY_CMDLINE
    return decode(args.replace(b"\0", b" "))


def read_cmdline(
    path: PathArg,
    limit: int = CMDLINE_LIMIT,
    chunk_size: int = CHUNK_SIZE,
) -> str:
    """Read and format a cmdline record, capturing at most limit bytes."""
    return format_cmdline(b"".join(read_chunks(path, chunk_size=chunk_size, limit=limit)))


def process_path(root: PathArg, pid: str, name: str) -> Path:
    """Build <root>/<pid>/<name>."""
    return Path(root) / pid / name
