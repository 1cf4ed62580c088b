"""Errors raised while reading procfs."""

import os


class ProcReadError(Exception):
    """A procfs path could not be opened, read or closed."""

    operation = "access"

    def __init__(self, path: str | os.PathLike, cause: BaseException | str | None = None) -> None:
        self.path = os.fspath(path)
        self.cause = cause
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.cause is None:
            return f"{self.operation} failed for {self.path}"
        return f"{self.operation} failed for {self.path}: {self.cause}"


class ProcOpenError(ProcReadError):
    operation = "open"


class ProcReadFailure(ProcReadError):
    operation = "read"


class ProcCloseError(ProcReadError):
    operation = "close"
