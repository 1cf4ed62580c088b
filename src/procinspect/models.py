"""Data models for procinspect."""

from dataclasses import dataclass

EXIT_OK = 0
EXIT_FAILURE = -1


@dataclass(slots=True, frozen=True)
class ProcessEntry:
    """A numeric procfs directory entry."""

    name: str  # As listed, never converted to int
    kind: str = "process"


@dataclass(slots=True)
class SectionResult:
    """Outcome of one section of the system snapshot."""

    label: str
    path: str
    lines_printed: int = 0
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        """Whether the section was read without error."""
        return self.error is None
