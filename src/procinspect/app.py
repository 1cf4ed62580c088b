"""procinspect - Textual browser over a procfs snapshot."""

import io

from textual.app import App, ComposeResult
from textual.containers import Container, VerticalScroll
from textual.widgets import DataTable, Footer, Static

from procinspect.errors import ProcReadError
from procinspect.inspector import MAX_LINES, ProcessInspector
from procinspect.models import EXIT_OK, ProcessEntry
from procinspect.procfs import CHUNK_SIZE, CMDLINE_LIMIT, PathArg, iter_process_entries


class ProcessTable(Container):
    """Container for the PID table."""

    DEFAULT_CSS = """
    ProcessTable {
        width: 32;
        border: solid $primary;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize ProcessTable."""
        super().__init__(*args, **kwargs)
        self._current_pids: set[str] = set()

    @property
    def current_pids(self) -> set[str]:
        """PIDs currently shown."""
        return set(self._current_pids)

    def compose(self) -> ComposeResult:
        """Compose the process table."""
        yield DataTable(id="process-table")

    def on_mount(self) -> None:
        """Initialize the data table when mounted."""
        self._table()

    def _table(self) -> DataTable:
        """The data table, with columns set up on first use."""
        table = self.query_one("#process-table", DataTable)
        if not table.columns:
            table.cursor_type = "row"
            table.add_column("PID", key="pid", width=8)
            table.add_column("Type", key="kind", width=20)
        return table

    def load_entries(self, entries: list[ProcessEntry]) -> None:
        """Replace the table rows, keeping listing order."""
        table = self._table()
        table.clear()
        for entry in entries:
            table.add_row(entry.name, entry.kind, key=entry.name)
        self._current_pids = {entry.name for entry in entries}


class InspectorApp(App):
    """Point-in-time process browser. Nothing refreshes until asked."""

    TITLE = "procinspect"
    SUB_TITLE = "Process Inspector"

    CSS = """
    Screen {
        layout: horizontal;
    }

    #detail-pane {
        width: 1fr;
        border: solid $secondary;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("r", "refresh", "Refresh"),
        ("s", "system_info", "System"),
        ("v", "compare", "Read methods"),
    ]

    def __init__(
        self,
        root: PathArg | None = None,
        max_lines: int = MAX_LINES,
        chunk_size: int = CHUNK_SIZE,
        cmdline_limit: int = CMDLINE_LIMIT,
    ) -> None:
        """Initialize the InspectorApp with the same options as ProcessInspector."""
        super().__init__()
        self._options = {
            "root": root,
            "max_lines": max_lines,
            "chunk_size": chunk_size,
            "cmdline_limit": cmdline_limit,
        }
        self._detail_text = ""

    @property
    def detail_text(self) -> str:
        """Text currently shown in the detail pane."""
        return self._detail_text

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield ProcessTable()
        with VerticalScroll(id="detail-pane"):
            yield Static("", id="detail", markup=False)
        yield Footer()

    def on_mount(self) -> None:
        """List processes once the table exists."""
        self.action_refresh()

    def _inspector(self, stream: io.StringIO) -> ProcessInspector:
        return ProcessInspector(stream=stream, **self._options)

    def _show(self, operation: str, *args: str) -> int:
        """Run an operation and put its output in the detail pane."""
        buffer = io.StringIO()
        status = self._inspector(buffer).run(operation, *args)
        self._detail_text = buffer.getvalue()
        self.query_one("#detail", Static).update(self._detail_text)
        if status != EXIT_OK:
            self.notify(f"{operation} failed, see log", severity="error")
        return status

    def show_process(self, pid: str) -> int:
        """Show status and command line of one process."""
        return self._show("info", pid)

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        """Show the selected process."""
        if event.row_key.value is not None:
            self.show_process(event.row_key.value)

    def action_refresh(self) -> None:
        """Re-list the process directories."""
        root = self._inspector(io.StringIO()).root
        try:
            entries = list(iter_process_entries(root))
        except ProcReadError as exc:
            self.notify(str(exc), severity="error")
            return
        self.query_one(ProcessTable).load_entries(entries)
        self.sub_title = f"{len(entries)} processes in {root}"

    def action_system_info(self) -> None:
        """Show the CPU and memory excerpt."""
        self._show("sysinfo")

    def action_compare(self) -> None:
        """Show the read method comparison."""
        self._show("compare")


def main() -> None:
    """Entry point for the procinspect browser."""
    app = InspectorApp()
    app.run()


if __name__ == "__main__":
    main()
