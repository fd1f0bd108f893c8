"""Progress bar for `dometrics score-file`.

The bar renders on stderr and disappears when the run finishes, so the scored
summary printed afterwards is the only lasting output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import override

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

from .protocols import ProgressReporter


def _build_progress() -> Progress:
    # stderr keeps stdout clean for --json output
    return Progress(
        TextColumn("[bold]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=Console(stderr=True),
        transient=True,
    )


def _default_task_id() -> TaskID | None:
    return None


@dataclass
class CliProgressReporter(ProgressReporter):
    """Progress bar over the domains of a batch scoring run."""

    _progress: Progress = field(default_factory=_build_progress)
    _task_id: TaskID | None = field(default_factory=_default_task_id)

    @override
    def start(self, label: str, total: int | None) -> None:
        if self._task_id is None:
            self._progress.start()
        else:
            self._progress.remove_task(self._task_id)
        self._task_id = self._progress.add_task(label, total=total)

    @override
    def advance(self, count: int) -> None:
        if self._task_id is not None:
            self._progress.advance(self._task_id, count)

    @override
    def finish(self) -> None:
        if self._task_id is None:
            return
        self._progress.remove_task(self._task_id)
        self._task_id = None
        self._progress.stop()
