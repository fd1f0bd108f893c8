"""Protocol definitions for dependency injection.

These protocols define the abstract interfaces the scoring workflows depend on,
enabling isolated unit testing with in-memory implementations.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    import pandas as pd

    from .domain.models import MarketData, ValueEstimate


@runtime_checkable
class FileSystem(Protocol):
    """Abstract filesystem for reading/writing scoring inputs and outputs."""

    def read_csv(self, path: Path) -> pd.DataFrame:
        """Read CSV file into DataFrame (all columns as strings)."""
        ...

    def write_csv(self, df: pd.DataFrame, path: Path) -> None:
        """Write DataFrame to CSV file."""
        ...

    def read_json(self, path: Path) -> dict[str, object]:
        """Read JSON file."""
        ...

    def write_json(self, data: Mapping[str, object], path: Path) -> None:
        """Write JSON file."""
        ...

    def read_text(self, path: Path) -> str:
        """Read text file."""
        ...

    def write_text(self, content: str, path: Path) -> None:
        """Write text file."""
        ...

    def exists(self, path: Path) -> bool:
        """Check if path exists."""
        ...

    def mkdir(self, path: Path, parents: bool = True) -> None:
        """Create directory."""
        ...


@runtime_checkable
class ValuationService(Protocol):
    """External valuation collaborator consulted by ``ScoringEngine.score_async``."""

    async def evaluate(self, name: str, tld: str, market: MarketData) -> ValueEstimate:
        """Return a value estimate for ``name.tld``.

        Raises:
            ValuationServiceError: On transport or payload failures. Any other
                exception is treated the same way by the engine.
        """
        ...


@runtime_checkable
class ProgressReporter(Protocol):
    """CLI-owned progress reporting interface."""

    def start(self, label: str, total: int | None) -> None:
        """Start a progress session."""
        ...

    def advance(self, count: int) -> None:
        """Advance progress by count."""
        ...

    def finish(self) -> None:
        """Finish a progress session."""
        ...
