"""Exports for test fakes."""

from .filesystem import InMemoryFileSystem
from .progress import FakeProgressReporter
from .valuation import FakeValuationService

__all__ = [
    "FakeProgressReporter",
    "FakeValuationService",
    "InMemoryFileSystem",
]
