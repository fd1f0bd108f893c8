"""Infrastructure implementations for filesystem and valuation IO."""

from .filesystem import LocalFileSystem
from .valuation import ChatCompletionValuationService

__all__ = ["ChatCompletionValuationService", "LocalFileSystem"]
