"""Custom exceptions for the Dometrics scoring engine.

These exceptions provide clear error handling and enable testing of error paths.
"""

from __future__ import annotations


class ScoringError(Exception):
    """Base exception for all scoring engine errors."""

    pass


class InvalidTimestamp(ScoringError, ValueError):
    """Raised when a load-bearing timestamp cannot be parsed.

    Expiry drives the risk score, so an unparseable value is a caller error
    rather than something to default silently.
    """

    def __init__(self, field_name: str, value: object) -> None:
        self.field_name = field_name
        self.value = value
        super().__init__(f"Invalid timestamp for {field_name}: {value!r}")


class InvalidConfiguration(ScoringError, ValueError):
    """Raised when a scoring weights configuration is unusable.

    Raised at engine construction so bad weights never reach scoring.
    """

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Invalid scoring configuration: {detail}")


class WeightsFileNotFoundError(InvalidConfiguration):
    """Raised when a weights document path does not exist."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(
            f"weights file not found at {path}. "
            "Unset DOMETRICS_WEIGHTS_PATH to use the built-in defaults."
        )


class WeightsValidationError(InvalidConfiguration):
    """Raised when a weights document fails schema validation."""

    def __init__(self, path: str, detail: str) -> None:
        self.path = path
        super().__init__(f"{path}: {detail}")


class InvalidDomainRecord(ScoringError, ValueError):
    """Raised when an inbound domain record fails validation."""

    def __init__(self, detail: str, row_number: int | None = None) -> None:
        self.row_number = row_number
        prefix = f"Row {row_number}: " if row_number is not None else ""
        super().__init__(f"{prefix}invalid domain record ({detail})")


class ValuationServiceError(ScoringError):
    """Raised when the external valuation service fails or returns garbage.

    The engine always recovers from this with the deterministic estimator.
    """

    def __init__(self, message: str) -> None:
        super().__init__(f"Valuation service failed: {message}")


class TrackedDomainsStoreError(ScoringError):
    """Raised when the tracked-domain store cannot be decoded."""

    def __init__(self, path: str, detail: str) -> None:
        self.path = path
        super().__init__(f"Tracked domains store {path} is invalid: {detail}")
