"""Centralised, injectable configuration for the Dometrics scoring engine."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Self

from dotenv import load_dotenv

DEFAULT_VALUATION_BASE_URL = "https://api.deepseek.com/v1/chat/completions"
DEFAULT_VALUATION_MODEL = "deepseek-chat"
DEFAULT_TRACKED_DOMAINS_PATH = "data/state/tracked_domains.json"


class PositiveNumberEnvVarError(ValueError):
    """Raised when an environment variable must be a positive number."""

    def __init__(self, env_name: str) -> None:
        super().__init__(f"{env_name} must be a positive number.")


class BooleanEnvVarError(ValueError):
    """Raised when an environment variable must be a supported boolean."""

    def __init__(self, env_name: str) -> None:
        super().__init__(f"{env_name} must be a boolean value (true/false, 1/0, yes/no, on/off).")


@dataclass(frozen=True)
class EngineConfig:
    """Immutable configuration for the engine and its collaborators.

    Load from environment with `EngineConfig.from_env()` or construct directly for testing.
    """

    # Weights document; empty means the built-in defaults
    weights_path: str = ""

    # External valuation service
    valuation_api_key: str = ""
    valuation_base_url: str = DEFAULT_VALUATION_BASE_URL
    valuation_model: str = DEFAULT_VALUATION_MODEL
    valuation_timeout_seconds: float = 8.0
    use_valuation: bool = False

    # Tracked domains store
    tracked_domains_path: str = DEFAULT_TRACKED_DOMAINS_PATH

    @property
    def valuation_enabled(self) -> bool:
        return self.use_valuation and bool(self.valuation_api_key)

    @classmethod
    def from_env(cls, dotenv_path: str | None = None) -> Self:
        """Load configuration from environment variables.

        Args:
            dotenv_path: Optional path to .env file. If None, uses default .env discovery.

        Returns:
            EngineConfig instance populated from environment.
        """
        load_dotenv(dotenv_path)

        return cls(
            weights_path=os.getenv("DOMETRICS_WEIGHTS_PATH", "").strip(),
            valuation_api_key=os.getenv("VALUATION_API_KEY", "").strip(),
            valuation_base_url=os.getenv("VALUATION_BASE_URL", "").strip()
            or DEFAULT_VALUATION_BASE_URL,
            valuation_model=os.getenv("VALUATION_MODEL", "").strip() or DEFAULT_VALUATION_MODEL,
            valuation_timeout_seconds=_parse_positive_float(
                os.getenv("VALUATION_TIMEOUT_SECONDS", "8"),
                env_name="VALUATION_TIMEOUT_SECONDS",
            ),
            use_valuation=_parse_optional_bool(
                os.getenv("DOMETRICS_USE_VALUATION", ""),
                env_name="DOMETRICS_USE_VALUATION",
            )
            or False,
            tracked_domains_path=os.getenv("TRACKED_DOMAINS_PATH", "").strip()
            or DEFAULT_TRACKED_DOMAINS_PATH,
        )

    def with_overrides(
        self,
        *,
        weights_path: str | None = None,
        use_valuation: bool | None = None,
        valuation_timeout_seconds: float | None = None,
        tracked_domains_path: str | None = None,
    ) -> Self:
        """Return a new config with specified overrides (for CLI options)."""
        return replace(
            self,
            weights_path=self.weights_path if weights_path is None else weights_path.strip(),
            use_valuation=self.use_valuation if use_valuation is None else use_valuation,
            valuation_timeout_seconds=self.valuation_timeout_seconds
            if valuation_timeout_seconds is None
            else valuation_timeout_seconds,
            tracked_domains_path=self.tracked_domains_path
            if tracked_domains_path is None
            else tracked_domains_path.strip(),
        )


def _parse_positive_float(value: str, *, env_name: str) -> float:
    """Parse a positive number from an environment variable."""
    text = value.strip()
    try:
        parsed = float(text)
    except ValueError as exc:
        raise PositiveNumberEnvVarError(env_name) from exc
    if parsed <= 0:
        raise PositiveNumberEnvVarError(env_name)
    return parsed


def _parse_optional_bool(value: str, *, env_name: str) -> bool | None:
    """Parse an optional boolean from an environment variable."""
    text = value.strip().lower()
    if not text:
        return None
    if text in {"1", "true", "yes", "y", "on"}:
        return True
    if text in {"0", "false", "no", "n", "off"}:
        return False
    raise BooleanEnvVarError(env_name)
