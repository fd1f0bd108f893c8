"""Tests for shared observability logging."""

import logging
import time

import pytest

from dometrics_scoring.observability.logging import get_logger


def test_get_logger_formats_utc_timestamps(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    fixed = time.struct_time((2025, 1, 2, 3, 4, 5, 3, 2, 0))

    def fake_gmtime(_: float | None = None) -> time.struct_time:
        return fixed

    monkeypatch.setattr(time, "gmtime", fake_gmtime)

    name = "dometrics_scoring.test.logging"
    logger = get_logger(name)
    logger.info("Scored %s domains", 3)

    captured = capsys.readouterr()
    assert "2025-01-02T03:04:05+0000 INFO dometrics_scoring.test.logging: Scored 3 domains" in (
        captured.err
    )


def test_get_logger_is_singleton_per_name() -> None:
    name = "dometrics_scoring.test.logging.singleton"
    logger = get_logger(name)
    logger_again = get_logger(name)

    assert logger is logger_again
    assert len(logger.handlers) == 1
    assert logger.level == logging.INFO
    assert not logger.propagate
