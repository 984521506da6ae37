"""Tests for environment overrides."""

import pytest

from lassort import config
from lassort.errors import UsageError
from lassort.grid.types import FLUSH_THRESHOLD


def test_default_flush_threshold(monkeypatch) -> None:
    monkeypatch.delenv(config.FLUSH_THRESHOLD_ENV, raising=False)
    assert config.get_flush_threshold() == FLUSH_THRESHOLD == 1_000_000


def test_flush_threshold_override(monkeypatch) -> None:
    monkeypatch.setenv(config.FLUSH_THRESHOLD_ENV, "250000")
    assert config.get_flush_threshold() == 250_000

    monkeypatch.setenv(config.FLUSH_THRESHOLD_ENV, "  ")
    assert config.get_flush_threshold() == FLUSH_THRESHOLD


@pytest.mark.parametrize("value", ["abc", "0", "-5", "1.5"])
def test_invalid_flush_threshold(monkeypatch, value) -> None:
    monkeypatch.setenv(config.FLUSH_THRESHOLD_ENV, value)
    with pytest.raises(UsageError, match=config.FLUSH_THRESHOLD_ENV):
        config.get_flush_threshold()
