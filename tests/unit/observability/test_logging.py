"""Tests for the logging setup."""

from __future__ import annotations

import json
import logging

import pytest

from openalias.config.settings import ObservabilitySettings
from openalias.observability.logging import setup_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers, root.level = handlers, level


class TestSetupLogging:
    def test_json_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        setup_logging(ObservabilitySettings(log_level="info", log_format="json"))

        logging.getLogger("openalias.test").info("Created index %s", "book_fr_20210101")

        line = capsys.readouterr().out.strip().splitlines()[-1]
        record = json.loads(line)
        assert record["event"] == "Created index book_fr_20210101"
        assert record["level"] == "info"
        assert record["logger"] == "openalias.test"

    def test_level(self, capsys: pytest.CaptureFixture[str]) -> None:
        setup_logging(ObservabilitySettings(log_level="warning", log_format="console"))

        logging.getLogger("openalias.test").info("hidden")

        assert "hidden" not in capsys.readouterr().out
        assert logging.getLogger().level == logging.WARNING
