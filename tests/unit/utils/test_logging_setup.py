"""
Unit tests for category logging setup.
"""

import json
import logging
from pathlib import Path

import pytest

from streamta.utils.logging_setup import (
    CATEGORIES,
    ConsoleFormatter,
    JSONFormatter,
    get_category_for_module,
    get_logger,
    is_verbose_mode,
    setup_category_logging,
    shutdown_logging,
)
from streamta.utils.trace_context import new_bar


pytestmark = pytest.mark.usefixtures("reset_logging")


def make_record(msg: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord("streamta.engine", logging.INFO, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


# =============================================================================
# Routing
# =============================================================================

class TestRouting:
    """Module name to category mapping."""

    @pytest.mark.parametrize(
        "module,category",
        [
            ("streamta.domain.signals.confluence_engine", "engine"),
            ("streamta.domain.signals.engine_factory", "engine"),
            ("streamta.domain.signals.indicators.trend.atso", "signals"),
            ("streamta.domain.signals.core.moving_average", "signals"),
            ("streamta.domain.signals.reporting.plot_export", "system"),
            ("streamta.config.config_manager", "system"),
            ("__main__", "system"),
            ("somewhere.else", "system"),
        ],
    )
    def test_category(self, module: str, category: str) -> None:
        assert get_category_for_module(module) == category

    def test_logger_name(self) -> None:
        assert get_logger("streamta.domain.signals.indicators.momentum.rsi").name == "streamta.signals"
        assert get_logger("main").name == "streamta.system"


# =============================================================================
# Formatters
# =============================================================================

class TestFormatters:
    """JSON and console output."""

    def test_json(self) -> None:
        record = make_record("Label changed", bar_id="abc123", label="Bullish")
        entry = json.loads(JSONFormatter().format(record))

        assert entry["level"] == "INFO"
        assert entry["cat"] == "engine"
        assert entry["bar"] == "abc123"
        assert entry["msg"] == "Label changed"
        assert entry["data"] == {"label": "Bullish"}

    def test_json_without_extra(self) -> None:
        entry = json.loads(JSONFormatter().format(make_record("plain")))

        assert "data" not in entry
        assert entry["bar"] == "------"

    def test_console_plain(self) -> None:
        text = ConsoleFormatter(use_colors=False).format(make_record("Bar skipped", row=3))
        assert text == "[INFO   ] [------] Bar skipped row=3"

    def test_console_colors(self) -> None:
        text = ConsoleFormatter(use_colors=True).format(make_record("hello"))
        assert text.startswith("\033[32m[INFO   ]\033[0m")


# =============================================================================
# Setup
# =============================================================================

class TestSetup:
    """Handlers, levels and file output."""

    def test_file_output_with_bar_id(self, tmp_path: Path) -> None:
        setup_category_logging(log_dir=str(tmp_path), level="DEBUG", run_name="test")
        logger = get_logger("streamta.domain.signals.confluence_engine")

        with new_bar() as bar_id:
            logger.info("Bar ingested", extra={"count": 1})
        shutdown_logging()

        files = list(tmp_path.glob("*/streamta_test_eng_*.log"))
        assert len(files) == 1
        entry = json.loads(files[0].read_text(encoding="utf-8").splitlines()[0])
        assert entry["bar"] == bar_id
        assert entry["cat"] == "engine"
        assert entry["data"] == {"count": 1}

    def test_one_file_per_category(self, tmp_path: Path) -> None:
        setup_category_logging(log_dir=str(tmp_path), run_name="cats")
        for module in ("main", "streamta.domain.signals.core.statistics",
                       "streamta.domain.signals.confluence_engine"):
            get_logger(module).warning("hello")
        shutdown_logging()

        names = sorted(p.name.split("_")[2] for p in tmp_path.glob("*/*.log"))
        assert names == ["eng", "sig", "sys"]

    def test_level(self) -> None:
        loggers = setup_category_logging(log_dir=None, level="WARNING")

        assert set(loggers) == set(CATEGORIES)
        assert all(lg.level == logging.WARNING for lg in loggers.values())
        assert all(not lg.propagate for lg in loggers.values())

    def test_verbose(self) -> None:
        loggers = setup_category_logging(log_dir=None, level="ERROR", verbose=True)

        assert is_verbose_mode()
        assert loggers["signals"].level == logging.DEBUG

    def test_console_shows_warnings_only(self, capsys) -> None:
        setup_category_logging(log_dir=None, level="DEBUG", console=True)
        logger = get_logger("main")

        logger.info("quiet")
        logger.warning("loud", extra={"row": 7})

        err = capsys.readouterr().err
        assert "quiet" not in err
        assert "loud row=7" in err

    def test_setup_is_idempotent(self) -> None:
        setup_category_logging(log_dir=None, console=True)
        loggers = setup_category_logging(log_dir=None, console=True)

        assert all(len(lg.handlers) == 1 for lg in loggers.values())
        assert all(len(lg.filters) == 1 for lg in loggers.values())
