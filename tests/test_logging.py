"""Tests for chart_logging: run log files and error retrieval."""

import logging

import pytest

import chart_logging as recipe_logging
from chart_logging import (
    LOGGER_NAME,
    get_current_log_path,
    get_logger,
    get_recent_errors,
    log_error,
    print_recent_errors,
    setup_logging,
    tagged,
)


@pytest.fixture
def log_dir(tmp_path, monkeypatch):
    """Point the log directory at a temp dir and drop handlers afterwards."""
    monkeypatch.setattr(recipe_logging, "LOG_DIR", tmp_path / "logs")
    monkeypatch.setattr(recipe_logging, "_current_log_file", None)
    yield tmp_path / "logs"
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()


class TestSetupLogging:
    def test_creates_run_file(self, log_dir):
        logger = setup_logging()
        logger.info("hello", extra=tagged("test"))
        path = get_current_log_path()
        assert path.parent == log_dir
        assert path.name.startswith("recipes_")
        text = path.read_text(encoding="utf-8")
        assert "| test | hello" in text

    def test_untagged_records_get_dash(self, log_dir):
        setup_logging().info("plain")
        text = get_current_log_path().read_text(encoding="utf-8")
        assert "| - | plain" in text

    def test_console_level(self, log_dir):
        logger = setup_logging(verbose=False)
        console = [h for h in logger.handlers if not isinstance(h, logging.FileHandler)]
        assert console[0].level == logging.WARNING

        logger = setup_logging(verbose=True)
        console = [h for h in logger.handlers if not isinstance(h, logging.FileHandler)]
        assert console[0].level == logging.DEBUG

    def test_clean_console_format(self, log_dir, monkeypatch):
        import config
        monkeypatch.setattr(config, "get", lambda k, d=None: "clean" if k == "console_format" else d)
        logger = setup_logging()
        assert all(isinstance(h, logging.FileHandler) for h in logger.handlers)

    def test_reinit_replaces_handlers(self, log_dir):
        setup_logging()
        logger = setup_logging()
        assert len(logger.handlers) == 2
        assert logger.propagate is False

    def test_get_logger_configures_once(self, log_dir):
        logger = get_logger()
        assert logger.handlers
        assert get_logger() is logger


class TestErrors:
    def test_log_error_with_context_and_exception(self, log_dir):
        setup_logging()
        try:
            raise ValueError("bad column")
        except ValueError as e:
            log_error("Recipe 'x' failed", exc=e, context={"recipe": "x"})

        errors = get_recent_errors()
        assert len(errors) == 1
        err = errors[0]
        assert err["level"] == "ERROR"
        assert err["tag"] == "error"
        assert err["message"] == "Recipe 'x' failed"
        details = "\n".join(err["details"])
        assert "recipe: x" in details
        assert "Exception type: ValueError" in details
        assert "Stack trace:" in details

    def test_warnings_included(self, log_dir):
        logger = setup_logging()
        logger.warning("slow export")
        logger.info("fine")
        errors = get_recent_errors()
        assert [e["message"] for e in errors] == ["slow export"]

    def test_limit(self, log_dir):
        logger = setup_logging()
        for i in range(5):
            logger.error(f"e{i}")
        assert len(get_recent_errors(limit=3)) == 3

    def test_no_logs(self, log_dir):
        log_dir.mkdir(parents=True)
        assert get_recent_errors() == []

    def test_print_recent_errors_empty(self, log_dir, capsys):
        log_dir.mkdir(parents=True)
        print_recent_errors(days=3)
        assert "No errors found in the last 3 days" in capsys.readouterr().out

    def test_print_recent_errors(self, log_dir, capsys):
        setup_logging()
        log_error("export failed", context={"output": "a.png"})
        print_recent_errors()
        out = capsys.readouterr().out
        assert "export failed" in out
        assert "output: a.png" in out


class TestLibraryLogging:
    def test_store_load_recorded(self, log_dir):
        from data_ops.store import TableStore

        setup_logging()
        TableStore().get_or_load("mtcars")
        text = get_current_log_path().read_text(encoding="utf-8")
        assert "| data | Loaded built-in table 'mtcars'" in text

    def test_failed_build_recorded(self, log_dir):
        import pandas as pd
        from rendering.plotly_renderer import build_figure_from_spec

        setup_logging()
        spec = {"_meta": {"x": "a", "y": "nope"}, "layers": [{"type": "markers"}]}
        result = build_figure_from_spec(spec, pd.DataFrame({"a": [1, 2]}))
        assert result["status"] == "error"
        text = get_current_log_path().read_text(encoding="utf-8")
        assert "| render | Chart build failed" in text
