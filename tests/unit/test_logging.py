"""Unit tests for structlog setup and per-store log context."""

from __future__ import annotations

import logging

import pytest
import structlog

from fixtureid.core.logging import batch_context, configure_logging, store_context


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    structlog.reset_defaults()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestConfigureLogging:
    """Renderer and handler selection."""

    def test_json_renderer(self, restore_logging):
        configure_logging("DEBUG", json_logs=True)

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
        assert structlog.contextvars.merge_contextvars in processors
        assert logging.getLogger().level == logging.DEBUG

    def test_console_renderer(self, restore_logging):
        configure_logging("warning")

        assert isinstance(structlog.get_config()["processors"][-1], structlog.dev.ConsoleRenderer)
        assert logging.getLogger().level == logging.WARNING

    def test_log_file_handler(self, restore_logging, tmp_path):
        log_file = tmp_path / "logs" / "fixtureid.log"

        configure_logging(log_file=log_file)

        file_handlers = [h for h in logging.getLogger().handlers if isinstance(h, logging.FileHandler)]
        assert [h.baseFilename for h in file_handlers] == [str(log_file)]
        assert log_file.parent.is_dir()
        for handler in file_handlers:
            handler.close()


class TestLogContext:
    """Context binding for store and batch runs."""

    def test_store_context_binds_and_clears(self):
        with store_context("TR-1042", dry_run=True):
            assert structlog.contextvars.get_contextvars() == {"store_id": "TR-1042", "dry_run": True}

        assert structlog.contextvars.get_contextvars() == {}

    def test_store_context_clears_on_error(self):
        with pytest.raises(RuntimeError):
            with store_context("TR-1042"):
                raise RuntimeError("boom")

        assert "store_id" not in structlog.contextvars.get_contextvars()

    def test_batch_context_nests_store_context(self):
        with batch_context(stores=3) as batch_id:
            with store_context("TR-1042"):
                ctx = structlog.contextvars.get_contextvars()
            assert "store_id" not in structlog.contextvars.get_contextvars()

        assert ctx == {"batch_id": batch_id, "stores": 3, "store_id": "TR-1042"}
        assert len(batch_id) == 8
