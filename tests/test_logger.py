# SPDX-License-Identifier: MIT
# Copyright (c) 2025 rcc-client contributors

"""Tests for the structured loggers."""

import json
import logging

import pytest

from rcc_client import Client, SilentLogger, StdoutLogger, create_logger


class TestCreateLogger:
    """Tests for the logger factory."""

    def test_stdout_logger(self):
        logger = create_logger(level="debug", silent=False, name="svc")
        assert isinstance(logger, StdoutLogger)
        assert logger.level == "DEBUG"
        assert logger.name == "svc"

    def test_silent_logger(self):
        assert isinstance(create_logger(silent=True), SilentLogger)

    def test_env_fallbacks(self, monkeypatch):
        monkeypatch.setenv("RCC_LOG_LEVEL", "warning")
        monkeypatch.delenv("RCC_LOG_SILENT", raising=False)
        logger = create_logger()
        assert isinstance(logger, StdoutLogger)
        assert logger.level == "WARNING"

        monkeypatch.setenv("RCC_LOG_SILENT", "yes")
        assert isinstance(create_logger(), SilentLogger)

    def test_invalid_level(self):
        with pytest.raises(ValueError, match="Invalid log level"):
            create_logger(level="LOUD", silent=False)


class TestBind:
    """Tests for context binding."""

    def test_bound_fields_added_to_every_record(self):
        logger = SilentLogger().bind(project_name="demo", env_name="prod")
        logger.info("Preload success", version_id=3)
        logger.warning("Store cache file failed")

        assert [log["fields"] for log in logger.logs] == [
            {"project_name": "demo", "env_name": "prod", "version_id": 3},
            {"project_name": "demo", "env_name": "prod"},
        ]

    def test_bind_leaves_parent_unchanged(self):
        parent = SilentLogger()
        child = parent.bind(env_name="prod")
        parent.info("plain")
        child.info("bound")

        # Records from both land in the parent's list
        assert parent.context == {}
        assert parent.logs[0]["fields"] == {}
        assert parent.logs[1]["fields"] == {"env_name": "prod"}

    def test_call_fields_override_bound_fields(self):
        logger = SilentLogger().bind(env_name="prod")
        logger.info("msg", env_name="staging")
        assert logger.logs[0]["fields"] == {"env_name": "staging"}

    def test_bind_keeps_stdout_level(self):
        logger = StdoutLogger(level="ERROR", name="rcc-bind").bind(project_name="demo")
        assert isinstance(logger, StdoutLogger)
        assert logger.level == "ERROR"
        assert logger.name == "rcc-bind"

    def test_client_records_carry_binding(self, make_conf, authority, silent_logger):
        client = Client(make_conf(), requester=authority, logger=silent_logger)
        client.start()
        client.stop()

        assert silent_logger.logs
        for log in silent_logger.logs:
            assert log["fields"]["project_name"] == "demo"
            assert log["fields"]["env_name"] == "prod"


class TestStdoutLogger:
    """Tests for StdoutLogger."""

    def test_invalid_level(self):
        with pytest.raises(ValueError, match="Invalid log level"):
            StdoutLogger(level="LOUD")

    def test_json_output(self, capsys):
        logger = StdoutLogger(level="INFO", name="rcc-test").bind(project_name="demo")
        logger.info("Preload success", env_name="prod")

        entry = json.loads(capsys.readouterr().out.strip())
        assert entry["level"] == "INFO"
        assert entry["logger"] == "rcc-test"
        assert entry["message"] == "Preload success"
        assert entry["fields"] == {"project_name": "demo", "env_name": "prod"}
        assert entry["timestamp"].endswith("Z")

    def test_level_filtering(self, capsys):
        logger = StdoutLogger(level="WARNING")
        logger.info("hidden")
        logger.debug("hidden")
        logger.warning("shown")

        lines = capsys.readouterr().out.strip().splitlines()
        assert len(lines) == 1
        assert json.loads(lines[0])["message"] == "shown"

    def test_emits_to_stdlib_logging(self, caplog):
        logger = StdoutLogger(level="INFO", name="rcc-caplog")
        with caplog.at_level(logging.INFO, logger="rcc-caplog"):
            logger.error("Store cache file failed", cache_file="/tmp/x")
        assert "Store cache file failed" in caplog.text
        assert caplog.records[0].fields == {"cache_file": "/tmp/x"}

    def test_exception_attaches_traceback(self, caplog):
        logger = StdoutLogger(level="INFO", name="rcc-exc")
        with caplog.at_level(logging.ERROR, logger="rcc-exc"):
            try:
                raise RuntimeError("boom")
            except RuntimeError:
                logger.exception("Watch callback raised")
        assert caplog.records[0].exc_info is not None
        assert "exc_info" not in json.dumps(caplog.records[0].fields)


class TestSilentLogger:
    """Tests for SilentLogger."""

    def test_captures_records(self):
        logger = SilentLogger()
        logger.info("one")
        logger.warning("two", key="value")
        logger.exception("three")

        assert len(logger.logs) == 3
        assert logger.logs[1] == {"level": "WARNING", "message": "two", "fields": {"key": "value"}}
        assert logger.has_log("thr", "ERROR")
        assert logger.has_log("one")
        assert not logger.has_log("one", "ERROR")
