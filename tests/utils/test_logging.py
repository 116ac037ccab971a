# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for the structured JSON logger.

We verify:
  - output is valid JSON
  - all mandatory fields are present (ts, level, module, msg)
  - log levels filter correctly and can be changed after creation
  - extra context fields get merged into the JSON
"""

import json
import logging
from pathlib import Path

import pytest

from relpack.logging import logger as logger_module
from relpack.logging.logger import get_logger, set_log_file, set_log_level


@pytest.fixture(autouse=True)
def _reset_loggers(monkeypatch: pytest.MonkeyPatch) -> None:
    """Clear test logger handlers and CLI defaults so nothing leaks between tests."""
    monkeypatch.setattr(logger_module, "_level_defaults", {})
    monkeypatch.setattr(logger_module, "_file_defaults", {})
    yield  # type: ignore[misc]
    for name in list(logging.Logger.manager.loggerDict):
        if name.startswith("relpack.test"):
            test_logger = logging.getLogger(name)
            for handler in test_logger.handlers:
                handler.close()
            test_logger.handlers.clear()


class TestJsonOutput:
    def test_mandatory_fields_are_present(self, capsys: pytest.CaptureFixture[str]) -> None:
        logger = get_logger("relpack.test.fields", log_level="INFO")
        logger.info("test message")

        parsed = json.loads(capsys.readouterr().out.strip())
        assert parsed["level"] == "INFO"
        assert parsed["module"] == "relpack.test.fields"
        assert parsed["msg"] == "test message"
        assert "ts" in parsed

    def test_extra_fields_are_included(self, capsys: pytest.CaptureFixture[str]) -> None:
        logger = get_logger("relpack.test.extra", log_level="DEBUG")
        logger.info("stage", extra={"stage": "pack_primary", "archive": Path("/b/p.tgz")})

        parsed = json.loads(capsys.readouterr().out.strip())
        assert parsed["stage"] == "pack_primary"
        assert parsed["archive"] == "/b/p.tgz"

    def test_exception_info_is_serialized(self, capsys: pytest.CaptureFixture[str]) -> None:
        logger = get_logger("relpack.test.exc", log_level="INFO")
        try:
            raise RuntimeError("kaboom")
        except RuntimeError:
            logger.error("failed", exc_info=True)

        parsed = json.loads(capsys.readouterr().out.strip())
        assert "kaboom" in parsed["exc"]


class TestLogLevels:
    def test_debug_hidden_at_info(self, capsys: pytest.CaptureFixture[str]) -> None:
        logger = get_logger("relpack.test.hidden", log_level="INFO")
        logger.debug("this should not appear")
        assert capsys.readouterr().out.strip() == ""

    def test_set_log_level_applies_to_existing_loggers(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        logger = get_logger("relpack.test.later", log_level="INFO")
        set_log_level("DEBUG", prefix="relpack.test")
        logger.debug("now visible")
        assert "now visible" in capsys.readouterr().out

    def test_set_log_level_applies_to_loggers_created_later(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        set_log_level("ERROR", prefix="relpack.test")
        logger = get_logger("relpack.test.imported_late")
        logger.info("should be filtered")
        logger.error("should appear")

        lines = [json.loads(line) for line in capsys.readouterr().out.splitlines()]
        assert [line["msg"] for line in lines] == ["should appear"]

    def test_explicit_level_beats_the_default(self, capsys: pytest.CaptureFixture[str]) -> None:
        set_log_level("ERROR", prefix="relpack.test")
        logger = get_logger("relpack.test.explicit", log_level="DEBUG")
        logger.debug("visible")
        assert "visible" in capsys.readouterr().out

    def test_invalid_level_raises_value_error(self) -> None:
        with pytest.raises(ValueError, match="Invalid log level"):
            get_logger("relpack.test.invalid", log_level="INVALID")


def test_logs_are_written_to_file(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "relpack.log"
    logger = get_logger("relpack.test.file_output", log_level="INFO", log_file=log_file)
    logger.info("file log test")

    parsed = json.loads(log_file.read_text(encoding="utf-8").strip())
    assert parsed["msg"] == "file log test"


class TestSetLogFile:
    def test_existing_logger_gets_file_handler(self, tmp_path: Path) -> None:
        log_file = tmp_path / "run.log"
        logger = get_logger("relpack.test.existing", log_level="INFO")
        set_log_file(log_file, prefix="relpack.test")
        logger.info("after set_log_file")

        parsed = json.loads(log_file.read_text(encoding="utf-8").strip())
        assert parsed["msg"] == "after set_log_file"

    def test_logger_created_later_writes_to_file(self, tmp_path: Path) -> None:
        log_file = tmp_path / "nested" / "run.log"
        set_log_file(log_file, prefix="relpack.test")
        get_logger("relpack.test.later_file").warning("from a late module")

        parsed = json.loads(log_file.read_text(encoding="utf-8").strip())
        assert parsed["module"] == "relpack.test.later_file"
        assert parsed["level"] == "WARNING"

    def test_file_handler_is_not_stacked(self, tmp_path: Path) -> None:
        log_file = tmp_path / "run.log"
        set_log_file(log_file, prefix="relpack.test")
        logger = get_logger("relpack.test.stacked")
        set_log_file(log_file, prefix="relpack.test")
        get_logger("relpack.test.stacked")
        logger.info("once")

        assert len(log_file.read_text(encoding="utf-8").splitlines()) == 1
