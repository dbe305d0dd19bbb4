import json
import logging

import pytest

from update_center.utils.logger import JsonLogger, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)


def test_setup_logging_writes_rotating_file(tmp_path, restore_root_logger) -> None:
    log_file = tmp_path / "logs" / "update_center.log"

    setup_logging(log_file=str(log_file), level="debug")
    setup_logging(log_file=str(log_file), level="debug")
    logging.getLogger("update_center.test").info("catalog ready")

    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert len([h for h in root.handlers if getattr(h, "_update_center", False)]) == 2
    for handler in root.handlers:
        handler.flush()
    assert "catalog ready" in log_file.read_text()


def test_audit_record_is_json(caplog) -> None:
    with caplog.at_level(logging.INFO, logger="json_logger"):
        JsonLogger.log_audit("publish_version", "release-manager", "app_version", {"version": "1.2.0"})

    record = json.loads(caplog.records[-1].getMessage())
    assert record["event_type"] == "audit"
    assert record["data"]["user"] == "release-manager"
    assert record["data"]["details"] == {"version": "1.2.0"}


def test_unknown_level_falls_back_to_info(caplog) -> None:
    with caplog.at_level(logging.INFO, logger="json_logger"):
        JsonLogger.log_event("catalog_changed", {"action": "publish"}, level="verbose")

    assert caplog.records[-1].levelno == logging.INFO
