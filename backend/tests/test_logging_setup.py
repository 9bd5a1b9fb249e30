import json
import logging

import pytest

from logging_setup import JsonFormatter, configure_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    level = root.level
    handlers = list(root.handlers)
    saved = [(handler, handler.level, handler.formatter) for handler in handlers]
    yield root
    root.setLevel(level)
    for handler, handler_level, formatter in saved:
        handler.setLevel(handler_level)
        handler.setFormatter(formatter)


@pytest.mark.unit
def test_json_formatter_includes_extra_fields():
    record = logging.makeLogRecord(
        {
            "name": "services.artifact_ingestion",
            "levelname": "INFO",
            "levelno": logging.INFO,
            "msg": "Artifact ingested",
            "package_name": "com.example.app",
            "version_code": 42,
        }
    )

    payload = json.loads(JsonFormatter().format(record))

    assert payload["message"] == "Artifact ingested"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "services.artifact_ingestion"
    assert payload["package_name"] == "com.example.app"
    assert payload["version_code"] == 42


@pytest.mark.unit
def test_configure_logging_sets_level_and_format(restore_root_logger):
    configure_logging("warning", "json")

    assert restore_root_logger.level == logging.WARNING
    assert all(isinstance(h.formatter, JsonFormatter) for h in restore_root_logger.handlers)


@pytest.mark.unit
def test_unknown_level_falls_back_to_info(restore_root_logger):
    configure_logging("chatty", "text")

    assert restore_root_logger.level == logging.INFO
