import json
import logging

from httpmetrics.utils.logger import JsonFormatter, configure_logging, get_logger, reset_logging_for_tests


def test_get_logger_returns_logger():
    """Ensure get_logger returns a logger instance with the expected name."""
    name = __name__
    logger = get_logger(name)
    assert logger.name == name


def test_configure_logging_applies_explicit_level():
    reset_logging_for_tests()
    try:
        configure_logging("debug", "json")
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert isinstance(root.handlers[0].formatter, JsonFormatter)
    finally:
        reset_logging_for_tests()


def test_json_formatter_payload():
    record = logging.LogRecord("httpmetrics.test", logging.WARNING, __file__, 1, "scrape %s", ("ok",), None)
    payload = json.loads(JsonFormatter().format(record))
    assert payload["level"] == "WARNING"
    assert payload["name"] == "httpmetrics.test"
    assert payload["message"] == "scrape ok"
    assert payload["timestamp"].endswith("Z")


def test_explicit_settings_reapply_over_environment_defaults():
    reset_logging_for_tests()
    try:
        configure_logging()
        configure_logging("warning", "json")
        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JsonFormatter)
    finally:
        reset_logging_for_tests()
