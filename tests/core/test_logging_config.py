import logging

from app.core import logging_config
from app.core.logging_config import build_logging_config, get_logger


def test_app_loggers_share_the_app_hierarchy():
    logger = get_logger("generation")

    assert logger.name == "app.generation"
    assert logging.getLogger("app").propagate is False


def test_outbound_http_logging_is_quiet():
    config = build_logging_config()

    assert config["loggers"]["httpx"]["level"] == "WARNING"
    assert config["loggers"]["sqlalchemy"]["level"] == "WARNING"
    assert logging.getLogger("httpx").level == logging.WARNING


def test_file_handler_only_with_log_file(monkeypatch, tmp_path):
    monkeypatch.setattr(logging_config.settings, "LOG_FILE", None)
    assert "file" not in build_logging_config()["handlers"]

    log_file = tmp_path / "flashgen.log"
    monkeypatch.setattr(logging_config.settings, "LOG_FILE", str(log_file))
    config = build_logging_config()

    assert config["handlers"]["file"]["filename"] == str(log_file)
    assert config["loggers"]["app"]["handlers"] == ["console", "file"]
