import logging

from reportgen.config import (
    DEFAULT_JOIN_DELIMITER,
    DEFAULT_UNKNOWN_SN,
    ENV_JOIN_DELIMITER,
    ENV_LOG_LEVEL,
    ENV_UNKNOWN_SN,
    ReportSettings,
    resolve_log_level,
)


def test_log_level_defaults_to_info(monkeypatch):
    monkeypatch.delenv(ENV_LOG_LEVEL, raising=False)
    assert resolve_log_level() == logging.INFO


def test_log_level_from_name_or_number(monkeypatch):
    monkeypatch.setenv(ENV_LOG_LEVEL, "debug")
    assert resolve_log_level() == logging.DEBUG
    monkeypatch.setenv(ENV_LOG_LEVEL, "30")
    assert resolve_log_level() == 30


def test_log_level_unknown_name_falls_back(monkeypatch):
    monkeypatch.setenv(ENV_LOG_LEVEL, "chatty")
    assert resolve_log_level() == logging.INFO


def test_settings_defaults(monkeypatch):
    monkeypatch.delenv(ENV_UNKNOWN_SN, raising=False)
    monkeypatch.delenv(ENV_JOIN_DELIMITER, raising=False)
    settings = ReportSettings.from_env()
    assert settings.unknown_identifier == DEFAULT_UNKNOWN_SN == "UnknownSN"
    assert settings.join_delimiter == DEFAULT_JOIN_DELIMITER == "/"


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv(ENV_UNKNOWN_SN, "NoSerial")
    monkeypatch.setenv(ENV_JOIN_DELIMITER, ", ")
    settings = ReportSettings.from_env()
    assert settings.unknown_identifier == "NoSerial"
    assert settings.join_delimiter == ", "
