"""Tests for settings resolution."""

import logging

import pytest
from pydantic import ValidationError

from beacon.core.config import Settings, get_settings, parse_duration, parse_size


@pytest.mark.parametrize(
    ("value", "expected"),
    [("100ms", 0.1), ("10s", 10.0), ("1m", 60.0), ("2", 2.0), (0.5, 0.5), (3, 3.0)],
)
def test_parse_duration(value, expected):
    assert parse_duration(value) == pytest.approx(expected)


@pytest.mark.parametrize(
    ("value", "expected"),
    [("5b", 5), ("768kb", 768 * 1024), ("1mb", 1024 * 1024), ("42", 42), (10, 10)],
)
def test_parse_size(value, expected):
    assert parse_size(value) == expected


@pytest.mark.parametrize("value", ["soon", "10h", "-1s", 0])
def test_invalid_duration(value):
    with pytest.raises(ValueError):
        parse_duration(value)


def test_defaults():
    settings = Settings()

    assert settings.server_url == "http://localhost:8200"
    assert settings.http_compression is True
    assert settings.verify_server_cert is True
    assert settings.disable_send is False
    assert settings.secret_token is None
    assert settings.api_request_time == 10.0
    assert settings.api_request_size == 768 * 1024
    assert settings.logger is logging.getLogger("beacon.transport")


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("BEACON_API_REQUEST_TIME", "100ms")
    monkeypatch.setenv("BEACON_API_REQUEST_SIZE", "5b")
    monkeypatch.setenv("BEACON_SECRET_TOKEN", "asd")
    monkeypatch.setenv("BEACON_HTTP_COMPRESSION", "false")

    settings = Settings()

    assert settings.api_request_time == pytest.approx(0.1)
    assert settings.api_request_size == 5
    assert settings.secret_token == "asd"
    assert settings.http_compression is False


def test_rejects_invalid_size():
    with pytest.raises(ValidationError):
        Settings(api_request_size="lots")


def test_logger_by_name():
    settings = Settings(logger="my.app.apm")

    assert settings.logger is logging.getLogger("my.app.apm")


def test_get_settings_is_cached():
    get_settings.cache_clear()
    try:
        assert get_settings() is get_settings()
    finally:
        get_settings.cache_clear()
