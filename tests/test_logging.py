"""Tests for logging setup."""

import logging

import pytest

from beacon.core.logging import setup_logging


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    beacon = logging.getLogger("beacon")
    handlers, root_level, beacon_level = root.handlers[:], root.level, beacon.level
    yield
    root.handlers[:] = handlers
    root.setLevel(root_level)
    beacon.setLevel(beacon_level)


def test_sets_beacon_level(restore_logging):
    setup_logging("debug")

    assert logging.getLogger("beacon").level == logging.DEBUG
    assert logging.getLogger("beacon.transport").isEnabledFor(logging.DEBUG)


def test_installs_console_handler(restore_logging):
    setup_logging()

    handlers = logging.getLogger().handlers
    assert any(isinstance(handler, logging.StreamHandler) for handler in handlers)
    assert logging.getLogger("beacon").level == logging.INFO


def test_sets_level_on_injected_logger(restore_logging):
    injected = logging.getLogger("myapp.apm")
    previous = injected.level
    try:
        setup_logging("error", ("beacon", "myapp.apm", "beacon"))

        assert injected.level == logging.ERROR
        assert logging.getLogger("beacon").level == logging.ERROR
    finally:
        injected.setLevel(previous)
