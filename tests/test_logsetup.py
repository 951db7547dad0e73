import logging

import pytest

from hubblecli import logsetup


@pytest.fixture(autouse=True)
def fresh(monkeypatch):
    monkeypatch.setattr(logsetup, "_logger", None)


def test_uninitialized_raises():
    with pytest.raises(RuntimeError):
        logsetup.get_logger()


def test_debug_level():
    logsetup.initialize(True)
    assert logsetup.get_logger().level == logging.DEBUG


def test_initialize_once():
    first = logsetup.initialize(False)
    second = logsetup.initialize(True)
    assert first is second
    assert second.level == logging.INFO