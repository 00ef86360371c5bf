from __future__ import annotations

import logging

import pytest

from restuser.tests.unit.adapters.helpers import ResponseStub, make_gateway
from restuser.utils.logging import (
    PACKAGE_LOGGER,
    configure_logging,
    parse_level,
    response_bodies_enabled,
)


@pytest.fixture(autouse=True)
def _restore_levels():
    names = ("", PACKAGE_LOGGER, "urllib3")
    previous = {name: logging.getLogger(name).level for name in names}
    yield
    for name, level in previous.items():
        logging.getLogger(name).setLevel(level)


def test_explicit_level_env_wins_over_debug_flag() -> None:
    env = {"RESTUSER_LOG_LEVEL": "warning", "RESTUSER_DEBUG": "1"}

    assert configure_logging(logging.INFO, environ=env) == logging.WARNING
    assert logging.getLogger(PACKAGE_LOGGER).level == logging.WARNING


def test_debug_flag_enables_debug_for_package_and_pool() -> None:
    assert configure_logging(environ={"RESTUSER_DEBUG": "yes"}) == logging.DEBUG
    assert logging.getLogger("restuser.adapters.http_client").isEnabledFor(logging.DEBUG)
    assert logging.getLogger("urllib3").level == logging.DEBUG


def test_default_level_used_without_overrides() -> None:
    assert configure_logging("error", environ={}) == logging.ERROR
    assert logging.getLogger("urllib3").level == logging.WARNING


def test_root_level_is_left_to_the_host() -> None:
    root = logging.getLogger()
    root.setLevel(logging.CRITICAL)

    configure_logging(logging.DEBUG, environ={})

    assert root.level == logging.CRITICAL


@pytest.mark.parametrize("value", ["²", "loud", "  "])
def test_unparseable_level_falls_back_to_default(value: str) -> None:
    assert configure_logging(logging.INFO, environ={"RESTUSER_LOG_LEVEL": value}) == logging.INFO


@pytest.mark.parametrize(
    ("value", "expected"),
    [("debug", logging.DEBUG), (" 30 ", 30), (logging.ERROR, logging.ERROR), (None, logging.INFO)],
)
def test_parse_level(value, expected) -> None:
    assert parse_level(value) == expected


def test_response_bodies_enabled_reads_flag() -> None:
    assert response_bodies_enabled({"RESTUSER_LOG_BODIES": "true"})
    assert not response_bodies_enabled({"RESTUSER_LOG_BODIES": "0"})
    assert not response_bodies_enabled({})


def test_response_body_logged_only_when_enabled(monkeypatch, caplog) -> None:
    caplog.set_level(logging.DEBUG, logger=PACKAGE_LOGGER)
    monkeypatch.delenv("RESTUSER_LOG_BODIES", raising=False)
    gateway, _ = make_gateway([ResponseStub({"username": "alice", "email": "private@x"})])

    gateway.find_user_by_username("alice")
    assert "private@x" not in caplog.text

    monkeypatch.setenv("RESTUSER_LOG_BODIES", "1")
    gateway, _ = make_gateway([ResponseStub({"username": "alice", "email": "private@x"})])

    gateway.find_user_by_username("alice")
    assert "private@x" in caplog.text
