from __future__ import annotations

import json
import logging

import pytest

from restuser.app import main as main_module
from restuser.app.factory import ProviderFactory


@pytest.fixture(autouse=True)
def _restore_package_level():
    logger = logging.getLogger("restuser")
    previous = logger.level
    yield
    logger.setLevel(previous)


def _offline_factory() -> ProviderFactory:
    return ProviderFactory(probe=None)


def test_config_from_env_reads_prefixed_options() -> None:
    env = {
        "RESTUSER_BASEURL": "http://dir/",
        "RESTUSER_MAXHTTPCONNECTIONS": "3",
        "RESTUSER_APISOCKETTIMEOUT": "",
        "UNRELATED": "x",
    }

    assert main_module.config_from_env(env) == {
        "baseURL": "http://dir/",
        "maxHttpConnections": "3",
    }


def test_main_prints_pool_stats(monkeypatch, capsys) -> None:
    monkeypatch.setenv("RESTUSER_BASEURL", "http://dir.local/")
    monkeypatch.setenv("RESTUSER_MAXHTTPCONNECTIONS", "3")
    monkeypatch.setattr(main_module, "ProviderFactory", _offline_factory)

    code = main_module.main([])

    assert code == 0
    output = json.loads(capsys.readouterr().out)
    assert output["stats"]["maxConnections"] == 3
    assert output["stats"]["leasedConnections"] == 0


def test_main_reports_configuration_error(monkeypatch) -> None:
    monkeypatch.delenv("RESTUSER_BASEURL", raising=False)
    monkeypatch.setattr(main_module, "ProviderFactory", _offline_factory)

    assert main_module.main([]) == 2
