import logging

import pytest

import unity_provision.utils.config as config_mod


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch, tmp_path):
    monkeypatch.setattr(config_mod, "CONFIG_FILE", tmp_path / "config.json")
    monkeypatch.delenv(config_mod.CATALOG_ENV_VAR, raising=False)
    config_mod.reload_config()
    yield
    config_mod.reload_config()


@pytest.fixture(autouse=True)
def _reset_package_logger():
    yield
    logger = logging.getLogger("unity_provision")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def test_logger():
    return logging.getLogger("tests.unity_provision")
