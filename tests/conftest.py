import logging

import pytest
import responses

from comapeo_cloud.client import ComapeoClient
from comapeo_cloud.config.settings import ServerCredentials

from server_responses import ACCESS_TOKEN, SERVER_URL


def clear_env(monkeypatch, name):
    # setenv first so variables later loaded from .env files are undone too
    monkeypatch.setenv(name, "")
    monkeypatch.delenv(name)


@pytest.fixture
def mocked_responses():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


@pytest.fixture
def client():
    with ComapeoClient(ServerCredentials(SERVER_URL, ACCESS_TOKEN), timeout=5) as api_client:
        yield api_client


@pytest.fixture
def server_env(monkeypatch, tmp_path):
    """Credentials in the environment and an empty working directory."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("SERVER_URL", SERVER_URL)
    monkeypatch.setenv("SERVER_BEARER_TOKEN", ACCESS_TOKEN)
    for name in ("COMAPEO_CONFIG", "REQUEST_TIMEOUT", "EXPORT_SCRATCH_DIR", "EXPORT_MAX_WORKERS"):
        clear_env(monkeypatch, name)
    return tmp_path


@pytest.fixture
def no_server_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in ("SERVER_URL", "SERVER_BEARER_TOKEN", "COMAPEO_CONFIG",
                 "REQUEST_TIMEOUT", "EXPORT_SCRATCH_DIR", "EXPORT_MAX_WORKERS"):
        clear_env(monkeypatch, name)
    return tmp_path


@pytest.fixture(autouse=True)
def reset_root_handlers():
    """Drop stream handlers installed by setup_logging during CLI runs."""
    yield
    root = logging.getLogger()
    for handler in list(root.handlers):
        if type(handler) is logging.StreamHandler:
            root.removeHandler(handler)
