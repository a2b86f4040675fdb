"""Shared test fixtures for the Activity Insights agent."""

import sys
from pathlib import Path

# Ensure insights_core package is importable
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "agent"))

import pytest
from insights_core.config import log
from insights_core.credentials import CredentialStore
from insights_core.errors import FileReadError
from insights_core.file_lock import CredentialsLock


class FakeResponse:
    def __init__(self, status_code=204, text="", payload=None):
        self.status_code = status_code
        self.text = text
        self._payload = payload

    def json(self):
        if self._payload is None:
            raise ValueError("no json body")
        return self._payload


class FakeSession:
    """Records requests instead of sending them."""

    def __init__(self, post_response=None, get_response=None, error=None):
        self.posts = []
        self.gets = []
        self.closed = False
        self._post_response = post_response or FakeResponse(204)
        self._get_response = get_response or FakeResponse(200, payload={"version": 1})
        self._error = error

    def post(self, url, data=None, headers=None, **kwargs):
        self.posts.append({"url": url, "data": data, "headers": headers})
        if self._error:
            raise self._error
        return self._post_response

    def get(self, url, **kwargs):
        self.gets.append(url)
        if self._error:
            raise self._error
        return self._get_response

    def close(self):
        self.closed = True


class FakeClassifier:
    """Path → language lookup; unknown paths behave like unreadable files."""

    def __init__(self, languages):
        self.languages = dict(languages)
        self.calls = []

    def classify(self, path):
        self.calls.append(path)
        if path not in self.languages:
            raise FileReadError(path, FileNotFoundError(path))
        return self.languages[path]


@pytest.fixture(autouse=True)
def _reset_logger():
    """runner.main() installs file handlers; undo that between tests."""
    yield
    for handler in list(log.handlers):
        log.removeHandler(handler)
        handler.close()
    log.propagate = True


@pytest.fixture
def install_dir(tmp_path, monkeypatch):
    home = tmp_path / "insights-home"
    monkeypatch.setenv("ACTIVITY_INSIGHTS_HOME", str(home))
    monkeypatch.delenv("ACTIVITY_INSIGHTS_PULSE_URL", raising=False)
    return home


@pytest.fixture
def store(tmp_path):
    return CredentialStore(tmp_path / "credentials.yaml")


@pytest.fixture
def lock(tmp_path):
    lock = CredentialsLock(tmp_path / "credentials.yaml.lock")
    yield lock
    lock.release()


@pytest.fixture
def fake_session():
    return FakeSession()
