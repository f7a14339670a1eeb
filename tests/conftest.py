import pytest

from credplay import auth
from credplay.store import CredentialStore


@pytest.fixture
def store_path(tmp_path):
    return str(tmp_path / "passwd")


@pytest.fixture
def store(store_path):
    return CredentialStore(store_path)


@pytest.fixture
def salt():
    return bytes(range(16))


@pytest.fixture
def fake_getpass(monkeypatch):
    """Feed scripted answers to getpass.getpass, recording the prompts seen."""

    def install(*answers):
        remaining = list(answers)
        prompts = []

        def _getpass(prompt="Password: "):
            prompts.append(prompt)
            return remaining.pop(0)

        monkeypatch.setattr("getpass.getpass", _getpass)
        return prompts

    return install


@pytest.fixture
def low_cost(monkeypatch):
    """Keep CLI-created hashes cheap."""
    monkeypatch.setattr(auth, "DEF_HASH_COST", 2)
