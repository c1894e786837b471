import pytest

from encpass.conf import EncpassConfig
from encpass.keys import KeyStore
from encpass.layout import ensure_layout
from encpass.session import Encpass
from encpass.store import SecretStore


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("ENCPASS_LABEL", raising=False)
    monkeypatch.delenv("ENCPASS_CONFIRM_ATTEMPTS", raising=False)


class ScriptedPrompt:
    """Stands in for the terminal: returns queued (entry, confirmation) pairs."""

    def __init__(self, *pairs):
        self.pairs = list(pairs)
        self.calls = []

    def __call__(self, name):
        self.calls.append(name)
        return self.pairs.pop(0)


@pytest.fixture
def home(tmp_path):
    return tmp_path / "encpass-home"


@pytest.fixture
def layout(home):
    return ensure_layout(home)


@pytest.fixture
def keys(layout):
    return KeyStore(layout)


@pytest.fixture
def prompt():
    return ScriptedPrompt()


@pytest.fixture
def store(layout, keys, prompt):
    return SecretStore(layout, keys, prompt=prompt)


@pytest.fixture
def config(home):
    return EncpassConfig(home_dir=home)


@pytest.fixture
def vault(config, prompt):
    return Encpass(config, prompt=prompt)
