"""Tests for the ``encpass`` command line."""
import click
import pytest
from click.testing import CliRunner

from encpass.cli import cli
from encpass.conf import EncpassConfig
from encpass.prompt import prompt_secret
from encpass.session import Encpass
from encpass.store import SecretStore


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def invoke(runner, home):
    def _invoke(*args, input=None):
        return runner.invoke(cli, ["--home", str(home), *args], input=input)
    return _invoke


class TestGet:
    def test_prints_existing_secret(self, invoke, home):
        Encpass(EncpassConfig(home_dir=home)).set_secret("myapp", "db_password", "Tr0ub4dor&3")
        result = invoke("get", "myapp", "db_password")
        assert result.exit_code == 0, result.output
        assert result.output == "Tr0ub4dor&3\n"

    def test_prompts_when_missing(self, invoke, home):
        result = invoke("get", "myapp", "db_password", input="Tr0ub4dor&3\nTr0ub4dor&3\n")
        assert result.exit_code == 0, result.output
        assert result.output.splitlines()[-1] == "Tr0ub4dor&3"
        assert "Enter db_password:" in result.output
        assert (home / "secrets" / "myapp" / "db_password.enc").is_file()

    def test_corrupt_secret_exits_nonzero(self, invoke, home):
        vault = Encpass(EncpassConfig(home_dir=home))
        path = vault.set_secret("myapp", "token", "value")
        path.write_text("garbage")
        result = invoke("get", "myapp", "token")
        assert result.exit_code == 1
        assert "Error:" in result.output


class TestSet:
    def test_overwrites(self, invoke, home):
        vault = Encpass(EncpassConfig(home_dir=home))
        vault.set_secret("myapp", "token", "old")
        result = invoke("set", "myapp", "token", input="new\nnew\n")
        assert result.exit_code == 0, result.output
        assert "Stored" in result.output
        assert vault.get_secret("myapp", "token") == "new"

    def test_mismatch_exits_nonzero(self, invoke, home):
        result = invoke("set", "myapp", "token", input="one\ntwo\n")
        assert result.exit_code == 1
        assert "do not match" in result.output
        assert not (home / "secrets" / "myapp" / "token.enc").exists()

    def test_empty_value_accepted(self, invoke, home):
        result = invoke("set", "myapp", "blank", input="\n\n")
        assert result.exit_code == 0, result.output
        assert Encpass(EncpassConfig(home_dir=home)).get_secret("myapp", "blank") == ""


class TestOptions:
    def test_invalid_label(self, invoke):
        result = invoke("get", "..", "token")
        assert result.exit_code == 1
        assert "label" in result.output

    def test_invalid_configuration(self, runner, home, monkeypatch):
        monkeypatch.setenv("ENCPASS_CONFIRM_ATTEMPTS", "0")
        result = runner.invoke(cli, ["--home", str(home), "get", "a", "b"])
        assert result.exit_code == 1
        assert "invalid configuration" in result.output

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "encpass" in result.output


class TestPrompt:
    """The prompt reads hidden input and writes to stderr."""

    def test_prompt_secret_pair(self, monkeypatch):
        calls = []

        def fake_prompt(text, **kwargs):
            calls.append((text, kwargs))
            return "entered"

        monkeypatch.setattr("encpass.prompt.click.prompt", fake_prompt)
        assert prompt_secret("db_password") == ("entered", "entered")
        assert [text for text, _ in calls] == ["Enter db_password", "Confirm db_password"]
        for _, kwargs in calls:
            assert kwargs["hide_input"] is True
            assert kwargs["err"] is True

    @pytest.mark.parametrize("interrupt", [KeyboardInterrupt, EOFError])
    def test_interrupt_aborts(self, monkeypatch, interrupt):
        """Ctrl-C or end of input at the hidden prompt becomes click.Abort."""
        def hidden(prompt=""):
            raise interrupt()

        monkeypatch.setattr("click.termui.hidden_prompt_func", hidden)
        with pytest.raises(click.Abort):
            prompt_secret("db_password")

    def test_abort_writes_nothing(self, layout, keys, monkeypatch):
        def abort(text, **kwargs):
            raise click.Abort()

        monkeypatch.setattr("encpass.prompt.click.prompt", abort)
        store = SecretStore(layout, keys)
        with pytest.raises(click.Abort):
            store.set("myapp", "db_password")
        assert not store.exists("myapp", "db_password")

    def test_cli_abort_exits_nonzero(self, invoke, home, monkeypatch):
        def abort(text):
            raise click.Abort()

        monkeypatch.setattr("encpass.prompt.read_hidden", abort)
        result = invoke("get", "myapp", "db_password")
        assert result.exit_code == 1
        assert "Aborted" in result.output
        assert not (home / "secrets" / "myapp" / "db_password.enc").exists()


class TestDefaultLabel:
    def test_label_from_environment(self, invoke, home, monkeypatch):
        monkeypatch.setenv("ENCPASS_LABEL", "nightly-backup")
        result = invoke("set", "api_token", input="tok\ntok\n")
        assert result.exit_code == 0, result.output
        assert (home / "secrets" / "nightly-backup" / "api_token.enc").is_file()
        result = invoke("get", "api_token")
        assert result.output.splitlines()[-1] == "tok"

    def test_help_mentions_label_sharing(self, runner):
        result = runner.invoke(cli, ["get", "--help"])
        assert "ENCPASS_LABEL" in result.output
