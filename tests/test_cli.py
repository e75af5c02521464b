"""
Tests for the command-line interface.
"""

import json
import os

import pytest
from click.testing import CliRunner

from lpkm import Repository
from lpkm.cli import format_key_list, format_rename, main
from lpkm.models import KeyRecord, RenameResult


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def repo_path(tmp_path, runner):
    path = str(tmp_path / "repo")
    result = runner.invoke(main, ["--repo", path, "init"])
    assert result.exit_code == 0, result.output
    return path


def run(runner, repo_path, *args, **kwargs):
    return runner.invoke(main, ["--repo", repo_path, *args], **kwargs)


class TestFormatting:
    """Test text rendering."""

    def test_names_only(self):
        records = [KeyRecord("self", "QmSelf"), KeyRecord("a", "QmA")]
        assert format_key_list(records, False) == "self\na\n"

    def test_identity_columns_aligned(self):
        records = [KeyRecord("self", "QmLonger"), KeyRecord("a", "QmA")]
        assert format_key_list(records, True) == "QmLonger self \nQmA      a    \n"

    def test_rename_lines(self):
        plain = RenameResult(was="a", now="b", identity="QmA", overwrote=False)
        forced = RenameResult(was="a", now="b", identity="QmA", overwrote=True)

        assert format_rename(plain) == "Key QmA renamed to b\n"
        assert format_rename(forced) == "Key QmA renamed to b with overwriting\n"


class TestInit:
    """Test repository initialization."""

    def test_init_creates_self_key(self, runner, repo_path):
        """Test that init writes the self key and id reports it."""
        assert os.path.isfile(os.path.join(repo_path, "identity.pem"))

        result = run(runner, repo_path, "id")
        with Repository(repo_path) as repo:
            assert result.output == repo.identity + "\n"

    def test_init_twice_fails(self, runner, repo_path):
        result = run(runner, repo_path, "init")

        assert result.exit_code == 1
        assert "already initialized" in result.output

    def test_missing_repo(self, runner, tmp_path):
        result = run(runner, str(tmp_path / "nowhere"), "key", "list")

        assert result.exit_code == 1
        assert "lpkm init" in result.output

    def test_repo_from_environment(self, runner, repo_path):
        result = runner.invoke(main, ["key", "list"], env={"LPKM_PATH": repo_path})

        assert result.exit_code == 0
        assert result.output == "self\n"


class TestKeyCommands:
    """Test key subcommands end to end."""

    def test_gen_prints_identity(self, runner, repo_path):
        result = run(runner, repo_path, "key", "gen", "mykey", "--type=ed25519")

        assert result.exit_code == 0, result.output
        with Repository(repo_path) as repo:
            assert result.output == repo.keystore.get("mykey").get_identity() + "\n"

    def test_gen_rsa_requires_size(self, runner, repo_path):
        result = run(runner, repo_path, "key", "gen", "mykey", "--type=rsa")

        assert result.exit_code == 1
        assert "Error: please specify a key size with --size" in result.output

    def test_gen_requires_type(self, runner, repo_path):
        result = run(runner, repo_path, "key", "gen", "mykey")

        assert result.exit_code == 1
        assert "--type" in result.output

    def test_gen_self_rejected(self, runner, repo_path):
        result = run(runner, repo_path, "key", "gen", "self", "--type=ed25519")

        assert result.exit_code == 1
        assert "cannot create key with name 'self'" in result.output

    def test_list(self, runner, repo_path):
        run(runner, repo_path, "key", "gen", "bob", "-t", "ed25519")
        run(runner, repo_path, "key", "gen", "alice", "-t", "ed25519")

        result = run(runner, repo_path, "key", "list")
        assert result.output == "self\nalice\nbob\n"

        result = run(runner, repo_path, "key", "list", "-l")
        lines = result.output.splitlines()
        assert [line.split()[1] for line in lines] == ["self", "alice", "bob"]
        assert all(line.startswith("Qm") for line in lines)

    def test_list_json(self, runner, repo_path):
        gen = run(runner, repo_path, "key", "gen", "a", "-t", "ed25519")

        result = run(runner, repo_path, "--enc", "json", "key", "list")
        keys = json.loads(result.output)["keys"]

        assert [k["name"] for k in keys] == ["self", "a"]
        assert keys[1]["identity"] == gen.output.strip()

    def test_rename(self, runner, repo_path):
        identity = run(runner, repo_path, "key", "gen", "a", "-t", "ed25519").output.strip()
        run(runner, repo_path, "key", "gen", "b", "-t", "ed25519")

        result = run(runner, repo_path, "key", "rename", "a", "b")
        assert result.exit_code == 1

        result = run(runner, repo_path, "key", "rename", "a", "b", "--force")
        assert result.exit_code == 0
        assert result.output == f"Key {identity} renamed to b with overwriting\n"

    def test_rm(self, runner, repo_path):
        run(runner, repo_path, "key", "gen", "a", "-t", "ed25519")
        run(runner, repo_path, "key", "gen", "b", "-t", "ed25519")

        result = run(runner, repo_path, "key", "rm", "b", "a")
        assert result.exit_code == 0
        assert result.output == "b\na\n"

        assert run(runner, repo_path, "key", "list").output == "self\n"

    def test_rm_missing_removes_nothing(self, runner, repo_path):
        run(runner, repo_path, "key", "gen", "a", "-t", "ed25519")

        result = run(runner, repo_path, "key", "rm", "a", "missing")
        assert result.exit_code == 1
        assert "no key named missing was found" in result.output

        assert run(runner, repo_path, "key", "list").output == "self\na\n"

    def test_rm_names_from_stdin(self, runner, repo_path):
        run(runner, repo_path, "key", "gen", "a", "-t", "ed25519")

        result = run(runner, repo_path, "key", "rm", input="a\n")
        assert result.exit_code == 0
        assert result.output == "a\n"

    def test_internal_error_exit_code(self, runner, repo_path):
        """Test that storage failures are reported as internal errors."""
        run(runner, repo_path, "key", "gen", "a", "-t", "ed25519")
        with Repository(repo_path) as repo:
            with repo.keystore.db.transaction():
                repo.keystore.db.execute("UPDATE keys SET key_data = ? WHERE name = ?", (b"junk", "a"))

        result = run(runner, repo_path, "key", "list")
        assert result.exit_code == 3
        assert "Internal error:" in result.output


class TestExitCodes:
    """Test that client, usage and internal failures exit distinctly."""

    def test_unknown_key_type_is_input_error(self, runner, repo_path):
        result = run(runner, repo_path, "key", "gen", "x", "--type=dsa")

        assert result.exit_code == 1
        assert "Error: unrecognized key type: dsa" in result.output

    def test_key_type_case_insensitive(self, runner, repo_path):
        result = run(runner, repo_path, "key", "gen", "x", "--type=Ed25519")

        assert result.exit_code == 0, result.output

    def test_init_unknown_key_type(self, runner, tmp_path):
        result = run(runner, str(tmp_path / "repo"), "init", "--type=dsa")

        assert result.exit_code == 1
        assert not (tmp_path / "repo").exists()

    def test_malformed_size_is_usage_error(self, runner, repo_path):
        """Test that click rejects a non-integer size before anything runs."""
        result = run(runner, repo_path, "key", "gen", "x", "--type=rsa", "--size", "abc")

        assert result.exit_code == 2
        assert "Internal error:" not in result.output

    def test_rm_without_names(self, runner, repo_path):
        result = run(runner, repo_path, "key", "rm", input="")

        assert result.exit_code == 1
        assert "Error: missing key names to remove" in result.output

    def test_rm_blank_stdin(self, runner, repo_path):
        result = run(runner, repo_path, "key", "rm", input="\n  \n")

        assert result.exit_code == 1
