"""Tests for the gembs command-line interface."""

import json
import logging
import subprocess
from unittest.mock import MagicMock

import pytest

from gembs import output
from gembs.cli import main
from gembs.plugins.builtin import c as c_plugin

HELLO = {"name": "hello", "source": {"main": ["$root/*.c"]}, "build": {"compile": ["$main"]}}


@pytest.fixture(autouse=True)
def _reset_console(monkeypatch):
    """Undo configure_logging() after each CLI run."""
    logger = logging.getLogger("gembs")
    level = logger.level
    monkeypatch.setattr(output, "_use_stderr", False)
    monkeypatch.setattr(output, "_verbose", False)
    monkeypatch.setattr(output, "_output_stream", None)
    monkeypatch.delenv("GEMBS_UNKNOWN_MNEMONIC", raising=False)
    monkeypatch.delenv("GEMBS_STEP_COMPLETION", raising=False)
    monkeypatch.delenv("GEMBS_PLUGIN_PATH", raising=False)
    yield
    for handler in list(logger.handlers):
        if isinstance(handler, output.TimestampedHandler):
            logger.removeHandler(handler)
    logger.setLevel(level)


@pytest.fixture
def compiler(monkeypatch):
    mock = MagicMock(side_effect=lambda cmd, **kwargs: subprocess.CompletedProcess(cmd, 0, "", ""))
    monkeypatch.setattr(c_plugin, "safe_run", mock)
    return mock


def run_cli(argv):
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    return exc_info.value.code


def test_no_command_prints_help(capsys):
    assert run_cli([]) == 0
    assert "usage: gembs" in capsys.readouterr().out


def test_missing_project_dir(tmp_path, capsys):
    assert run_cli(["build", str(tmp_path / "nope")]) == 2
    assert "does not exist" in capsys.readouterr().out


def test_project_dir_must_be_directory(tmp_path):
    path = tmp_path / "build.json"
    path.write_text("{}")

    assert run_cli(["resolve", str(path)]) == 2


class TestBuild:
    def test_successful_build(self, project, compiler, capsys):
        root = project(HELLO, files=["a.c"])

        assert run_cli(["build", str(root)]) == 0

        out = capsys.readouterr().out
        assert "Build successful!" in out
        assert "[1/4]" in out
        assert len(compiler.call_args_list) == 2

    def test_verbose_lists_executed_steps(self, project, compiler, capsys):
        root = project(HELLO, files=["a.c"])

        assert run_cli(["build", str(root), "-v"]) == 0

        out = capsys.readouterr().out
        assert "ran compile" in out
        assert "ran output" in out

    def test_quiet_build_omits_step_list(self, project, compiler, capsys):
        root = project(HELLO, files=["a.c"])

        assert run_cli(["build", str(root)]) == 0

        assert "ran compile" not in capsys.readouterr().out

    def test_target_option_overrides_description(self, project, compiler):
        root = project(HELLO, files=["a.c"])

        assert run_cli(["build", str(root), "-t", "clang"]) == 0

        assert compiler.call_args_list[0].args[0][0] == "clang"

    def test_build_failure_exit_code(self, project, capsys):
        root = project({"name": "hello", "source": {"main": ["$root/gone.c"]}})

        assert run_cli(["build", str(root)]) == 1
        assert "gone.c" in capsys.readouterr().out

    def test_strict_mnemonics(self, project, compiler, capsys):
        root = project(dict(HELLO, build={"compile": ["$main", "$typo"]}), files=["a.c"])

        assert run_cli(["build", str(root), "--strict-mnemonics"]) == 1
        assert "$typo" in capsys.readouterr().out
        compiler.assert_not_called()


class TestResolve:
    def test_prints_resolved_description_as_json(self, project, capsys):
        root = project(HELLO, files=["a.c"])

        assert run_cli(["resolve", str(root)]) == 0

        captured = capsys.readouterr()
        data = json.loads(captured.out)
        r = root.as_posix()
        assert data["build"] == {"compile": [f"{r}/a.c"], "link": [f"{r}/bsTemp/a.o"], "output": ["hello"]}
        assert data["source"] == {"main": [f"{r}/a.c"]}

    def test_resolve_error(self, project, capsys):
        root = project({"name": "hello", "source": {"x": ["$root/*.zzz"]}}, files=["a.zzz"])

        assert run_cli(["resolve", str(root)]) == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert ".zzz" in captured.err


def test_plugins_lists_project_and_builtin(project, write_plugin, capsys):
    root = project(files=[])
    write_plugin(root / "plugins", "rs", "")

    assert run_cli(["plugins", str(root)]) == 0

    lines = capsys.readouterr().out.splitlines()
    assert lines[0].split()[0] == "rs"
    assert lines[1].split() == ["c", "builtin"]
