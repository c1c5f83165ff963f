"""Pytest configuration and fixtures for gembs tests.

Also addresses Python 3.13 compatibility issues with pytest's capture fixtures:
tests that close stdout/stderr cause "I/O operation on closed file" errors
during teardown (https://github.com/pytest-dev/pytest/issues/11439).
"""

import json
import sys
import textwrap
import warnings
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

import pytest

# Suppress ResourceWarnings from file cleanup in Python 3.13
if sys.version_info >= (3, 13):
    warnings.filterwarnings("ignore", category=ResourceWarning)


@pytest.fixture(autouse=True)
def _restore_stdio():  # noqa: PT004
    """Ensure stdout/stderr are always restored after each test."""
    yield

    if sys.stdout.closed:
        sys.stdout = sys.__stdout__
    if sys.stderr.closed:
        sys.stderr = sys.__stderr__


def _write_plugin(directory: Path, key: str, source: str) -> Path:
    """Write a plugin module ``<directory>/<key>.py``."""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{key}.py"
    path.write_text(textwrap.dedent(source), encoding="utf-8")
    return path


def _recording_plugin(extensions: Iterable[str], steps: Iterable[str] = ("compile",), set_compiler: bool = False) -> str:
    """Source of a convention plugin that records every hook call in CALLS."""
    lines = ["CALLS = []", ""]
    for ext in extensions:
        hook = "extension" + ext.upper()
        lines += [f"def {hook}(description):", f"    CALLS.append(('{hook}', description.name))", ""]
    for step in steps:
        handler = "step" + step[:1].upper() + step[1:]
        lines += [f"def {handler}(args):", f"    CALLS.append(('{handler}', list(args)))", ""]
    if set_compiler:
        lines += ["def setCompiler(target):", "    CALLS.append(('setCompiler', target))", ""]
    return "\n".join(lines)


@pytest.fixture
def project(tmp_path):
    """Factory creating a project directory with build.json and source files.

    Usage:
        root = project({"name": "hello", ...}, files=["a.c", "src/b.c"])
    """

    def _make(description: Optional[Dict[str, Any]] = None, files: Iterable[str] = ()) -> Path:
        root = tmp_path / "proj"
        root.mkdir(exist_ok=True)
        for name in files:
            path = root / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(f"/* {name} */\n", encoding="utf-8")
        if description is not None:
            (root / "build.json").write_text(json.dumps(description), encoding="utf-8")
        return root.resolve()

    return _make


@pytest.fixture
def write_plugin():
    """Write a plugin module: ``write_plugin(directory, key, source) -> Path``."""
    return _write_plugin


@pytest.fixture
def recording_plugin():
    """Source of a recording convention plugin: ``recording_plugin(["c"], steps=("compile",))``."""
    return _recording_plugin
