"""Unit tests for logging compliance across the codebase.

These tests enforce that library code logs through the logging module and
leaves console writes to the CLI and the output module.
"""

import ast
import re
from pathlib import Path

import pytest

SRC_DIR = Path(__file__).parent.parent.parent / "src" / "gembs"

# Modules allowed to write to the console directly
CONSOLE_MODULES = {"cli.py", "output.py"}


def _library_files():
    return [path for path in SRC_DIR.rglob("*.py") if "__pycache__" not in path.parts and path.name not in CONSOLE_MODULES]


class TestLoggingCompliance:
    """Test cases for logging vs print statement compliance."""

    def test_no_print_statements_in_library_code(self):
        """Verify no print() calls exist outside the CLI.

        Note: CLI print() statements are legitimate for user-facing output.
        """
        python_files = _library_files()
        assert len(python_files) > 0, "No Python files found in src/gembs"

        violations = []
        for file_path in python_files:
            tree = ast.parse(file_path.read_text(encoding="utf-8"))
            for node in ast.walk(tree):
                if isinstance(node, ast.Call) and isinstance(node.func, ast.Name) and node.func.id == "print":
                    violations.append(f"{file_path}:{node.lineno}")

        if violations:
            pytest.fail(f"Found {len(violations)} print() calls in library code:\n" + "\n".join(violations) + "\n\nUse a module logger instead.")

    def test_no_direct_stdout_writes(self):
        """Verify library code doesn't write to stdout directly."""
        violations = []
        for file_path in _library_files():
            for line_num, line in enumerate(file_path.read_text(encoding="utf-8").split("\n"), start=1):
                if line.strip().startswith("#"):
                    continue
                if re.search(r"\bstdout\s*\.\s*write\s*\(", line):
                    violations.append(f"{file_path}:{line_num}: {line.strip()}")

        if violations:
            pytest.fail(f"Found {len(violations)} stdout writes:\n" + "\n".join(violations))

    def test_logging_imports_present(self):
        """Verify files that create a module logger import logging."""
        missing_imports = []
        for file_path in _library_files():
            content = file_path.read_text(encoding="utf-8")
            if "logging.getLogger" in content and not re.search(r"^import logging$", content, re.MULTILINE):
                missing_imports.append(str(file_path))

        if missing_imports:
            pytest.fail("Files using logging.* without importing logging:\n" + "\n".join(missing_imports))

    def test_module_loggers_live_under_package_logger(self):
        """Module loggers must be named after the module so configure_logging() reaches them."""
        violations = []
        for file_path in _library_files():
            for line_num, line in enumerate(file_path.read_text(encoding="utf-8").split("\n"), start=1):
                match = re.search(r"logging\.getLogger\((.*)\)", line)
                if match and match.group(1) != "__name__":
                    violations.append(f"{file_path}:{line_num}: {line.strip()}")

        if violations:
            pytest.fail("Module loggers not named by __name__:\n" + "\n".join(violations))
