"""
Build description model.

The build description is the project's ``build.json``. It declares the
project name, an optional toolchain target, named source sets and the ordered
build steps. The engine mutates it in place: source sets are replaced by their
expansions and build steps by their resolved argument lists.

Example:
    {
        "name": "hello",
        "target": "gcc",
        "source": {"main": ["$root/src/*.c"]},
        "build": {"compile": ["-O2", "$main"], "link": ["%.o"], "output": ["$name"]}
    }
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..errors import BuildDescriptionError

DESCRIPTION_FILENAME = "build.json"


@dataclass
class BuildDescription:
    """Root build configuration.

    Attributes:
        name: Project identifier, also the default output name
        target: Optional compiler/toolchain selector forwarded to plugins
        source: Source-set name -> ordered path specifications
        build: Step name -> ordered argument tokens (declaration order is execution order)
    """

    name: str
    target: Optional[str] = None
    source: Dict[str, List[str]] = field(default_factory=dict)
    build: Dict[str, List[str]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BuildDescription":
        """Create a BuildDescription from a parsed JSON object.

        Raises:
            BuildDescriptionError: If a required key is missing or has the wrong shape
        """
        if not isinstance(data, dict):
            raise BuildDescriptionError("Build description must be a JSON object")

        name = data.get("name")
        if not isinstance(name, str) or not name:
            raise BuildDescriptionError("Build description requires a non-empty 'name' string")

        target = data.get("target")
        if target is not None and not isinstance(target, str):
            raise BuildDescriptionError("'target' must be a string when present")

        return cls(
            name=name,
            target=target,
            source=_string_lists(data.get("source", {}), "source"),
            build=_string_lists(data.get("build", {}), "build"),
        )

    @classmethod
    def load(cls, path: Path) -> "BuildDescription":
        """Load a build description from a JSON file.

        Args:
            path: Path to build.json, or to the directory containing it

        Returns:
            Parsed BuildDescription (key order of source and build preserved)

        Raises:
            BuildDescriptionError: If the file is missing, not JSON, or malformed
        """
        if path.is_dir():
            path = path / DESCRIPTION_FILENAME
        if not path.is_file():
            raise BuildDescriptionError(f"{DESCRIPTION_FILENAME} not found: {path}")

        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise BuildDescriptionError(f"Invalid JSON in {path}: {e}") from e

        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-compatible dictionary."""
        data: Dict[str, Any] = {"name": self.name}
        if self.target is not None:
            data["target"] = self.target
        data["source"] = {key: list(value) for key, value in self.source.items()}
        data["build"] = {key: list(value) for key, value in self.build.items()}
        return data


def _string_lists(value: Any, section: str) -> Dict[str, List[str]]:
    if not isinstance(value, dict):
        raise BuildDescriptionError(f"'{section}' must be an object mapping names to lists")

    result: Dict[str, List[str]] = {}
    for key, items in value.items():
        if isinstance(items, str):
            items = [items]
        if not isinstance(items, list) or not all(isinstance(item, str) for item in items):
            raise BuildDescriptionError(f"'{section}.{key}' must be a list of strings")
        result[key] = list(items)
    return result
