"""Engine options.

Behaviour that varies between setups is exposed here as explicit choices
with documented defaults:

- UnknownMnemonicPolicy: what happens to a ``$name`` token that matches no
  source set and no built-in. Default DROP (token removed, warning logged).
- StepCompletionPolicy: whether the executor waits for processes spawned by a
  step before starting the next one. Default WAIT.

Options can be seeded from the environment (GEMBS_UNKNOWN_MNEMONIC,
GEMBS_STEP_COMPLETION, GEMBS_PLUGIN_PATH); explicit arguments win.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Optional

from ..errors import GembsError

DEFAULT_TEMP_DIR_NAME = "bsTemp"


class UnknownMnemonicPolicy(Enum):
    """Handling of mnemonics that resolve to nothing."""

    DROP = "drop"
    ERROR = "error"

    def __str__(self) -> str:
        return self.value


class StepCompletionPolicy(Enum):
    """Whether a step's external effects must finish before the next step."""

    WAIT = "wait"
    DETACHED = "detached"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class EngineOptions:
    """Engine configuration.

    Attributes:
        unknown_mnemonic: Policy for unrecognized ``$name`` references
        step_completion: Policy for processes left running by a step handler
        plugin_dirs: Extra plugin directories, searched before the project's
            ``plugins/`` directory and the bundled plugins
        temp_dir_name: Name of the scratch directory for intermediate objects
        platform: Target platform string (``win32`` selects the ``.exe`` suffix)
        step_timeout: Seconds to wait for step processes under WAIT (None = forever)
    """

    unknown_mnemonic: UnknownMnemonicPolicy = UnknownMnemonicPolicy.DROP
    step_completion: StepCompletionPolicy = StepCompletionPolicy.WAIT
    plugin_dirs: tuple[Path, ...] = field(default_factory=tuple)
    temp_dir_name: str = DEFAULT_TEMP_DIR_NAME
    platform: str = sys.platform
    step_timeout: Optional[float] = None

    @property
    def is_windows(self) -> bool:
        return self.platform.startswith("win")

    @property
    def executable_suffix(self) -> str:
        return ".exe" if self.is_windows else ""

    def with_overrides(self, **changes: Any) -> "EngineOptions":
        """Return a copy with the non-None keyword arguments applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EngineOptions":
        """Build options from GEMBS_* environment variables.

        Raises:
            GembsError: If a policy variable holds an unknown value
        """
        env = os.environ if environ is None else environ

        kwargs: dict[str, Any] = {}
        mnemonic = env.get("GEMBS_UNKNOWN_MNEMONIC")
        if mnemonic:
            kwargs["unknown_mnemonic"] = _parse_enum(UnknownMnemonicPolicy, mnemonic, "GEMBS_UNKNOWN_MNEMONIC")
        completion = env.get("GEMBS_STEP_COMPLETION")
        if completion:
            kwargs["step_completion"] = _parse_enum(StepCompletionPolicy, completion, "GEMBS_STEP_COMPLETION")
        plugin_path = env.get("GEMBS_PLUGIN_PATH")
        if plugin_path:
            kwargs["plugin_dirs"] = tuple(Path(p) for p in plugin_path.split(os.pathsep) if p)
        return cls(**kwargs)


def _parse_enum(enum_cls: Any, value: str, source: str) -> Any:
    try:
        return enum_cls(value.strip().lower())
    except ValueError:
        choices = ", ".join(member.value for member in enum_cls)
        raise GembsError(f"Invalid value '{value}' for {source} (expected one of: {choices})") from None
