"""
Plugin interface for gembs.

A plugin serves one or more source file extensions. It can preprocess the
build description once before mnemonic substitution (e.g. inject implicit
steps, create a scratch directory), optionally accept a compiler selection,
and handle any number of named build steps.

Two kinds of plugin exist:

- Class-based: a module exposing ``create_plugin()`` that returns a Plugin
  subclass instance (the bundled C plugin works this way).
- Convention-based: any other module. It is wrapped in a ModulePlugin that
  maps the capability interface onto module-level functions:

      extensionC(description)   preprocessing hook for ".c"
      setCompiler(target)       compiler selection hook
      stepCompile(args)         handler for build steps named "compile"
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType
from typing import TYPE_CHECKING, Any, Callable, List, Optional

if TYPE_CHECKING:
    from ..config.build_description import BuildDescription


def extension_hook_name(extension: str) -> str:
    """Name of the preprocessing hook for an extension ("c" -> "extensionC")."""
    return "extension" + extension.upper()


def base_step_name(step: str) -> str:
    """Strip a ``-<suffix>`` disambiguator from a declared step name."""
    return step.split("-", 1)[0]


def step_handler_name(step: str) -> str:
    """Name of the handler for a step ("compile-2" -> "stepCompile")."""
    base = base_step_name(step)
    return "step" + base[:1].upper() + base[1:]


@dataclass(frozen=True)
class PluginEnvironment:
    """Directories and platform a plugin operates in.

    Attributes:
        working_dir: Working directory of the build
        temp_dir: Scratch directory for intermediate objects
        platform: Target platform string (e.g. "linux", "win32")
    """

    working_dir: Path
    temp_dir: Path
    platform: str


class Plugin(ABC):
    """Capability interface every plugin implements."""

    def __init__(self) -> None:
        self.key = ""
        self.environment: Optional[PluginEnvironment] = None

    def attach(self, environment: PluginEnvironment) -> None:
        """Called once when the plugin is bound, before any hook runs."""
        self.environment = environment

    @abstractmethod
    def preprocesses_extension(self, extension: str) -> bool:
        """True if this plugin has a preprocessing hook for the extension."""

    @abstractmethod
    def preprocess(self, extension: str, description: "BuildDescription") -> None:
        """Run the preprocessing hook for the extension; may mutate description.build."""

    @abstractmethod
    def provides_step(self, step: str) -> bool:
        """True if this plugin handles the (base) step name."""

    @abstractmethod
    def run_step(self, step: str, args: List[str]) -> None:
        """Handle a build step with its fully resolved arguments."""

    def provides_compiler_selection(self) -> bool:
        return False

    def set_compiler(self, target: str) -> None:
        """Select the compiler/toolchain named by the description's target."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.key!r})"


class ModulePlugin(Plugin):
    """Adapts a convention-based plugin module to the Plugin interface."""

    def __init__(self, module: ModuleType):
        super().__init__()
        self.module = module

    def _function(self, name: str) -> Optional[Callable[..., Any]]:
        func = getattr(self.module, name, None)
        return func if callable(func) else None

    def preprocesses_extension(self, extension: str) -> bool:
        return self._function(extension_hook_name(extension)) is not None

    def preprocess(self, extension: str, description: "BuildDescription") -> None:
        hook = self._function(extension_hook_name(extension))
        if hook is not None:
            hook(description)

    def provides_step(self, step: str) -> bool:
        return self._function(step_handler_name(step)) is not None

    def run_step(self, step: str, args: List[str]) -> None:
        handler = self._function(step_handler_name(step))
        if handler is not None:
            handler(args)

    def provides_compiler_selection(self) -> bool:
        return self._function("setCompiler") is not None

    def set_compiler(self, target: str) -> None:
        hook = self._function("setCompiler")
        if hook is not None:
            hook(target)


__all__ = [
    "ModulePlugin",
    "Plugin",
    "PluginEnvironment",
    "base_step_name",
    "extension_hook_name",
    "step_handler_name",
]
