"""
Plugin discovery and binding.

Discovery is a one-time registration pass: every ``<key>.py`` file in the
plugin directories becomes a resource named ``<key>``. Earlier directories
shadow later ones; the bundled plugins (``gembs.plugins.builtin``) come last.
Resources are imported on first use and cached.

Binding walks the extensions seen during source expansion:

    1. a resource named after the extension ("c" -> c.py)
    2. otherwise the first other resource whose plugin preprocesses the
       extension (e.g. c.py provides extensionH, so it serves ".h" too)
    3. otherwise PluginNotFoundError

Each bound plugin is preprocessed exactly once: with the hook named after its
key when it has one (c.py runs extensionC even if a .h set is declared first),
otherwise with the extension that first bound it. It is then handed the
description's target if it accepts one.
"""

import importlib
import importlib.util
import logging
import pkgutil
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional

from ..config.build_description import BuildDescription
from ..errors import PluginLoadError, PluginNotFoundError
from . import ModulePlugin, Plugin, PluginEnvironment
from . import builtin as builtin_plugins

if TYPE_CHECKING:
    from ..build.build_context import PipelineContext

logger = logging.getLogger(__name__)

PLUGIN_DIR_NAME = "plugins"


@dataclass(frozen=True)
class PluginResource:
    """A discovered, not necessarily loaded, plugin.

    Attributes:
        key: Plugin key (file basename without extension)
        path: Source file of the plugin
        module_name: Importable module name for bundled plugins, None for files
    """

    key: str
    path: Path
    module_name: Optional[str] = None

    @property
    def origin(self) -> str:
        return "builtin" if self.module_name else str(self.path.parent)


class PluginRegistry:
    """Registry of plugin resources and the plugins loaded from them."""

    def __init__(self) -> None:
        self._resources: Dict[str, PluginResource] = {}
        self._loaded: Dict[str, Plugin] = {}

    @classmethod
    def for_project(cls, project_dir: Path, extra_dirs: Iterable[Path] = (), include_builtin: bool = True) -> "PluginRegistry":
        """Discover plugins for a project.

        Search order: extra_dirs, then ``<project_dir>/plugins``, then the
        bundled plugins.
        """
        registry = cls()
        for directory in list(extra_dirs) + [project_dir / PLUGIN_DIR_NAME]:
            registry.discover(directory)
        if include_builtin:
            registry.discover_builtin()
        return registry

    def register(self, resource: PluginResource) -> bool:
        """Register a resource unless its key is already taken."""
        if resource.key in self._resources:
            logger.debug(f"Plugin '{resource.key}' at {resource.path} shadowed by {self._resources[resource.key].path}")
            return False
        self._resources[resource.key] = resource
        return True

    def discover(self, directory: Path) -> None:
        """Register every ``*.py`` plugin file in a directory."""
        if not directory.is_dir():
            return
        for path in sorted(directory.glob("*.py")):
            if path.stem.startswith("_"):
                continue
            self.register(PluginResource(key=path.stem, path=path))

    def discover_builtin(self) -> None:
        """Register the plugins bundled with gembs."""
        package_dir = Path(builtin_plugins.__file__).parent
        for info in pkgutil.iter_modules([str(package_dir)]):
            if info.name.startswith("_"):
                continue
            self.register(
                PluginResource(
                    key=info.name,
                    path=package_dir / f"{info.name}.py",
                    module_name=f"{builtin_plugins.__name__}.{info.name}",
                )
            )

    @property
    def keys(self) -> List[str]:
        return list(self._resources)

    @property
    def resources(self) -> List[PluginResource]:
        return list(self._resources.values())

    def __contains__(self, key: str) -> bool:
        return key in self._resources

    def load(self, key: str) -> Plugin:
        """Import a plugin resource (once) and return its Plugin.

        Raises:
            PluginNotFoundError: No resource registered under the key
            PluginLoadError: The module failed to import or build its plugin
        """
        if key in self._loaded:
            return self._loaded[key]

        resource = self._resources.get(key)
        if resource is None:
            raise PluginNotFoundError(key)

        try:
            if resource.module_name:
                module = importlib.import_module(resource.module_name)
            else:
                spec = importlib.util.spec_from_file_location(f"gembs_plugin_{key}", resource.path)
                if spec is None or spec.loader is None:
                    raise ImportError(f"Could not create module spec for {resource.path}")
                module = importlib.util.module_from_spec(spec)
                spec.loader.exec_module(module)

            factory = getattr(module, "create_plugin", None)
            plugin = factory() if callable(factory) else ModulePlugin(module)
        except KeyboardInterrupt:
            raise
        except Exception as e:
            raise PluginLoadError(key, str(resource.path), f"{type(e).__name__}: {e}") from e

        if not isinstance(plugin, Plugin):
            raise PluginLoadError(key, str(resource.path), "create_plugin() did not return a Plugin")

        plugin.key = key
        self._loaded[key] = plugin
        logger.debug(f"Loaded plugin '{key}' from {resource.origin}")
        return plugin

    def find_key(self, extension: str) -> str:
        """Effective plugin key serving an extension.

        Raises:
            PluginNotFoundError: Neither a named resource nor a capable plugin exists
        """
        if extension in self._resources:
            return extension

        for key in sorted(self._resources):
            if key == extension:
                continue
            if self.load(key).preprocesses_extension(extension):
                logger.debug(f"Extension '.{extension}' served by plugin '{key}'")
                return key

        raise PluginNotFoundError(extension)

    def bind(self, context: "PipelineContext", description: BuildDescription) -> Dict[str, Plugin]:
        """Bind every extension in use to a plugin and run the plugins' setup hooks.

        Args:
            context: PipelineContext with the extension set filled in
            description: Expanded build description; plugins may add or change steps

        Returns:
            context.bindings (extension -> plugin)
        """
        environment = PluginEnvironment(
            working_dir=context.working_dir,
            temp_dir=context.temp_dir,
            platform=context.options.platform,
        )

        for extension in context.extensions:
            if extension in context.bindings:
                continue

            key = self.find_key(extension)
            plugin = self.load(key)
            context.bindings[extension] = plugin

            if key in context.plugins:
                continue
            context.plugins[key] = plugin
            plugin.attach(environment)

            hook_extension = key if plugin.preprocesses_extension(key) else extension
            if plugin.preprocesses_extension(hook_extension):
                logger.info(f"Plugin '{key}' preprocessing build for .{hook_extension}")
                plugin.preprocess(hook_extension, description)
            else:
                logger.debug(f"Plugin '{key}' has no preprocessing hook for .{extension}")

            if description.target and plugin.provides_compiler_selection():
                logger.info(f"Plugin '{key}' using compiler '{description.target}'")
                plugin.set_compiler(description.target)

        return context.bindings
