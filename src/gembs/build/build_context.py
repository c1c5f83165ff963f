"""Pipeline Context - state threaded through the build stages.

This module defines PipelineContext, the single value passed from stage to
stage during a build:

    expand_sources -> PluginRegistry.bind -> resolve_steps -> execute_steps

Design:
    Everything a later stage depends on from an earlier one lives here
    instead of in module globals: the extensions seen during source
    expansion drive plugin binding, the bindings drive step dispatch, and the
    object-source accumulator filled by source-set splices feeds ``%.ext``
    object patterns. The dataclass is mutable; each stage only appends to
    the fields it owns.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Optional

from ..config.options import EngineOptions

if TYPE_CHECKING:
    from ..plugins import Plugin


@dataclass
class PipelineContext:
    """Build state shared by the pipeline stages.

    Attributes:
        project_dir: Project root; substituted for the ``$root`` placeholder
        working_dir: Directory that object paths are re-rooted relative to
        options: Engine options (policies, temp dir name, platform)
        extensions: Extensions (without dot) seen during expansion, first-seen order
        bindings: Extension -> bound plugin
        plugins: Effective plugin key -> loaded plugin, in load order
        object_sources: Sources consumed by lone source-set mnemonics so far
    """

    project_dir: Path
    working_dir: Path
    options: EngineOptions = field(default_factory=EngineOptions)
    extensions: List[str] = field(default_factory=list)
    bindings: Dict[str, "Plugin"] = field(default_factory=dict)
    plugins: Dict[str, "Plugin"] = field(default_factory=dict)
    object_sources: List[str] = field(default_factory=list)

    @classmethod
    def create(
        cls,
        project_dir: Path,
        options: Optional[EngineOptions] = None,
        working_dir: Optional[Path] = None,
    ) -> "PipelineContext":
        """Create a context with absolute directories.

        Args:
            project_dir: Project root directory
            options: Engine options (defaults if None)
            working_dir: Working directory (defaults to project_dir)
        """
        project_dir = project_dir.resolve()
        return cls(
            project_dir=project_dir,
            working_dir=working_dir.resolve() if working_dir is not None else project_dir,
            options=options if options is not None else EngineOptions(),
        )

    @property
    def root_dir(self) -> str:
        """Project root with forward slashes, as substituted for ``$root``."""
        return self.project_dir.as_posix()

    @property
    def temp_dir(self) -> Path:
        """Scratch directory for intermediate objects."""
        return self.working_dir / self.options.temp_dir_name

    def record_extension(self, extension: str) -> None:
        """Add an extension to the set in use, keeping first-seen order."""
        if extension and extension not in self.extensions:
            self.extensions.append(extension)

    @property
    def loaded_plugins(self) -> List["Plugin"]:
        """Distinct loaded plugins in load order."""
        return list(self.plugins.values())
