"""
Build orchestration for gembs projects.

Runs the four build phases against one project:

    [1/4] expand source sets          (no side effects; aborts on a missing path)
    [2/4] bind and preprocess plugins (may inject steps, create bsTemp/)
    [3/4] resolve step mnemonics
    [4/4] execute steps

No phase is rolled back when a later one fails.
"""

import _thread
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ..config.build_description import BuildDescription
from ..config.options import EngineOptions
from ..errors import GembsError
from ..plugins.registry import PluginRegistry
from .build_context import PipelineContext
from .executor import execute_steps
from .mnemonics import resolve_steps
from .source_expander import expand_sources

logger = logging.getLogger(__name__)


@dataclass
class PreparedBuild:
    """A fully resolved build, ready for execution.

    Attributes:
        description: Description with expanded sources and resolved steps
        context: Pipeline state (extensions, bindings, object sources)
    """

    description: BuildDescription
    context: PipelineContext


@dataclass
class BuildResult:
    """Result of a build.

    Attributes:
        success: True if every phase completed
        build_time: Wall-clock seconds spent
        message: Summary or error message
        description: Resolved description (None if loading failed)
        executed_steps: Steps that at least one plugin handled
        error: The error that stopped the build, if any
    """

    success: bool
    build_time: float
    message: str
    description: Optional[BuildDescription] = None
    executed_steps: List[str] = field(default_factory=list)
    error: Optional[GembsError] = None


class BuildOrchestrator:
    """Drives a project through expansion, binding, resolution and execution."""

    def __init__(self, options: Optional[EngineOptions] = None, verbose: bool = False):
        """
        Initialize the orchestrator.

        Args:
            options: Engine options (defaults if None)
            verbose: Log per-phase progress at INFO instead of DEBUG
        """
        self.options = options if options is not None else EngineOptions()
        self.verbose = verbose

    def _phase(self, index: int, message: str) -> None:
        if self.verbose:
            logger.info(f"[{index}/4] {message}")
        else:
            logger.debug(f"[{index}/4] {message}")

    def prepare(
        self,
        project_dir: Path,
        working_dir: Optional[Path] = None,
        description: Optional[BuildDescription] = None,
    ) -> PreparedBuild:
        """Run phases 1-3 and return the resolved build.

        Args:
            project_dir: Project root (``$root``, ``plugins/``, ``build.json``)
            working_dir: Directory object paths are relative to (default: project_dir)
            description: Use this description instead of loading build.json

        Raises:
            GembsError: On any resolution failure
        """
        if description is None:
            description = BuildDescription.load(project_dir)
        context = PipelineContext.create(project_dir, self.options, working_dir)

        self._phase(1, "Expanding source sets...")
        expand_sources(description, context)

        self._phase(2, "Binding plugins...")
        registry = PluginRegistry.for_project(context.project_dir, self.options.plugin_dirs)
        registry.bind(context, description)

        self._phase(3, "Resolving build steps...")
        resolve_steps(description, context)

        return PreparedBuild(description=description, context=context)

    def run(
        self,
        project_dir: Path,
        working_dir: Optional[Path] = None,
        description: Optional[BuildDescription] = None,
    ) -> BuildResult:
        """Run all four phases, letting errors propagate.

        Raises:
            GembsError: On any resolution or step failure
        """
        start_time = time.time()
        prepared = self.prepare(project_dir, working_dir, description)

        self._phase(4, "Executing build steps...")
        executed = execute_steps(prepared.description, prepared.context)

        build_time = time.time() - start_time
        return BuildResult(
            success=True,
            build_time=build_time,
            message=f"Built {prepared.description.name} ({len(executed)} step(s))",
            description=prepared.description,
            executed_steps=executed,
        )

    def build(
        self,
        project_dir: Path,
        working_dir: Optional[Path] = None,
        description: Optional[BuildDescription] = None,
    ) -> BuildResult:
        """Run all four phases, reporting failures in the result.

        Returns:
            BuildResult; on failure success is False, message names the cause
            and description holds whatever was resolved before the failure
        """
        start_time = time.time()
        try:
            if description is None:
                description = BuildDescription.load(project_dir)
            return self.run(project_dir, working_dir, description)
        except KeyboardInterrupt:
            _thread.interrupt_main()
            raise
        except GembsError as e:
            logger.error(str(e))
            return BuildResult(
                success=False,
                build_time=time.time() - start_time,
                message=str(e),
                description=description,
                error=e,
            )
