"""
Build engine for gembs.

This package provides the build pipeline:
- Source set expansion (``$root`` placeholders, ``*.ext`` wildcards)
- Mnemonic substitution in build step arguments
- Step execution against bound plugins
- Build orchestration
"""

from .build_context import PipelineContext
from .executor import execute_steps
from .mnemonics import resolve_steps
from .orchestrator import BuildOrchestrator, BuildResult, PreparedBuild
from .source_expander import expand_sources

__all__ = [
    "BuildOrchestrator",
    "BuildResult",
    "PipelineContext",
    "PreparedBuild",
    "execute_steps",
    "expand_sources",
    "resolve_steps",
]
