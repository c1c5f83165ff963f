"""Source set expansion: replace every source set's specs with concrete files."""

import logging
from typing import List

from ..config.build_description import BuildDescription
from ..errors import DirectoryUnreadableError, PathNotFoundError
from .build_context import PipelineContext
from .path_resolver import resolve_path

logger = logging.getLogger(__name__)


def expand_source_set(key: str, specs: List[str], context: PipelineContext) -> List[str]:
    """Expand one source set, preserving declaration order.

    Raises:
        PathNotFoundError: Annotated with the source set and spec that failed
        DirectoryUnreadableError: Annotated with the source set and spec that failed
    """
    expanded: List[str] = []
    for spec in specs:
        logger.debug(f"Parsing file tree {spec} for source set '{key}'")
        try:
            resolved = resolve_path(spec, context)
        except (PathNotFoundError, DirectoryUnreadableError) as e:
            raise e.in_source_set(key, spec) from e
        expanded.extend(resolved)
    return expanded


def expand_sources(description: BuildDescription, context: PipelineContext) -> None:
    """Expand every source set of the description in place.

    Stops at the first failure, before anything else in the description is
    touched by later stages.
    """
    for key, specs in description.source.items():
        description.source[key] = expand_source_set(key, specs, context)
        logger.info(f"Source set '{key}': {len(description.source[key])} file(s)")
    logger.debug(f"Extensions in use: {', '.join(context.extensions) or '(none)'}")
