"""
Path resolution for source specifications.

A source specification is a path that may contain the ``$root`` placeholder
and may end in a ``*.<ext>`` wildcard segment:

    $root/src/main.c      -> one path, must exist
    $root/src/*.c         -> every entry of $root/src whose name ends in "c"
                             (so "logic" matches too; the dot is not required)
    /abs/include          -> a folder is fine too, it just has no extension

Separators are normalized to ``/`` before matching so extension and wildcard
detection behave the same on every platform.
"""

import logging
import os
import posixpath
from typing import List, Optional, Tuple

from ..errors import DirectoryUnreadableError, PathNotFoundError
from .build_context import PipelineContext

logger = logging.getLogger(__name__)

ROOT_PLACEHOLDER = "$root"
WILDCARD_PREFIX = "*."


def normalize_separators(path: str) -> str:
    """Convert every path separator to a forward slash."""
    return path.replace("\\", "/")


def split_wildcard(path: str) -> Optional[Tuple[str, str]]:
    """Split a normalized path into (directory, extension) if it ends in ``*.<ext>``.

    The wildcard must be the whole final segment and must directly follow a
    separator; anything else is a literal path.

    Returns:
        (directory including trailing slash, extension without dot), or None
    """
    separator = path.rfind("/")
    if separator < 0:
        return None

    segment = path[separator + 1:]
    if not segment.startswith(WILDCARD_PREFIX):
        return None

    extension = segment[len(WILDCARD_PREFIX):]
    if not extension or "*" in extension:
        return None

    return path[:separator + 1], extension


def path_extension(path: str) -> str:
    """Extension of the final path segment, without the dot ('' if none)."""
    return posixpath.splitext(posixpath.basename(path))[1][1:]


def resolve_path(spec: str, context: PipelineContext) -> List[str]:
    """Resolve one source specification into concrete paths.

    Records every extension encountered in ``context.extensions``.

    Args:
        spec: Source specification as written in the build description
        context: Pipeline context (supplies the root directory and the extension set)

    Returns:
        Resolved paths, forward-slash separated

    Raises:
        PathNotFoundError: A literal path does not exist
        DirectoryUnreadableError: A wildcard's directory is missing or unreadable
    """
    path = normalize_separators(spec.replace(ROOT_PLACEHOLDER, context.root_dir))

    wildcard = split_wildcard(path)
    if wildcard is not None:
        directory, extension = wildcard
        logger.debug(f"Finding files in {directory} that end in {extension}")
        try:
            entries = sorted(os.listdir(directory))
        except OSError as e:
            raise DirectoryUnreadableError(directory) from e

        matches = [directory + entry for entry in entries if entry.endswith(extension)]
        if not matches:
            logger.warning(f"Wildcard {spec} matched no files")
        context.record_extension(extension)
        return matches

    if not os.path.exists(path):
        raise PathNotFoundError(path)

    context.record_extension(path_extension(path))
    return [path]
