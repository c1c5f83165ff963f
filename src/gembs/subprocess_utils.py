"""Subprocess utilities for plugins and the step executor.

Plugins launch compilers and linkers through safe_run(), which applies
platform-specific flags so Windows builds don't flash console windows or let
children steal keystrokes from the terminal.

The executor uses wait_for_child_processes() to make sure nothing a step
started is still running when the next step begins.
"""

import logging
import subprocess
import sys
from typing import Any, List, Optional

import psutil

logger = logging.getLogger(__name__)


def get_subprocess_creation_flags() -> int:
    """Get platform-specific subprocess creation flags.

    Returns:
        - Windows: subprocess.CREATE_NO_WINDOW (prevents console window)
        - Other platforms: 0 (no special flags)
    """
    if sys.platform == "win32":
        return subprocess.CREATE_NO_WINDOW
    return 0


def _apply_platform_defaults(kwargs: dict[str, Any]) -> dict[str, Any]:
    default_flags = get_subprocess_creation_flags()

    if "creationflags" in kwargs:
        kwargs["creationflags"] = kwargs["creationflags"] | default_flags
    elif default_flags:
        kwargs["creationflags"] = default_flags

    # Children must not inherit the console input handle
    if "stdin" not in kwargs:
        kwargs["stdin"] = subprocess.DEVNULL

    return kwargs


def safe_run(cmd: List[str], **kwargs: Any) -> subprocess.CompletedProcess:
    """Run a command to completion with platform-specific flags.

    Args:
        cmd: Command and arguments (same as subprocess.run)
        **kwargs: Passed to subprocess.run; explicit creationflags are OR'd with
            the platform defaults, an explicit stdin is used as-is

    Returns:
        CompletedProcess result from subprocess.run
    """
    logger.debug(f"Running: {' '.join(cmd)}")
    return subprocess.run(cmd, **_apply_platform_defaults(kwargs))



def wait_for_child_processes(timeout: Optional[float] = None) -> List[psutil.Process]:
    """Block until every descendant process of this process has exited.

    Args:
        timeout: Seconds to wait before giving up (None waits forever)

    Returns:
        Processes still alive when the timeout expired (empty on success)
    """
    try:
        children = psutil.Process().children(recursive=True)
    except psutil.NoSuchProcess:
        return []

    if not children:
        return []

    logger.debug(f"Waiting for {len(children)} child process(es)")
    gone, alive = psutil.wait_procs(children, timeout=timeout)
    for proc in gone:
        if proc.returncode:
            logger.warning(f"Child process {proc.pid} exited with code {proc.returncode}")
    for proc in alive:
        logger.warning(f"Child process {proc.pid} still running after {timeout}s")
    return alive
