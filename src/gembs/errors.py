"""Exception hierarchy for gembs.

Every failure the engine can report derives from GembsError, so callers that
only care about "the build could not run" catch a single type. All of these
abort the preprocessing pass; none are retried.
"""

from typing import Optional


class GembsError(Exception):
    """Base class for all gembs errors."""


class BuildDescriptionError(GembsError):
    """The build description is missing or structurally invalid."""


class PathNotFoundError(GembsError):
    """A declared source path does not exist."""

    def __init__(self, path: str, source_set: Optional[str] = None, spec: Optional[str] = None):
        self.path = path
        self.source_set = source_set
        self.spec = spec
        if source_set is not None:
            message = f"File or folder {path} in source set '{source_set}' does not exist"
        else:
            message = f"File or folder {path} does not exist"
        if spec is not None and spec != path:
            message += f" (from '{spec}')"
        super().__init__(message)

    def in_source_set(self, source_set: str, spec: str) -> "PathNotFoundError":
        """Return a copy of this error annotated with the owning source set."""
        return PathNotFoundError(self.path, source_set, spec)


class DirectoryUnreadableError(GembsError):
    """The base directory of a wildcard pattern is missing or cannot be listed."""

    def __init__(self, directory: str, source_set: Optional[str] = None, spec: Optional[str] = None):
        self.directory = directory
        self.source_set = source_set
        self.spec = spec
        message = f"Cannot list directory {directory}"
        if source_set is not None:
            message += f" for source set '{source_set}'"
        if spec is not None:
            message += f" (from '{spec}')"
        super().__init__(message)

    def in_source_set(self, source_set: str, spec: str) -> "DirectoryUnreadableError":
        """Return a copy of this error annotated with the owning source set."""
        return DirectoryUnreadableError(self.directory, source_set, spec)


class PluginNotFoundError(GembsError):
    """No plugin resource or capability satisfies an extension in use."""

    def __init__(self, extension: str):
        self.extension = extension
        super().__init__(f"No plugin found for extension '.{extension}'")


class PluginLoadError(GembsError):
    """A plugin resource exists but could not be imported."""

    def __init__(self, key: str, path: str, reason: str):
        self.key = key
        self.path = path
        super().__init__(f"Failed to load plugin '{key}' from {path}: {reason}")


class UnsupportedSourceLocationError(GembsError):
    """A source lies outside the working directory and cannot be re-rooted."""

    def __init__(self, source: str, working_dir: str):
        self.source = source
        self.working_dir = working_dir
        super().__init__(f"Source {source} is outside the working directory {working_dir}; cannot derive an object path for it")


class UnknownMnemonicError(GembsError):
    """A build step references a mnemonic that is neither a source set nor a built-in."""

    def __init__(self, mnemonic: str, step: str):
        self.mnemonic = mnemonic
        self.step = step
        super().__init__(f"Unknown mnemonic '${mnemonic}' in build step '{step}'")


class StepFailedError(GembsError):
    """A plugin step handler failed (e.g. the compiler returned non-zero)."""

    def __init__(self, step: str, message: str):
        self.step = step
        super().__init__(f"Step '{step}' failed: {message}")
