"""Configuration: the build description and engine options."""

from .build_description import DESCRIPTION_FILENAME, BuildDescription
from .options import EngineOptions, StepCompletionPolicy, UnknownMnemonicPolicy

__all__ = [
    "DESCRIPTION_FILENAME",
    "BuildDescription",
    "EngineOptions",
    "StepCompletionPolicy",
    "UnknownMnemonicPolicy",
]
