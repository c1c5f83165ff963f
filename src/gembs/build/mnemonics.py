"""
Mnemonic substitution for build step arguments.

Runs after plugins have preprocessed the description, so implicit steps a
plugin injects (e.g. ``link: ["%.o"]``) are resolved like declared ones.

Rules, per token (see tokens.classify_token):

    "$main"        -> every file of source set "main", one argument each;
                      the files are also appended to the object-source
                      accumulator
    "-I$inc"       -> "-I" + files of "inc" joined by spaces, one argument
    "$name"        -> project name (+ ".exe" on Windows targets)
    "$unknown"     -> dropped (or UnknownMnemonicError, per options)
    "%.o"          -> one argument per accumulated source, re-rooted under
                      <working_dir>/<temp_dir_name>/ with extension .o
    anything else  -> unchanged
"""

import logging
import os
from pathlib import Path
from typing import Callable, Dict, List, Sequence, Union

from ..config.build_description import BuildDescription
from ..config.options import UnknownMnemonicPolicy
from ..errors import UnknownMnemonicError, UnsupportedSourceLocationError
from .build_context import PipelineContext
from .tokens import Token, TokenKind, classify_token

logger = logging.getLogger(__name__)


def _project_name(description: BuildDescription, context: PipelineContext) -> str:
    return description.name + context.options.executable_suffix


BUILTIN_MNEMONICS: Dict[str, Callable[[BuildDescription, PipelineContext], str]] = {
    "name": _project_name,
}


def render_value(value: Union[str, Sequence[str]]) -> str:
    """Textual rendering of a source-set value embedded inside a larger token."""
    if isinstance(value, str):
        return value
    return " ".join(value)


def reroot_source(source: str, working_dir: Path, temp_dir: Path, extension: str) -> str:
    """Intermediate artifact path for a source file.

    The source is re-rooted under the temp directory, keeping its path
    relative to the working directory, with its extension replaced:

        <wd>/src/a.c  ->  <wd>/bsTemp/src/a.o

    Raises:
        UnsupportedSourceLocationError: If the source is outside the working directory
    """
    real_working_dir = os.path.realpath(working_dir)
    source_path = os.path.realpath(os.path.join(real_working_dir, source))
    try:
        relative = os.path.relpath(source_path, real_working_dir)
    except ValueError:
        # different drive on Windows
        raise UnsupportedSourceLocationError(source, str(working_dir)) from None
    if relative == os.curdir or relative.split(os.sep)[0] == os.pardir:
        raise UnsupportedSourceLocationError(source, str(working_dir))

    return (temp_dir / Path(relative)).with_suffix("." + extension).as_posix()


def object_path(source: str, context: PipelineContext, extension: str) -> str:
    """reroot_source() using the context's working and temp directories."""
    return reroot_source(source, context.working_dir, context.temp_dir, extension)


def _resolve_mnemonic(
    token: Token,
    step: str,
    description: BuildDescription,
    context: PipelineContext,
    resolved: List[str],
) -> None:
    name = token.name

    if name in description.source:
        value = description.source[name]
        if token.is_whole and isinstance(value, list):
            resolved.extend(value)
            context.object_sources.extend(value)
        else:
            resolved.append(token.substitute(render_value(value)))
        return

    builtin = BUILTIN_MNEMONICS.get(name)
    if builtin is not None:
        resolved.append(token.substitute(builtin(description, context)))
        return

    if context.options.unknown_mnemonic is UnknownMnemonicPolicy.ERROR:
        raise UnknownMnemonicError(name, step)
    logger.warning(f"Dropping token '{token.text}' in step '{step}': unknown mnemonic '${name}'")


def resolve_step(step: str, tokens: List[str], description: BuildDescription, context: PipelineContext) -> List[str]:
    """Resolve the argument tokens of a single build step."""
    resolved: List[str] = []
    for text in tokens:
        token = classify_token(text)
        if token.kind is TokenKind.MNEMONIC:
            _resolve_mnemonic(token, step, description, context, resolved)
        elif token.kind is TokenKind.OBJECT_PATTERN:
            if not context.object_sources:
                logger.warning(f"Object pattern '{text}' in step '{step}' has no consumed sources to expand")
            for source in context.object_sources:
                resolved.append(token.substitute(object_path(source, context, token.name)))
        else:
            resolved.append(text)
    return resolved


def resolve_steps(description: BuildDescription, context: PipelineContext) -> None:
    """Resolve every build step of the description in place, in declared order."""
    for step, tokens in description.build.items():
        description.build[step] = resolve_step(step, tokens, description, context)
        logger.debug(f"Resolved step '{step}': {description.build[step]}")
