"""
C language plugin.

Serves ``.c`` and ``.h`` sources with a gcc-compatible compiler driver.

Preprocessing (runs once, whichever of .c/.h bound the plugin first):
- adds ``link: ["%.o"]`` if no link step is declared
- adds ``output: ["$name"]`` if no output step is declared
- creates the scratch directory for object files

Steps:
- compile: ``-flags`` apply to every source that follows them; each ``.c``
  source is compiled to its object path under the scratch directory.
  Headers are skipped.
- link: records the objects and linker flags to use.
- output: links the recorded objects into each named output.

Every compiler invocation runs to completion; a non-zero exit raises
StepFailedError.
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING, List, Tuple

from gembs.build.mnemonics import reroot_source
from gembs.errors import StepFailedError
from gembs.plugins import Plugin, PluginEnvironment, base_step_name
from gembs.subprocess_utils import safe_run

if TYPE_CHECKING:
    from gembs.config.build_description import BuildDescription

logger = logging.getLogger(__name__)

DEFAULT_COMPILER = "gcc"
DEFAULT_LINK_ARGS = ["%.o"]
DEFAULT_OUTPUT_ARGS = ["$name"]
OBJECT_EXTENSION = "o"
HEADER_SUFFIXES = (".h",)


def split_flags(args: List[str]) -> Tuple[List[str], List[str]]:
    """Split arguments into (flags, operands); flags start with '-'."""
    flags = [arg for arg in args if arg.startswith("-")]
    operands = [arg for arg in args if not arg.startswith("-")]
    return flags, operands


class CPlugin(Plugin):
    """gcc-style compile and link for C projects."""

    EXTENSIONS = ("c", "h")
    STEPS = ("compile", "link", "output")

    def __init__(self) -> None:
        super().__init__()
        self.compiler = DEFAULT_COMPILER
        self.link_objects: List[str] = []
        self.link_flags: List[str] = []

    def preprocesses_extension(self, extension: str) -> bool:
        return extension in self.EXTENSIONS

    def preprocess(self, extension: str, description: "BuildDescription") -> None:
        declared = {base_step_name(step) for step in description.build}

        if "link" not in declared:
            logger.info(f"Inserting link step for {self.compiler}")
            description.build["link"] = list(DEFAULT_LINK_ARGS)

        if "output" not in declared:
            logger.info("Inserting output step")
            description.build["output"] = list(DEFAULT_OUTPUT_ARGS)

        temp_dir = self._environment().temp_dir
        logger.info(f"Creating temporary dir for object files: {temp_dir}")
        temp_dir.mkdir(parents=True, exist_ok=True)

    def provides_step(self, step: str) -> bool:
        return base_step_name(step) in self.STEPS

    def run_step(self, step: str, args: List[str]) -> None:
        base = base_step_name(step)
        if base == "compile":
            self.compile(step, args)
        elif base == "link":
            self.link(args)
        elif base == "output":
            self.output(step, args)

    def provides_compiler_selection(self) -> bool:
        return True

    def set_compiler(self, target: str) -> None:
        self.compiler = target

    def _environment(self) -> PluginEnvironment:
        if self.environment is None:
            raise RuntimeError("C plugin used before being bound to a build")
        return self.environment

    def compile(self, step: str, args: List[str]) -> List[str]:
        """Compile each source to its object file.

        Returns:
            Object paths produced, in source order
        """
        env = self._environment()
        flags: List[str] = []
        objects: List[str] = []

        for arg in args:
            if arg.startswith("-"):
                flags.append(arg)
                continue
            if arg.endswith(HEADER_SUFFIXES):
                continue

            obj = reroot_source(arg, env.working_dir, env.temp_dir, OBJECT_EXTENSION)
            Path(obj).parent.mkdir(parents=True, exist_ok=True)

            cmd = [self.compiler, "-c", arg, "-o", obj] + flags
            logger.info(f"Compiling {arg}")
            self._run(step, cmd)
            objects.append(obj)

        return objects

    def link(self, args: List[str]) -> None:
        """Record the objects and flags the output step links with."""
        flags, objects = split_flags(args)
        self.link_objects = objects
        self.link_flags = flags
        logger.debug(f"Link set: {len(objects)} object(s), flags {flags}")

    def output(self, step: str, args: List[str]) -> List[Path]:
        """Link the recorded objects into each named output.

        Returns:
            Paths of the linked outputs
        """
        env = self._environment()
        flags, names = split_flags(args)
        if not self.link_objects:
            raise StepFailedError(step, "no object files to link (is there a link step?)")

        outputs: List[Path] = []
        for name in names:
            target = env.working_dir / name
            cmd = [self.compiler] + self.link_objects + ["-o", str(target)] + self.link_flags + flags
            logger.info(f"Linking {target}")
            self._run(step, cmd)
            outputs.append(target)
        return outputs

    def _run(self, step: str, cmd: List[str]) -> None:
        try:
            result = safe_run(cmd, capture_output=True, text=True, cwd=str(self._environment().working_dir))
        except FileNotFoundError as e:
            raise StepFailedError(step, f"compiler not found: {cmd[0]}") from e

        if result.returncode != 0:
            detail = (result.stderr or result.stdout or "").strip()
            raise StepFailedError(step, f"{cmd[0]} exited with code {result.returncode}\n{detail}")


def create_plugin() -> CPlugin:
    return CPlugin()
