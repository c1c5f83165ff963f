"""
Console output for the gembs CLI.

Every line is prefixed with the elapsed time since launch in MM:SS.cc
format, so a slow compile step is obvious at a glance:

    00:00.01 gembs Build System v0.1.0
    00:00.02 [1/4] Expanding source sets...
    00:00.02       main: 2 file(s)
    00:01.37 Build successful!

Library modules never print; they log through ``logging``. configure_logging()
routes those records through the same timestamped stream.

Usage:
    from gembs.output import configure_logging, log, log_detail, log_error

    configure_logging(verbose=args.verbose)
    log_detail("ran compile", verbose_only=True)
"""

import logging
import sys
import time
from typing import Optional, TextIO

_start_time: Optional[float] = None
_output_stream: Optional[TextIO] = None
_verbose: bool = False
_use_stderr: bool = False


def init_timer(output_stream: Optional[TextIO] = None) -> None:
    """
    Initialize the program timer.

    Args:
        output_stream: Optional output stream (defaults to sys.stdout at write time)
    """
    global _start_time, _output_stream
    _start_time = time.time()
    if output_stream is not None:
        _output_stream = output_stream


def set_verbose(verbose: bool) -> None:
    global _verbose
    _verbose = verbose


def get_elapsed() -> float:
    """Elapsed seconds since init_timer() (initializes on first use)."""
    if _start_time is None:
        init_timer()
    return time.time() - _start_time  # type: ignore[operator]


def format_timestamp() -> str:
    """Format the current elapsed time as MM:SS.cc."""
    elapsed = get_elapsed()
    minutes = int(elapsed // 60)
    seconds = elapsed % 60
    return f"{minutes:02d}:{seconds:05.2f}"


def _stream() -> TextIO:
    if _output_stream is not None:
        return _output_stream
    return sys.stderr if _use_stderr else sys.stdout


def _print(message: str) -> None:
    stream = _stream()
    stream.write(f"{format_timestamp()} {message}\n")
    stream.flush()


def log(message: str, verbose_only: bool = False) -> None:
    if verbose_only and not _verbose:
        return
    _print(message)


def log_detail(message: str, indent: int = 6, verbose_only: bool = False) -> None:
    if verbose_only and not _verbose:
        return
    _print(f"{' ' * indent}{message}")


def log_header(title: str, version: str) -> None:
    _print(f"{title} v{version}")


def log_build_complete(build_time: float) -> None:
    _print(f"Build time: {build_time:.2f}s")


def log_error(message: str) -> None:
    _print(f"\033[1;31mERROR: {message}\033[0m")


def log_warning(message: str) -> None:
    _print(f"\033[1;33mWARNING: {message}\033[0m")


def log_success(message: str) -> None:
    _print(f"\033[1;32m{message}\033[0m")


class TimestampedHandler(logging.Handler):
    """Logging handler writing records through the timestamped console stream."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
            if record.levelno >= logging.ERROR:
                log_error(message)
            elif record.levelno >= logging.WARNING:
                log_warning(message)
            else:
                _print(message)
        except Exception:
            self.handleError(record)


def configure_logging(verbose: bool = False, use_stderr: bool = False) -> logging.Handler:
    """Route ``gembs`` loggers to the console.

    Args:
        verbose: DEBUG level if True, INFO otherwise
        use_stderr: Write console output to stderr (keeps stdout clean for data)

    Returns:
        The installed handler (replaces any previously installed one)
    """
    global _use_stderr
    set_verbose(verbose)
    _use_stderr = use_stderr
    root = logging.getLogger("gembs")
    for handler in list(root.handlers):
        if isinstance(handler, TimestampedHandler):
            root.removeHandler(handler)

    handler = TimestampedHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    return handler
