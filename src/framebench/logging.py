"""Logging setup for the framebench CLI.

Everything is logged under the ``framebench`` logger.  Console records go to
stderr so they never mix with the summary tables and the interactive canvas,
which are written to stdout.  With ``--verbose`` each console line carries a
millisecond timestamp, which makes the per-iteration progress lines usable as
a rough timeline.  ``--log-file`` adds a DEBUG-level file log that opens with
a line naming the framebench version.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TextIO

from framebench import __version__

LOGGER_NAME = "framebench"
_FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
_CONSOLE_FORMAT = "%(levelname)-8s %(message)s"
_VERBOSE_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)-8s %(message)s"
_VERBOSE_DATEFMT = "%H:%M:%S"


def _console_level(verbose: bool, quiet: bool) -> int:
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def setup_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_file: Path | None = None,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Configure and return the ``framebench`` logger.

    Args:
        verbose: Console level DEBUG, with timestamps.  Wins over *quiet*.
        quiet: Console level WARNING.
        log_file: Also log everything at DEBUG to this file (appended; the
            parent directory is created).
        stream: Console stream.  Defaults to ``sys.stderr`` at call time.

    Returns:
        The configured logger.  Calling again replaces its handlers.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()

    console = logging.StreamHandler(stream if stream is not None else sys.stderr)
    console.setLevel(_console_level(verbose, quiet))
    if verbose:
        console.setFormatter(logging.Formatter(_VERBOSE_FORMAT, datefmt=_VERBOSE_DATEFMT))
    else:
        console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(fh)
        logger.debug("framebench %s logging to %s", __version__, log_file)

    return logger
