import argparse
import logging
import re
import sys
from pathlib import Path
from typing import List
from typing import Tuple

from stackprune._errors import StackpruneCommandError
from stackprune.frame_tools import PYTHON_INTERNAL_FILE_PATTERNS
from stackprune.frame_tools import PYTHON_INTERNAL_SYMBOL_PATTERNS
from stackprune.frame_tools import compile_patterns

logger = logging.getLogger(__name__)


def add_input_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "input",
        nargs="?",
        default="-",
        help="File holding the backtrace text, or - to read standard input",
    )


def read_capture(source: str) -> str:
    if source == "-":
        logger.debug("Reading the backtrace from standard input")
        return sys.stdin.buffer.read().decode("utf-8", errors="replace")

    path = Path(source)
    if not path.exists() or not path.is_file():
        raise StackpruneCommandError(f"No such file: {source}", exit_code=1)
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise StackpruneCommandError(
            f"Failed to read {source}\nReason: {e}", exit_code=1
        )


def _compile(patterns: List[str], option: str) -> List[re.Pattern[str]]:
    try:
        return compile_patterns(patterns)
    except re.error as e:
        raise StackpruneCommandError(
            f"Invalid pattern {e.pattern!r} given to {option}: {e}", exit_code=2
        )


def build_blocklists(
    args: argparse.Namespace,
) -> Tuple[List[re.Pattern[str]], List[re.Pattern[str]]]:
    """Return the ``(name_blocklist, file_blocklist)`` the options describe."""
    names = list(args.exclude_function)
    files = list(args.exclude_file)
    if args.hide_python_internals:
        names.extend(PYTHON_INTERNAL_SYMBOL_PATTERNS)
        files.extend(PYTHON_INTERNAL_FILE_PATTERNS)
    logger.info(
        "Filtering with %d function pattern(s) and %d file pattern(s)",
        len(names),
        len(files),
    )
    return (
        _compile(names, "--exclude-function"),
        _compile(files, "--exclude-file"),
    )


def add_filter_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-F",
        "--exclude-file",
        metavar="PATTERN",
        action="append",
        default=[],
        help="Hide frames whose file matches this regular expression "
        "(can be given several times)",
    )
    parser.add_argument(
        "-N",
        "--exclude-function",
        metavar="PATTERN",
        action="append",
        default=[],
        help="Hide frames whose function symbol matches this regular expression "
        "(can be given several times)",
    )
    parser.add_argument(
        "--hide-python-internals",
        action="store_true",
        default=False,
        help="Also hide runpy, importlib and CPython evaluation loop frames",
    )
