"""Conversion of runtime captures into innermost-first frame lists.

A capture is whatever the runtime recorded when an error happened:

* a traceback object (``exc.__traceback__``),
* a :class:`traceback.StackSummary` or any sequence of
  :class:`traceback.FrameSummary` objects,
* a :class:`traceback.TracebackException`,
* the text of a trace, either a Python traceback, a native backtrace in its
  ``Backtrace [{ fn: ..., file: ..., line: ... }]`` debug form, or a
  native backtrace in its numbered ``N: symbol / at file:line`` form.

Python records stacks outermost first; every parser here returns the
innermost frame first.
"""
import logging
import re
import traceback
from types import TracebackType
from typing import Any
from typing import Iterable
from typing import List
from typing import Optional
from typing import Union

from stackprune._errors import ParsingFailure
from stackprune.frame_tools import Frame

logger = logging.getLogger(__name__)

Capture = Union[
    TracebackType,
    traceback.StackSummary,
    traceback.TracebackException,
    Iterable[traceback.FrameSummary],
    str,
]

DEBUG_LIST_HEADER = "Backtrace ["
UNAVAILABLE_MARKERS = ("<disabled>", "<unsupported>")

RE_DEBUG_ENTRY = re.compile(
    r"""\{\s*
    fn:\s*(?:"(?P<function>(?:[^"\\]|\\.)*)"|(?P<placeholder><[^>]*>))
    (?:\s*,\s*file:\s*"(?P<file>(?:[^"\\]|\\.)*)")?
    (?:\s*,\s*line:\s*(?P<line>\d+))?
    \s*\}\s*,?\s*""",
    re.VERBOSE,
)
RE_PYTHON_HEADER = re.compile(r"^Traceback \(most recent call last\):\s*$", re.M)
RE_PYTHON_ENTRY = re.compile(
    r'^\s*File "(?P<file>[^"]+)"(?:, line (?P<line>\d+))?, in (?P<function>.+?)\s*$'
)
RE_NUMBERED_ENTRY = re.compile(r"^\s*(?P<index>\d+):\s+(?P<function>\S.*?)\s*$")
RE_NUMBERED_LOCATION = re.compile(
    r"^\s*at\s+(?P<file>.+?)(?::(?P<line>\d+))?(?::\d+)?\s*$"
)


def _unescape(text: str) -> str:
    return re.sub(r"\\(.)", r"\1", text)


def _function_name(match: re.Match[str]) -> str:
    function = match.group("function")
    if function is None:
        return match.group("placeholder")
    return _unescape(function)


def _from_frame_summaries(summaries: Iterable[traceback.FrameSummary]) -> List[Frame]:
    frames = []
    for summary in summaries:
        if not isinstance(summary, traceback.FrameSummary):
            raise ParsingFailure(
                f"Expected traceback.FrameSummary entries, got {type(summary).__name__}"
            )
        frames.append(
            Frame(
                function=summary.name,
                file=summary.filename or None,
                line=summary.lineno if summary.filename else None,
            )
        )
    frames.reverse()
    return frames


def parse_debug_list(text: str) -> List[Frame]:
    """Parse ``Backtrace [{ fn: "...", file: "...", line: N }, ...]``."""
    body = text.strip()
    if body in UNAVAILABLE_MARKERS:
        raise ParsingFailure(f"The capture holds no frames: {body}")
    if not body.startswith(DEBUG_LIST_HEADER) or not body.endswith("]"):
        raise ParsingFailure("Not a debug-form backtrace")
    inner = body[len(DEBUG_LIST_HEADER) : -1].strip()
    frames: List[Frame] = []
    position = 0
    while position < len(inner):
        match = RE_DEBUG_ENTRY.match(inner, position)
        if match is None:
            raise ParsingFailure(
                f"Malformed backtrace entry at offset {position}: {inner[position:position + 40]!r}"
            )
        file = match.group("file")
        line = match.group("line")
        frames.append(
            Frame(
                function=_function_name(match),
                file=_unescape(file) if file is not None else None,
                line=int(line) if line is not None and file is not None else None,
            )
        )
        position = match.end()
    return frames


def parse_python_traceback(text: str) -> List[Frame]:
    """Parse the text printed by :func:`traceback.print_exc`.

    Chained tracebacks print the causes first, so only the last block, the
    one belonging to the exception that propagated, is used.
    """
    headers = list(RE_PYTHON_HEADER.finditer(text))
    if not headers:
        raise ParsingFailure("Not a Python traceback")
    frames = []
    for line in text[headers[-1].end() :].splitlines():
        match = RE_PYTHON_ENTRY.match(line)
        if match is None:
            continue
        lineno = match.group("line")
        frames.append(
            Frame(
                function=match.group("function"),
                file=match.group("file"),
                line=int(lineno) if lineno is not None else None,
            )
        )
    frames.reverse()
    return frames


def parse_numbered_backtrace(text: str) -> List[Frame]:
    """Parse ``  0: symbol`` entries, each optionally followed by ``at file:line``."""
    frames: List[Frame] = []
    function: Optional[str] = None
    for line in text.splitlines():
        entry = RE_NUMBERED_ENTRY.match(line)
        if entry is not None:
            if function is not None:
                frames.append(Frame(function=function))
            function = entry.group("function")
            continue
        location = RE_NUMBERED_LOCATION.match(line)
        if location is not None and function is not None:
            lineno = location.group("line")
            frames.append(
                Frame(
                    function=function,
                    file=location.group("file"),
                    line=int(lineno) if lineno is not None else None,
                )
            )
            function = None
    if function is not None:
        frames.append(Frame(function=function))
    if not frames:
        raise ParsingFailure("Not a numbered backtrace")
    return frames


def parse_text(text: str) -> List[Frame]:
    stripped = text.strip()
    if stripped.startswith(DEBUG_LIST_HEADER) or stripped in UNAVAILABLE_MARKERS:
        logger.debug("Parsing capture as a debug-form backtrace")
        return parse_debug_list(stripped)
    if RE_PYTHON_HEADER.search(text):
        logger.debug("Parsing capture as a Python traceback")
        return parse_python_traceback(text)
    if any(RE_NUMBERED_ENTRY.match(line) for line in text.splitlines()):
        logger.debug("Parsing capture as a numbered backtrace")
        return parse_numbered_backtrace(text)
    raise ParsingFailure("Unrecognized backtrace format")


def parse(capture: Capture) -> List[Frame]:
    """Turn ``capture`` into a list of frames, innermost call first.

    Raises :class:`ParsingFailure` when the capture cannot be interpreted.
    """
    if isinstance(capture, str):
        return parse_text(capture)
    if isinstance(capture, TracebackType):
        return _from_frame_summaries(traceback.extract_tb(capture))
    if isinstance(capture, traceback.TracebackException):
        return _from_frame_summaries(capture.stack)
    if isinstance(capture, (bytes, bytearray)):
        raise ParsingFailure("Textual captures must be decoded before parsing")
    try:
        summaries: Any = iter(capture)
    except TypeError:
        raise ParsingFailure(
            f"Unsupported capture type: {type(capture).__name__}"
        ) from None
    return _from_frame_summaries(summaries)
