"""Tools for representing and filtering stack frames."""
import re
from dataclasses import dataclass
from typing import Iterable
from typing import List
from typing import Optional
from typing import Sequence
from typing import Tuple
from typing import Union

PatternLike = Union[str, re.Pattern[str]]

NO_FILE = "<no file>"

SYMBOL_IGNORELIST = (
    "PyObject_Call",
    "call_function",
    "classmethoddescr_call",
    "cmpwrapper_call",
    "do_call_core",
    "fast_function",
    "function_call",
    "function_code_fastcall",
    "instance_call",
    "instancemethod_call",
    "methoddescr_call",
    "proxy_call",
    "slot_tp_call",
    "trace_call_function",
    "type_call",
    "weakref_call",
    "wrap_call",
    "wrapper_call",
    "wrapperdescr_call",
)

PYTHON_INTERNAL_FILE_PATTERNS: Tuple[str, ...] = (
    r"(^|/)runpy\.py$",
    r"^<frozen runpy>$",
    r"^<frozen importlib",
    r"(Include|Objects|Modules|Python|cpython)/.*\.[ch]$",
)

PYTHON_INTERNAL_SYMBOL_PATTERNS: Tuple[str, ...] = (
    r"PyEval_EvalFrame",
    r"^_?PyEval",
    r"^_Py",
    r"(?i)vectorcall",
    r"^_call_with_frames_removed$",
    r"^(%s)$" % "|".join(SYMBOL_IGNORELIST),
)


@dataclass(frozen=True)
class Frame:
    """A single entry of a stack trace.

    ``line`` only carries meaning together with ``file``: a frame without a
    file is never displayed with a line number.
    """

    function: str
    file: Optional[str] = None
    line: Optional[int] = None

    @property
    def location(self) -> str:
        if self.file is None:
            return NO_FILE
        if self.line is None:
            return self.file
        return f"{self.file}:{self.line}"


def compile_patterns(patterns: Iterable[PatternLike]) -> List[re.Pattern[str]]:
    """Compile every string in ``patterns``; compiled patterns pass through.

    Raises :class:`re.error` for an invalid expression.
    """
    return [p if isinstance(p, re.Pattern) else re.compile(p) for p in patterns]


def _matches_any(blocklist: Sequence[re.Pattern[str]], text: str) -> bool:
    return any(pattern.search(text) is not None for pattern in blocklist)


def is_frame_excluded(
    frame: Frame,
    name_blocklist: Sequence[re.Pattern[str]],
    file_blocklist: Sequence[re.Pattern[str]],
) -> bool:
    # The file rule wins; a frame without a file can only fall to the name rule.
    if file_blocklist and frame.file is not None:
        if _matches_any(file_blocklist, frame.file):
            return True
    if name_blocklist and _matches_any(name_blocklist, frame.function):
        return True
    return False


def filter_frames(
    frames: Iterable[Frame],
    name_blocklist: Sequence[re.Pattern[str]],
    file_blocklist: Sequence[re.Pattern[str]],
) -> List[Frame]:
    """Return the frames matched by neither blocklist, in their original order."""
    return [
        frame
        for frame in frames
        if not is_frame_excluded(frame, name_blocklist, file_blocklist)
    ]
