from ._errors import ParsingFailure
from ._errors import StackpruneError
from ._errors import WriteFailure
from ._version import __version__
from .attachment import TraceCarrier
from .attachment import TracedError
from .attachment import locate
from .frame_tools import Frame
from .frame_tools import compile_patterns
from .frame_tools import filter_frames
from .parsing import parse
from .printing import filter_capture
from .printing import render_capture
from .printing import render_error
from .reporters.text import render_frames

__all__ = [
    "Frame",
    "TraceCarrier",
    "TracedError",
    "locate",
    "parse",
    "compile_patterns",
    "filter_frames",
    "filter_capture",
    "render_frames",
    "render_capture",
    "render_error",
    "StackpruneError",
    "ParsingFailure",
    "WriteFailure",
    "__version__",
]
