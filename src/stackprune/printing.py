"""Parse, filter and print captures and the errors that carry them."""
from typing import IO
from typing import Any
from typing import Iterable
from typing import List
from typing import Optional

from stackprune.attachment import locate
from stackprune.frame_tools import Frame
from stackprune.frame_tools import PatternLike
from stackprune.frame_tools import compile_patterns
from stackprune.frame_tools import filter_frames
from stackprune.parsing import Capture
from stackprune.parsing import parse
from stackprune.reporters.text import render_frames


def filter_capture(
    capture: Capture,
    name_blocklist: Iterable[PatternLike] = (),
    file_blocklist: Iterable[PatternLike] = (),
) -> List[Frame]:
    """Parse ``capture`` and drop the frames matched by either blocklist.

    Raises :class:`ParsingFailure` if the capture cannot be parsed.
    """
    return filter_frames(
        parse(capture),
        compile_patterns(name_blocklist),
        compile_patterns(file_blocklist),
    )


def render_capture(
    sink: IO[Any],
    capture: Capture,
    name_blocklist: Iterable[PatternLike] = (),
    file_blocklist: Iterable[PatternLike] = (),
    *,
    color: Optional[bool] = None,
) -> None:
    frames = filter_capture(capture, name_blocklist, file_blocklist)
    render_frames(frames, sink, color=color)


def render_error(
    sink: IO[Any],
    error: BaseException,
    name_blocklist: Iterable[PatternLike] = (),
    file_blocklist: Iterable[PatternLike] = (),
    *,
    follow_causes: bool = False,
    color: Optional[bool] = None,
) -> None:
    """Print the capture attached to ``error``.

    An error without an attached capture prints nothing.
    """
    capture = locate(error, follow_causes=follow_causes)
    if capture is None:
        return
    render_capture(sink, capture, name_blocklist, file_blocklist, color=color)
