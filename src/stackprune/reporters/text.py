"""Plain-text rendering of frame lists.

Every frame becomes two lines followed by a blank line::

    path/to/file.py:12
    <TAB>function

A frame without a file shows ``<no file>`` and never a line number.
"""
import io
from typing import IO
from typing import Any
from typing import Optional
from typing import Sequence

from rich.color import ColorSystem
from rich.console import Console
from rich.style import Style

from stackprune._errors import WriteFailure
from stackprune.frame_tools import Frame

FUNCTION_STYLE = Style(color="yellow")


def _is_binary(sink: IO[Any]) -> bool:
    if isinstance(sink, (io.RawIOBase, io.BufferedIOBase)):
        return True
    return "b" in getattr(sink, "mode", "")


def _supports_color(sink: IO[Any]) -> bool:
    try:
        if _is_binary(sink):
            # rich only inspects text streams; ask it about a stand-in.
            console = Console(
                file=io.StringIO(), force_terminal=True if sink.isatty() else None
            )
        else:
            console = Console(file=sink)
        return console.color_system is not None and not console.no_color
    except (OSError, ValueError) as e:
        raise WriteFailure(f"Failed to inspect the output stream: {e}") from e


class TextReporter:
    def __init__(self, color: Optional[bool] = None) -> None:
        self.color = color

    def _write(self, sink: IO[Any], binary: bool, text: str) -> None:
        try:
            sink.write(text.encode("utf-8") if binary else text)
        except (OSError, ValueError) as e:
            raise WriteFailure(f"Failed to write the backtrace: {e}") from e

    def format_function(self, function: str, colorize: bool) -> str:
        if not colorize:
            return function
        return FUNCTION_STYLE.render(function, color_system=ColorSystem.STANDARD)

    def render(self, frames: Sequence[Frame], outfile: IO[Any]) -> None:
        colorize = self.color if self.color is not None else _supports_color(outfile)
        binary = _is_binary(outfile)
        for frame in frames:
            self._write(outfile, binary, f"{frame.location}\n")
            self._write(
                outfile,
                binary,
                f"\t{self.format_function(frame.function, colorize)}\n\n",
            )


def render_frames(
    frames: Sequence[Frame], sink: IO[Any], *, color: Optional[bool] = None
) -> None:
    """Write ``frames`` to ``sink``, stopping at the first failed write.

    Raises :class:`WriteFailure` chained to the error the sink raised.
    """
    TextReporter(color=color).render(frames, sink)
