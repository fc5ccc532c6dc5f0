"""Lookup of captures attached to exceptions by their producers."""
import traceback
from typing import Any
from typing import Iterator
from typing import Optional
from typing import Protocol
from typing import Set
from typing import runtime_checkable

from stackprune.parsing import Capture


@runtime_checkable
class TraceCarrier(Protocol):
    """An error that may carry a capture attached when it was constructed."""

    def get_attached_trace(self) -> Optional[Capture]:
        ...


class TracedError(Exception):
    """Base class for errors that carry a capture.

    An explicit ``capture`` wins; otherwise the stack of the code that built
    the error is snapshotted once, so re-raising never changes the capture.
    """

    def __init__(self, *args: Any, capture: Optional[Capture] = None) -> None:
        super().__init__(*args)
        if capture is None:
            capture = tuple(traceback.extract_stack()[:-1])
        self._capture: Capture = capture

    def get_attached_trace(self) -> Optional[Capture]:
        return self._capture


def _attached_trace(error: BaseException) -> Optional[Capture]:
    if isinstance(error, TraceCarrier):
        return error.get_attached_trace()
    return None


def _causes(error: BaseException) -> Iterator[BaseException]:
    seen: Set[int] = set()
    current: Optional[BaseException] = error
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        if current.__cause__ is not None:
            current = current.__cause__
        elif not current.__suppress_context__:
            current = current.__context__
        else:
            current = None


def locate(error: BaseException, *, follow_causes: bool = False) -> Optional[Capture]:
    """Return the capture attached to ``error``, if any.

    Only ``error`` itself is asked unless ``follow_causes`` is set, in which
    case its causes and contexts are asked too, outermost first. The capture
    is returned as-is, never parsed.
    """
    if not follow_causes:
        return _attached_trace(error)
    for link in _causes(error):
        capture = _attached_trace(link)
        if capture is not None:
            return capture
    return None
