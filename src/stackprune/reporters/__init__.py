from typing import IO
from typing import Any
from typing import Protocol
from typing import Sequence

from stackprune.frame_tools import Frame


class BaseReporter(Protocol):
    def render(self, frames: Sequence[Frame], outfile: IO[Any]) -> None:
        ...
