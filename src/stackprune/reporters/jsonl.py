import json
from typing import IO
from typing import Any
from typing import Sequence

from stackprune._errors import WriteFailure
from stackprune.frame_tools import Frame


class JsonLinesReporter:
    """Write one JSON object per frame, innermost first."""

    def render(self, frames: Sequence[Frame], outfile: IO[Any]) -> None:
        for index, frame in enumerate(frames):
            record = {
                "index": index,
                "function": frame.function,
                "file": frame.file,
                "line": frame.line if frame.file is not None else None,
            }
            try:
                print(json.dumps(record), file=outfile)
            except (OSError, ValueError) as e:
                raise WriteFailure(f"Failed to write the parsed frames: {e}") from e
