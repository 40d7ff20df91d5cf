"""Context manager that reports the wall time spent in a block."""

from __future__ import annotations

import sys
import time
from types import TracebackType
from typing import TextIO


class Timer:
    """Print a start line on entry and the elapsed milliseconds on exit."""

    def __init__(self, name: str, stream: TextIO | None = None) -> None:
        self.name = name
        self._stream = stream
        self._start: float | None = None
        self.elapsed_ms: float | None = None

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def __enter__(self) -> Timer:
        self._start = time.perf_counter()
        print(f"=== START: {self.name}", file=self.stream, flush=True)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        end = time.perf_counter()
        assert self._start is not None
        self.elapsed_ms = (end - self._start) * 1000
        print(
            f"=== FINISH: {self.name}: {self.elapsed_ms:g} ms",
            file=self.stream,
            flush=True,
        )
        return False