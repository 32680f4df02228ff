"""
Report destination: stderr, or a file opened for append.
"""
import sys
from pathlib import Path
from typing import Optional, TextIO

from memwatch.errors import OutputSinkError
from memwatch.util.log_config import setup_logger

logger = setup_logger(__name__)


def is_stderr_target(out: Optional[str]) -> bool:
    return out is None or out == "" or out == "-"


class OutputSink:
    """Single-writer text sink; the sampling thread owns it exclusively"""

    def __init__(self, out: Optional[str] = None):
        self.out = out
        self._stream: Optional[TextIO] = None
        self._owns_stream = False

    def open(self) -> "OutputSink":
        if self._stream is not None:
            return self

        if is_stderr_target(self.out):
            self._stream = sys.stderr
            return self

        path = Path(self.out)
        try:
            self._stream = open(path, "a", encoding="utf-8")
        except OSError as e:
            raise OutputSinkError(f"Cannot open output file {path}: {e}") from e
        self._owns_stream = True
        logger.debug(f"Appending reports to {path.resolve()}")
        return self

    def write(self, text: str) -> None:
        if self._stream is None:
            self.open()
        try:
            self._stream.write(text)
            self._stream.flush()
        except (OSError, ValueError) as e:
            raise OutputSinkError(f"Failed to write report to {self.out or 'stderr'}: {e}") from e

    def close(self) -> None:
        if self._stream is not None and self._owns_stream:
            self._stream.close()
        self._stream = None
        self._owns_stream = False

    def __enter__(self) -> "OutputSink":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
