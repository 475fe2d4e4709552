"""
Per-file byte offsets and incremental reads.

Only the bytes appended since the last processed offset are ever read. The
offset moves forward once the caller has finished with a batch, not when the
batch is read.
"""

import os
import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Set

logger = logging.getLogger(__name__)


@dataclass
class LineBatch:
    """Lines decoded from the byte window ``(start, end]`` of a file."""

    path: str
    start: int
    end: int
    lines: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return self.end <= self.start

    @property
    def byte_count(self) -> int:
        return self.end - self.start


def split_lines(text: str) -> List[str]:
    """Split decoded text on newlines, accepting both ``\\n`` and ``\\r\\n``."""
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


class OffsetTracker:
    """
    Tracks the last processed byte offset of each log file.

    Offsets never move backwards. When a file shrinks (truncated or rotated)
    its offset stays where it was and nothing is read until the file grows
    past it again; resetting to zero would re-send stale notifications.

    Reads may run in executor threads, so the maps are guarded by a lock.
    """

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding
        self._offsets: Dict[str, int] = {}
        # Files already reported as truncated, so the warning is logged once
        self._truncated: Set[str] = set()
        self._lock = threading.Lock()

    @staticmethod
    def _key(path) -> str:
        return os.path.abspath(os.fspath(path))

    def __contains__(self, path) -> bool:
        return self._key(path) in self._offsets

    def __len__(self) -> int:
        return len(self._offsets)

    def get(self, path) -> int:
        """Get the tracked offset for a file (0 if untracked)."""
        return self._offsets.get(self._key(path), 0)

    def seed(self, path) -> int:
        """
        Start tracking a file at its current size.

        Content written before this call is never read.

        Args:
            path: Log file path

        Returns:
            The seeded offset

        Raises:
            OSError: If the file cannot be stat'ed
        """
        key = self._key(path)
        size = os.stat(key).st_size
        with self._lock:
            self._offsets[key] = size
            self._truncated.discard(key)
        logger.debug(f"Tracking {key} from offset {size}")
        return size

    def advance(self, path, offset: int):
        """
        Move a file's offset forward after its batch has been processed.

        Args:
            path: Log file path
            offset: New offset; ignored if behind the current one
        """
        key = self._key(path)
        with self._lock:
            current = self._offsets.get(key, 0)
            if offset < current:
                logger.debug(f"Ignoring offset {offset} for {key}, already at {current}")
                return
            self._offsets[key] = offset

    def forget(self, path):
        """Stop tracking a file."""
        key = self._key(path)
        with self._lock:
            self._offsets.pop(key, None)
            self._truncated.discard(key)

    def read_new_lines(self, path) -> LineBatch:
        """
        Read the lines appended to a file since its tracked offset.

        Uses the file size at call time. Does not move the offset; call
        ``advance(path, batch.end)`` once the lines have been handled.

        The whole window is decoded at once with invalid bytes replaced. A
        multi-byte character cut by the window end (a write caught half
        flushed) becomes U+FFFD in this batch and again in the next one.

        Args:
            path: Log file path

        Returns:
            Batch of new lines, empty when the file has not grown

        Raises:
            OSError: If the file cannot be stat'ed or read
        """
        key = self._key(path)
        with self._lock:
            previous = self._offsets.get(key, 0)
        current = os.stat(key).st_size

        if current < previous:
            with self._lock:
                first_report = key not in self._truncated
                self._truncated.add(key)
            if first_report:
                logger.warning(
                    f"{key} shrank from {previous} to {current} bytes; "
                    f"waiting for it to grow past the old offset"
                )
            return LineBatch(path=key, start=previous, end=previous)

        if current == previous:
            return LineBatch(path=key, start=previous, end=previous)

        with self._lock:
            self._truncated.discard(key)

        with open(key, "rb") as f:
            f.seek(previous)
            data = f.read(current - previous)

        text = data.decode(self.encoding, errors="replace")
        return LineBatch(
            path=key,
            start=previous,
            end=previous + len(data),
            lines=split_lines(text),
        )
