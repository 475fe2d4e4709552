"""
Polling directory watcher for bot log files.

DreamBot writes its logs through buffered writers and the log directory is
often on a network share, so native filesystem events are unreliable.
watchdog's PollingObserver compares directory snapshots on a timer instead,
and its events are bridged onto the asyncio loop as a stream of typed
notifications.
"""

import asyncio
import fnmatch
import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import AsyncIterator, List, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers.polling import PollingObserver

logger = logging.getLogger(__name__)


class NotificationType(Enum):
    ADD = "add"
    CHANGE = "change"
    UNLINK = "unlink"
    ERROR = "error"
    READY = "ready"


@dataclass(frozen=True)
class FileNotification:
    """One notification from the watcher."""

    type: NotificationType
    path: Optional[str] = None
    error: Optional[str] = None


class _LogFileEventHandler(FileSystemEventHandler):
    """Forwards watchdog events (observer thread) to the watcher."""

    def __init__(self, watcher: "LogFileWatcher"):
        super().__init__()
        self.watcher = watcher

    def on_created(self, event: FileSystemEvent):
        if not event.is_directory:
            self.watcher.publish(NotificationType.ADD, event.src_path)

    def on_modified(self, event: FileSystemEvent):
        if not event.is_directory:
            self.watcher.publish(NotificationType.CHANGE, event.src_path)

    def on_deleted(self, event: FileSystemEvent):
        if not event.is_directory:
            self.watcher.publish(NotificationType.UNLINK, event.src_path)
        elif os.path.abspath(os.fsdecode(event.src_path)) == str(self.watcher.root):
            self.watcher.publish_error(f"Watched directory was removed: {self.watcher.root}")

    def on_moved(self, event: FileSystemEvent):
        if not event.is_directory:
            self.watcher.publish(NotificationType.UNLINK, event.src_path)
            self.watcher.publish(NotificationType.ADD, event.dest_path)


class LogFileWatcher:
    """
    Watches a root directory recursively for log files.

    Usage:
        watcher = LogFileWatcher(Path("~/DreamBot/Logs").expanduser())
        await watcher.start()
        async for notification in watcher:
            ...
        # elsewhere
        await watcher.stop()

    Files already present at start are reported as ``add`` notifications,
    followed by a single ``ready`` once the initial scan is done.
    """

    def __init__(
        self,
        root,
        log_suffix: str = ".log",
        poll_interval: float = 1.0,
        ignored_patterns: Optional[List[str]] = None,
    ):
        """
        Initialize the watcher.

        Args:
            root: Directory holding one sub-directory per bot
            log_suffix: Only files ending with this suffix are reported
            poll_interval: Seconds between directory snapshots
            ignored_patterns: Filename globs that are never reported
        """
        self.root = Path(root).expanduser().resolve()
        self.log_suffix = log_suffix
        self.poll_interval = poll_interval
        self.ignored_patterns = ignored_patterns if ignored_patterns is not None else ["*.tmp", "*.bak", "*.old"]

        self._observer: Optional[PollingObserver] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._queue: Optional[asyncio.Queue] = None
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    def matches(self, path) -> bool:
        """Check if a path is a log file this watcher reports."""
        name = os.path.basename(os.fsdecode(path))
        if not name.endswith(self.log_suffix):
            return False
        return not any(fnmatch.fnmatch(name, pattern) for pattern in self.ignored_patterns)

    async def start(self):
        """
        Scan the root directory and start polling it.

        Raises:
            FileNotFoundError: If the root directory does not exist
            NotADirectoryError: If the root is not a directory
        """
        if self._running:
            return

        if not self.root.exists():
            raise FileNotFoundError(f"Log directory not found: {self.root}")
        if not self.root.is_dir():
            raise NotADirectoryError(f"Log directory is not a directory: {self.root}")

        self._loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue()
        self._running = True

        # The emitter takes its baseline snapshot inside start(), so scanning
        # afterwards leaves no window where a new file goes unreported
        self._observer = PollingObserver(timeout=self.poll_interval)
        self._observer.schedule(_LogFileEventHandler(self), str(self.root), recursive=True)
        self._observer.start()

        for path in self._scan():
            self._queue.put_nowait(FileNotification(NotificationType.ADD, path))

        self._queue.put_nowait(FileNotification(NotificationType.READY))
        logger.info(f"Watching {self.root} for *{self.log_suffix} files (poll every {self.poll_interval}s)")

    def _scan(self) -> List[str]:
        found = []
        try:
            for path in sorted(self.root.rglob(f"*{self.log_suffix}")):
                if path.is_file() and self.matches(path):
                    found.append(str(path))
        except OSError as e:
            self.publish_error(f"Initial scan of {self.root} failed: {e}")
        return found

    async def stop(self):
        """Stop polling. Notifications already queued are still delivered."""
        if not self._running:
            return

        self._running = False
        if self._observer is not None:
            self._observer.stop()
            await asyncio.to_thread(self._observer.join)
            self._observer = None

        # End-of-stream marker for consumers
        self._queue.put_nowait(None)
        logger.info(f"Stopped watching {self.root}")

    def publish(self, notification_type: NotificationType, path):
        """Queue a notification; safe to call from the observer thread."""
        path = os.fsdecode(path)
        if not self.matches(path):
            return
        self._put(FileNotification(notification_type, os.path.abspath(path)))

    def publish_error(self, message: str):
        """Queue an error notification; safe to call from the observer thread."""
        self._put(FileNotification(NotificationType.ERROR, error=message))

    def _put(self, notification: FileNotification):
        if self._loop is None or self._queue is None:
            return
        try:
            if self._loop.is_closed():
                return
            self._loop.call_soon_threadsafe(self._queue.put_nowait, notification)
        except RuntimeError:
            # Loop shut down between the check and the call
            logger.debug(f"Dropped {notification.type.value} notification after loop closed")

    async def notifications(self) -> AsyncIterator[FileNotification]:
        """Yield notifications until the watcher is stopped."""
        if self._queue is None:
            raise RuntimeError("Watcher has not been started")

        while True:
            notification = await self._queue.get()
            if notification is None:
                return
            yield notification

    def __aiter__(self) -> AsyncIterator[FileNotification]:
        return self.notifications()
