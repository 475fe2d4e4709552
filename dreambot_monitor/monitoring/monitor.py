"""
Log monitor: ties the directory watcher, offset tracker and line processor
together.

A single consumer task reads the watcher's notification stream. Change
notifications are handled in their own tasks so files progress independently,
while a per-file lock keeps batches of the same file strictly in order.
"""

import asyncio
import logging
import os
from collections import defaultdict
from pathlib import Path
from typing import Any, Dict, Optional, Set

from ..config.models import MonitorConfig
from ..config.settings import WatcherSettings
from ..notifications.webhook import WebhookDispatcher
from ..parser.patterns import PatternRuleSet
from .file_watcher import FileNotification, LogFileWatcher, NotificationType
from .hooks import EventHooks, MonitorEvent
from .offsets import OffsetTracker
from .processor import LogLineProcessor, PendingChatStore

logger = logging.getLogger(__name__)


class LogMonitor:
    """
    Watches a log root and turns appended lines into webhook notifications.

    Usage:
        monitor = LogMonitor(load_monitor_config())
        await monitor.start()
        await monitor.wait_until_ready()
        ...
        await monitor.stop()
    """

    def __init__(
        self,
        config: MonitorConfig,
        dispatcher: Optional[WebhookDispatcher] = None,
        watcher_settings: Optional[WatcherSettings] = None,
        hooks: Optional[EventHooks] = None,
        rule_set: Optional[PatternRuleSet] = None,
    ):
        """
        Initialize the monitor.

        Args:
            config: Bot destinations and base log directory
            dispatcher: Webhook dispatcher (one is created if omitted)
            watcher_settings: Polling interval, suffix and ignore patterns
            hooks: Log console hooks (one is created if omitted)
            rule_set: Pattern rules (defaults to the standard set)
        """
        self.config = config
        self.watcher_settings = watcher_settings or WatcherSettings()
        self.hooks = hooks if hooks is not None else EventHooks()
        self.dispatcher = dispatcher if dispatcher is not None else WebhookDispatcher()
        self._owns_dispatcher = dispatcher is None

        self.offsets = OffsetTracker()
        self.pending_chats = PendingChatStore()
        self.processor = LogLineProcessor(
            self.dispatcher,
            chat_webhook_url=config.bot_chat_webhook_url,
            rule_set=rule_set,
            pending_chats=self.pending_chats,
            hooks=self.hooks,
        )

        self.watcher: Optional[LogFileWatcher] = None
        self._consumer_task: Optional[asyncio.Task] = None
        self._tasks: Set[asyncio.Task] = set()
        self._file_locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._ready = asyncio.Event()

        self._stats = {
            "files_added": 0,
            "files_removed": 0,
            "batches_processed": 0,
            "lines_processed": 0,
            "read_errors": 0,
            "watcher_errors": 0,
        }

    @property
    def is_monitoring(self) -> bool:
        return self.watcher is not None and self.watcher.is_running

    async def start(self, root=None):
        """
        Start watching the log root.

        Args:
            root: Directory to watch (defaults to the configured base_log_dir)

        Raises:
            FileNotFoundError: If the directory does not exist
            NotADirectoryError: If the path is not a directory
        """
        if self.is_monitoring:
            logger.warning("Monitor already running")
            return

        root = root or self.config.base_log_dir
        if not root:
            raise FileNotFoundError("No log directory configured")

        self._ready.clear()
        watcher = LogFileWatcher(
            root,
            log_suffix=self.watcher_settings.log_suffix,
            poll_interval=self.watcher_settings.poll_interval,
            ignored_patterns=self.watcher_settings.ignored_patterns,
        )
        await watcher.start()

        self.watcher = watcher
        self._consumer_task = asyncio.create_task(self._consume(watcher))
        logger.info(f"Monitoring started for {watcher.root}")

    async def stop(self):
        """
        Stop watching.

        No new notifications are accepted; batches already in flight run to
        completion before this returns.
        """
        if self.watcher is None:
            return

        watcher = self.watcher
        await watcher.stop()

        if self._consumer_task is not None:
            await self._consumer_task
            self._consumer_task = None

        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

        await self.hooks.drain()

        self.watcher = None
        self._ready.clear()
        logger.info("Monitoring stopped")
        self._emit_status("Monitoring stopped")

    async def close(self):
        """Stop watching and release the dispatcher if this monitor created it."""
        await self.stop()
        if self._owns_dispatcher:
            await self.dispatcher.close()

    async def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for the initial directory scan to finish.

        Returns:
            True once ready, False if the timeout expired first
        """
        try:
            await asyncio.wait_for(self._ready.wait(), timeout)
            return True
        except asyncio.TimeoutError:
            return False

    def update_config(self, config: MonitorConfig):
        """Swap in a new configuration; applies to the next processed line."""
        self.config = config
        self.processor.chat_webhook_url = config.bot_chat_webhook_url
        logger.info(f"Configuration updated ({len(config.bots)} bots)")

    def get_monitoring_status(self) -> Dict[str, Any]:
        return {
            "is_monitoring": self.is_monitoring,
            "ready": self._ready.is_set(),
            "root": str(self.watcher.root) if self.watcher else None,
            "tracked_files": len(self.offsets),
            "pending_chats": len(self.pending_chats),
            "in_flight": len(self._tasks),
            "webhooks": self.dispatcher.get_stats(),
            **self._stats,
        }

    @staticmethod
    def bot_identity(path) -> str:
        """Bot name for a log file: its parent directory name."""
        return Path(path).parent.name

    async def handle_add(self, path: str):
        """Start tracking a file from its current size."""
        if path in self.offsets:
            return

        try:
            # stat can stall on a network share; keep it off the loop
            offset = await asyncio.get_running_loop().run_in_executor(None, self.offsets.seed, path)
        except OSError as e:
            logger.error(f"Could not start tracking {path}: {e}")
            return

        self._stats["files_added"] += 1
        bot_name = self.bot_identity(path)
        logger.info(f"Tracking log file for {bot_name}: {path} (offset {offset})")
        self.hooks.emit(
            MonitorEvent(
                type="file-added",
                content=f"Watching {os.path.basename(path)}",
                bot=bot_name,
                file=path,
            )
        )

    def handle_unlink(self, path: str):
        """Drop all state kept for a deleted file."""
        self.offsets.forget(path)
        self.pending_chats.forget(os.path.abspath(path))
        self._file_locks.pop(os.path.abspath(path), None)
        self._stats["files_removed"] += 1

        bot_name = self.bot_identity(path)
        logger.info(f"Log file removed for {bot_name}: {path}")
        self.hooks.emit(
            MonitorEvent(
                type="file-removed",
                content=f"Stopped watching {os.path.basename(path)}",
                bot=bot_name,
                file=path,
            )
        )

    async def process_file(self, path: str) -> int:
        """
        Process everything appended to a file since its last offset.

        Lines are handled one at a time in file order, each dispatch awaited
        before the next line. The offset only moves once the whole batch is
        done.

        Args:
            path: Log file path

        Returns:
            Number of lines read

        Raises:
            OSError: If the file cannot be stat'ed or read; the offset is
                left unchanged so the same range is retried next time
        """
        path = os.path.abspath(path)

        async with self._file_locks[path]:
            if path not in self.offsets:
                # Appeared between polls without an add; nothing before now is replayed
                await self.handle_add(path)
                return 0

            try:
                batch = await asyncio.get_running_loop().run_in_executor(
                    None, self.offsets.read_new_lines, path
                )
            except OSError as e:
                self._stats["read_errors"] += 1
                logger.error(f"Error reading {path}: {e}")
                raise

            if batch.is_empty:
                return 0

            bot_name = self.bot_identity(path)
            bot_webhook_url = self.config.get_destination_url(bot_name)
            logger.debug(f"Processing {len(batch.lines)} new lines ({batch.byte_count} bytes) from {path}")

            for line in batch.lines:
                await self.processor.process(line, path, bot_name, bot_webhook_url)

            self.offsets.advance(path, batch.end)
            self._stats["batches_processed"] += 1
            self._stats["lines_processed"] += len(batch.lines)
            return len(batch.lines)

    async def _consume(self, watcher: LogFileWatcher):
        async for notification in watcher:
            await self._handle_notification(notification)

    async def _handle_notification(self, notification: FileNotification):
        if notification.type is NotificationType.ADD:
            await self.handle_add(notification.path)
        elif notification.type is NotificationType.CHANGE:
            task = asyncio.create_task(self._process_change(notification.path))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
        elif notification.type is NotificationType.UNLINK:
            self.handle_unlink(notification.path)
        elif notification.type is NotificationType.ERROR:
            self._stats["watcher_errors"] += 1
            logger.error(f"Watcher error: {notification.error}")
            self.hooks.emit(MonitorEvent(type="status", content=f"Watcher error: {notification.error}", level="error"))
        elif notification.type is NotificationType.READY:
            self._ready.set()
            logger.info(f"Initial scan complete, tracking {len(self.offsets)} files")
            self._emit_status("Monitoring started successfully")

    async def _process_change(self, path: str):
        try:
            await self.process_file(path)
        except OSError:
            # Already logged; the next change notification retries the range
            pass
        except Exception:
            logger.exception(f"Unexpected error processing {path}")

    def _emit_status(self, message: str):
        self.hooks.emit(MonitorEvent(type="status", content=message))
        self.hooks.emit(
            MonitorEvent(
                type="monitoring-status",
                content="active" if self.is_monitoring else "inactive",
            )
        )
