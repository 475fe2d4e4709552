"""
Monitoring package: directory watching, incremental reads and line processing.
"""

from .file_watcher import FileNotification, LogFileWatcher, NotificationType
from .hooks import EventHooks, MonitorEvent
from .monitor import LogMonitor
from .offsets import LineBatch, OffsetTracker
from .processor import LineResult, LogLineProcessor, PendingChatStore

__all__ = [
    "FileNotification",
    "LogFileWatcher",
    "NotificationType",
    "EventHooks",
    "MonitorEvent",
    "LogMonitor",
    "LineBatch",
    "OffsetTracker",
    "LineResult",
    "LogLineProcessor",
    "PendingChatStore",
]
