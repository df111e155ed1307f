"""
Background file watching.

Exports:
    - FileWatcher: Abstract per-path watcher
    - PollingFileWatcher: asyncio stat-polling implementation
"""

from roadmap_tracker.background.watcher import FileWatcher, PollingFileWatcher

__all__ = ["FileWatcher", "PollingFileWatcher"]
