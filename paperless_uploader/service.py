"""
Background service adapter.

Runs the folder watcher on a worker thread so a host service manager
(or the CLI's signal handlers) can drive it through ``start()``,
``stop()`` and ``wait()``.
"""

import threading
from typing import Optional

from loguru import logger

from paperless_uploader.watchers.filesystem import FolderWatcher


class UploaderService:
    """Start/stop wrapper around a ``FolderWatcher``."""

    def __init__(self, watcher: FolderWatcher, name: str = "PaperlessUploader"):
        self.watcher = watcher
        self.name = name
        self.error: Optional[BaseException] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _run(self):
        try:
            self.watcher.run()
        except Exception as e:
            self.error = e
            logger.error(f"{self.name} stopped with error: {e}")

    def start(self):
        """Start the watcher on a background thread."""
        if self.running:
            logger.warning(f"{self.name} is already running")
            return

        logger.info(f"{self.name} service starting.")
        self.error = None
        self.watcher.reset()
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None):
        """Ask the watcher to stop and wait for the worker thread."""
        if self._thread is None:
            return

        logger.info(f"{self.name} service stopping.")
        self.watcher.stop()
        self._thread.join(timeout)
        if not self._thread.is_alive():
            self._thread = None
            logger.info(f"{self.name} service stopped.")

    def wait(self, poll: float = 1.0) -> Optional[BaseException]:
        """
        Block until the worker thread exits.

        Returns:
            The error that ended the watcher, or None on clean shutdown
        """
        thread = self._thread
        while thread is not None and thread.is_alive():
            thread.join(poll)
        return self.error
