"""
Consume folder watcher.

Monitors the configured watch folder and uploads every new document to
Paperless. Uses the watchdog library for cross-platform file system
event monitoring, plus a one-time sweep of files already present at
startup.

Per file: discovered -> uploading -> uploaded -> disposed, or failed.
Nothing is persisted and nothing is retried; a file that failed stays in
place and is picked up again by the next startup sweep or by a new
creation event.
"""

import threading
from pathlib import Path
from typing import Callable, Optional, Sequence

from loguru import logger
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

from paperless_uploader.models.schemas import DispositionPolicy, UploadOutcome, UploadRequest
from paperless_uploader.utils.helpers import ensure_directory, iter_regular_files, normalise_path
from paperless_uploader.utils.paperless_client import PaperlessClient, PaperlessError
from paperless_uploader.watchers.disposition import apply_disposition


class WatchSetupError(Exception):
    """The watch folder or the observer could not be set up, or the observer died."""


class DocumentUploader:
    """Uploads one file and applies the post-upload action on success."""

    def __init__(self, client: PaperlessClient, tag_ids: Sequence[int], policy: DispositionPolicy):
        """
        Initialize document uploader.

        Args:
            client: Paperless client (shared, read-only)
            tag_ids: Tag ids resolved once at startup
            policy: Post-upload action
        """
        self.client = client
        self.tag_ids = list(tag_ids)
        self.policy = policy

    def upload(self, path: Path, source: str = "new") -> UploadOutcome:
        """
        Upload ``path`` and dispose of it if Paperless accepted it.

        Upload errors are logged and returned in the outcome, never raised.

        Args:
            path: File to upload
            source: Label for log messages ("new" or "existing")

        Returns:
            Outcome of the upload attempt
        """
        request = UploadRequest(path=Path(path), tag_ids=list(self.tag_ids))

        try:
            self.client.upload_document(request.path, request.tag_ids)
        except PaperlessError as e:
            logger.error(f"Failed to upload {source} document {request.path}: {e}")
            return UploadOutcome(path=request.path, success=False, error=str(e))

        logger.success(f"Successfully uploaded {source} file {request.path}")
        apply_disposition(self.policy, request.path)
        return UploadOutcome(path=request.path, success=True)


class UploadEventHandler(FileSystemEventHandler):
    """Watchdog handler that uploads files appearing in the watch folder."""

    def __init__(
        self,
        uploader: DocumentUploader,
        watch_folder: Path,
        settle_delay: float = 1.0,
        stop_event: Optional[threading.Event] = None,
    ) -> None:
        super().__init__()
        self.uploader = uploader
        self.watch_folder = normalise_path(watch_folder)
        self.settle_delay = settle_delay
        self.stop_event = stop_event or threading.Event()

    def on_created(self, event: FileSystemEvent) -> None:
        """Upload a newly created file."""
        if event.is_directory:
            return

        self._handle_new_file(event.src_path)

    def on_moved(self, event: FileSystemEvent) -> None:
        """Treat a rename into the watch folder as a new file."""
        if event.is_directory:
            return

        dest = getattr(event, "dest_path", None)
        if dest and normalise_path(Path(dest)).parent == self.watch_folder:
            self._handle_new_file(dest)

    def _handle_new_file(self, raw_path) -> None:
        path = Path(raw_path)
        logger.info(f"New file detected: {path}")

        # Give the writer time to finish flushing the file
        if self.stop_event.wait(self.settle_delay):
            logger.info(f"Shutdown requested, skipping {path}")
            return

        try:
            self.uploader.upload(path, "new")
        except Exception as e:
            # Keep the observer thread alive whatever happens to one file
            logger.error(f"Error handling {path}: {e}")


class FolderWatcher:
    """Watch-and-upload pipeline for a single watch folder."""

    def __init__(
        self,
        watch_folder: Path,
        uploader: DocumentUploader,
        settle_delay: float = 1.0,
        observer_factory: Callable[[], BaseObserver] = Observer,
        poll_interval: float = 1.0,
    ):
        """
        Initialize folder watcher.

        Args:
            watch_folder: Directory to monitor
            uploader: Upload and disposition logic
            settle_delay: Seconds to wait after a creation event before uploading
            observer_factory: Builds the watchdog observer
            poll_interval: How often the run loop checks the observer's health
        """
        self.watch_folder = Path(watch_folder)
        self.uploader = uploader
        self.poll_interval = poll_interval

        self._stop_event = threading.Event()
        self.ready = threading.Event()

        self.event_handler = UploadEventHandler(
            uploader,
            self.watch_folder,
            settle_delay=settle_delay,
            stop_event=self._stop_event,
        )
        self._observer_factory = observer_factory
        self.observer: Optional[BaseObserver] = None

    def ensure_watch_folder(self):
        """Create the watch folder if it doesn't exist."""
        try:
            if ensure_directory(self.watch_folder):
                logger.info(f"Watch folder '{self.watch_folder}' not found, created it.")
        except OSError as e:
            raise WatchSetupError(f"failed to create watch folder: {e}") from e

    def start_watching(self):
        """Subscribe to file system events on the watch folder."""
        self.ensure_watch_folder()

        observer = self._observer_factory()
        try:
            observer.schedule(self.event_handler, str(self.watch_folder), recursive=False)
            observer.start()
        except OSError as e:
            raise WatchSetupError(f"failed to watch {self.watch_folder}: {e}") from e

        self.observer = observer
        logger.success(f"Started watching: {self.watch_folder}")

    def stop_watching(self):
        """Stop watching."""
        if self.observer is None:
            return

        self.observer.stop()
        if self.observer.is_alive():
            self.observer.join()
        self.observer = None
        logger.info("File system observer stopped")

    def reconcile(self) -> list[UploadOutcome]:
        """
        Upload every file already present in the watch folder.

        One file failing does not stop the sweep.

        Returns:
            Outcome per file, in enumeration order
        """
        outcomes = []

        try:
            paths = list(iter_regular_files(self.watch_folder))
        except OSError as e:
            logger.error(f"Error processing existing files: {e}")
            paths = []

        for path in paths:
            if self.stopping:
                break
            try:
                outcome = self.uploader.upload(path, "existing")
            except Exception as e:
                logger.error(f"Error handling existing file {path}: {e}")
                outcome = UploadOutcome(path=path, success=False, error=str(e))
            outcomes.append(outcome)

        logger.info(f"Startup sweep finished: {len(outcomes)} file(s) processed")
        return outcomes

    def stop(self):
        """Ask a running pipeline to shut down."""
        self._stop_event.set()

    def reset(self):
        """Clear the stop request so a stopped pipeline can run again."""
        self._stop_event.clear()
        self.ready.clear()

    @property
    def stopping(self) -> bool:
        return self._stop_event.is_set()

    def run(self):
        """
        Run the pipeline until ``stop()`` is called.

        The subscription is opened before the startup sweep so no file
        slips between the two; a file may be uploaded twice instead.

        Raises:
            WatchSetupError: Setup failed or the observer died while running
        """
        logger.info(f"Watching directory: {self.watch_folder}")

        try:
            self.start_watching()
            self.reconcile()
            self.ready.set()

            while not self._stop_event.wait(self.poll_interval):
                if self.observer is None or not self.observer.is_alive():
                    raise WatchSetupError("file system observer stopped unexpectedly")

        finally:
            self.stop_watching()
