"""File watcher that keeps the corpus index and path caches coherent."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

if TYPE_CHECKING:
    from .core import MocPaths

logger = logging.getLogger(__name__)


class DebouncedHandler(FileSystemEventHandler):
    """File system event handler with debouncing."""

    def __init__(
        self,
        callback: Callable[[set[Path]], None],
        debounce_seconds: float = 1.0,
    ):
        """Initialize the debounced handler.

        Args:
            callback: Function to call with changed files after debounce.
            debounce_seconds: Debounce window in seconds.
        """
        super().__init__()
        self._callback = callback
        self._debounce_seconds = debounce_seconds
        self._pending_files: set[Path] = set()
        self._timer: threading.Timer | None = None
        self._lock = threading.Lock()

    def _fire(self) -> None:
        with self._lock:
            files = self._pending_files.copy()
            self._pending_files.clear()
            self._timer = None
        if files:
            self._callback(files)

    def _schedule_callback(self) -> None:
        """Schedule the callback after debounce period."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self._debounce_seconds, self._fire)
            self._timer.daemon = True
            self._timer.start()

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._pending_files.clear()

    def _add(self, path: Path) -> bool:
        if path.suffix.lower() != ".md":
            return False
        with self._lock:
            self._pending_files.add(path)
        return True

    def _handle_event(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        if self._add(Path(str(event.src_path))):
            self._schedule_callback()

    def on_created(self, event: FileSystemEvent) -> None:
        self._handle_event(event)

    def on_modified(self, event: FileSystemEvent) -> None:
        self._handle_event(event)

    def on_deleted(self, event: FileSystemEvent) -> None:
        self._handle_event(event)

    def on_moved(self, event: FileSystemEvent) -> None:
        """Handle file move/rename."""
        if event.is_directory:
            return

        changed = self._add(Path(str(event.src_path)))
        dest_path = getattr(event, "dest_path", None)
        if dest_path:
            changed = self._add(Path(str(dest_path))) or changed

        if changed:
            self._schedule_callback()


class VaultWatcher:
    """Watch the vault and invalidate path caches when notes change."""

    def __init__(
        self,
        service: MocPaths,
        vault_root: Path,
        debounce_seconds: float = 1.0,
        on_change: Callable[[], None] | None = None,
    ):
        """Initialize the watcher.

        Args:
            service: Service whose corpus is reloaded and caches cleared.
            vault_root: Directory to observe.
            debounce_seconds: Debounce window for batching changes.
            on_change: Optional hook run after the caches are cleared.
        """
        self._service = service
        self._vault_root = vault_root
        self._debounce_seconds = debounce_seconds
        self._on_change = on_change
        self._observer: Observer | None = None
        self._handler: DebouncedHandler | None = None
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    def _on_files_changed(self, files: set[Path]) -> None:
        """Reload the corpus and clear caches after a debounced batch."""
        logger.info("%d note(s) changed, refreshing paths", len(files))
        reload = getattr(self._service.corpus, "reload", None)
        if callable(reload):
            reload()
        self._service.invalidate()
        if self._on_change is not None:
            self._on_change()

    def start(self) -> None:
        """Start watching for file changes."""
        if self._running:
            return

        if not self._vault_root.exists():
            logger.warning("Vault root does not exist: %s", self._vault_root)
            return

        self._handler = DebouncedHandler(
            callback=self._on_files_changed,
            debounce_seconds=self._debounce_seconds,
        )
        self._observer = Observer()
        self._observer.schedule(self._handler, str(self._vault_root), recursive=True)
        self._observer.start()
        self._running = True
        logger.info("Started watching: %s", self._vault_root)

    def stop(self) -> None:
        """Stop watching for file changes."""
        if not self._running or self._observer is None:
            return

        if self._handler is not None:
            self._handler.cancel()
        self._observer.stop()
        self._observer.join(timeout=5.0)
        self._observer = None
        self._handler = None
        self._running = False
        logger.info("Stopped vault watcher")
