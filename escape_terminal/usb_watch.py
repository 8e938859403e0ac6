"""USB insert/eject bridge.

Plugging a stick labelled ``<digit>-ESCAPE`` makes udev rename a link into the
watched device-label directory; unplugging deletes it. A watchdog observer
turns those filesystem events into ``UsbSignal`` values on a queue that the
game loop drains one per tick.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from queue import Queue

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .config import StartupError

logger = logging.getLogger(__name__)

USB_LABEL_SUFFIX = "-ESCAPE"
USB_SLOTS = 4


class UsbSignalKind(str, Enum):
    INSERTED = "inserted"
    REMOVED = "removed"


@dataclass(frozen=True, slots=True)
class UsbSignal:
    kind: UsbSignalKind
    slot: int | None = None


def _label(path: str | bytes) -> str:
    return os.path.basename(os.fsdecode(path))


def decode_moved(dest_path: str | bytes) -> UsbSignal | None:
    """A link renamed into place: ``3-ESCAPE`` means slot 2 was plugged."""

    label = _label(dest_path)
    if not label.endswith(USB_LABEL_SUFFIX):
        return None
    slot = ord(label[0]) - ord("1")
    if not 0 <= slot < USB_SLOTS:
        logger.warning("ignoring USB label with no slot digit: %r", label)
        return None
    return UsbSignal(UsbSignalKind.INSERTED, slot)


def decode_deleted(src_path: str | bytes) -> UsbSignal | None:
    if not _label(src_path).endswith(USB_LABEL_SUFFIX):
        return None
    return UsbSignal(UsbSignalKind.REMOVED)


class UsbEventHandler(FileSystemEventHandler):
    def __init__(self, signals: Queue[UsbSignal]) -> None:
        super().__init__()
        self._signals = signals

    def on_moved(self, event: FileSystemEvent) -> None:
        self._forward(decode_moved(event.dest_path))

    def on_deleted(self, event: FileSystemEvent) -> None:
        self._forward(decode_deleted(event.src_path))

    def _forward(self, signal: UsbSignal | None) -> None:
        if signal is None:
            return
        logger.debug("usb signal queued: %s", signal)
        self._signals.put(signal)


class UsbWatcher:
    def __init__(self, watch_dir: Path) -> None:
        self._watch_dir = Path(watch_dir)
        self._signals: Queue[UsbSignal] = Queue()
        self._observer: Observer | None = None

    @property
    def signals(self) -> Queue[UsbSignal]:
        return self._signals

    def start(self) -> None:
        if not self._watch_dir.is_dir():
            raise StartupError(f"cannot watch {self._watch_dir}: not a directory")
        observer = Observer()
        observer.schedule(UsbEventHandler(self._signals), str(self._watch_dir), recursive=False)
        try:
            observer.start()
        except OSError as exc:
            raise StartupError(f"cannot watch {self._watch_dir}: {exc}") from exc
        self._observer = observer
        logger.info("watching %s for USB labels", self._watch_dir)

    def stop(self) -> None:
        observer = self._observer
        self._observer = None
        if observer is None:
            return
        observer.stop()
        observer.join(timeout=1.0)
        if observer.is_alive():
            logger.warning("USB watcher thread did not stop cleanly")
