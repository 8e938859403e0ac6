from __future__ import annotations

from pathlib import Path
from queue import Queue

import pytest
from watchdog.events import FileDeletedEvent, FileMovedEvent

from escape_terminal.config import StartupError
from escape_terminal.usb_watch import (
    UsbEventHandler,
    UsbSignal,
    UsbSignalKind,
    UsbWatcher,
    decode_deleted,
    decode_moved,
)


def test_moved_label_maps_digit_to_slot() -> None:
    assert decode_moved("/dev/disk/by-label/1-ESCAPE") == UsbSignal(UsbSignalKind.INSERTED, 0)
    assert decode_moved("/dev/disk/by-label/4-ESCAPE") == UsbSignal(UsbSignalKind.INSERTED, 3)


def test_moved_other_labels_are_ignored() -> None:
    assert decode_moved("/dev/disk/by-label/BACKUP") is None
    assert decode_moved("/dev/disk/by-label/9-ESCAPE") is None
    assert decode_moved("/dev/disk/by-label/X-ESCAPE") is None


def test_deleted_label_is_eject() -> None:
    assert decode_deleted("/dev/disk/by-label/2-ESCAPE") == UsbSignal(UsbSignalKind.REMOVED)
    assert decode_deleted("/dev/disk/by-label/DATA") is None


def test_handler_queues_signals_in_order() -> None:
    signals: Queue[UsbSignal] = Queue()
    handler = UsbEventHandler(signals)
    handler.dispatch(FileMovedEvent("/labels/.tmp-1", "/labels/2-ESCAPE"))
    handler.dispatch(FileMovedEvent("/labels/.tmp-2", "/labels/OTHER"))
    handler.dispatch(FileDeletedEvent("/labels/2-ESCAPE"))

    assert signals.get_nowait() == UsbSignal(UsbSignalKind.INSERTED, 1)
    assert signals.get_nowait() == UsbSignal(UsbSignalKind.REMOVED)
    assert signals.empty()


def test_watcher_requires_directory(tmp_path: Path) -> None:
    watcher = UsbWatcher(tmp_path / "missing")
    with pytest.raises(StartupError):
        watcher.start()


def test_watcher_starts_and_stops(tmp_path: Path) -> None:
    watcher = UsbWatcher(tmp_path)
    watcher.start()
    try:
        assert watcher.signals.empty()
    finally:
        watcher.stop()
    watcher.stop()
