from __future__ import annotations

import logging
import queue
import threading
from typing import Callable, List, Optional

from contentbuild.core.log_scanner import split_log_lines


class OutputLog:
    """
    Append-only output buffer owned by one thread.

    Appends from the owning thread are written straight away. Appends from
    any other thread are queued and only reach the buffer when the owner
    calls ``drain()`` (the GUI polls it from a timer). ``sink`` is called on
    the owning thread with each written line, e.g. a text widget's append.
    """

    def __init__(self, sink: Optional[Callable[[str], None]] = None, owner: Optional[int] = None) -> None:
        self._owner = owner if owner is not None else threading.get_ident()
        self._pending: "queue.Queue[str]" = queue.Queue()
        self._lines: List[str] = []
        self.sink = sink

    @property
    def on_owner_thread(self) -> bool:
        return threading.get_ident() == self._owner

    def append(self, text: Optional[str]) -> None:
        if text is None:
            return
        if not self.on_owner_thread:
            self._pending.put(text)
            return
        # Earlier cross-thread lines go first
        self.drain()
        self._write(text)

    def drain(self) -> int:
        if not self.on_owner_thread:
            raise RuntimeError("OutputLog.drain() must be called from the owning thread")

        n = 0
        while True:
            try:
                text = self._pending.get_nowait()
            except queue.Empty:
                break
            self._write(text)
            n += 1
        return n

    def _write(self, text: str) -> None:
        self._lines.append(text)
        if self.sink is not None:
            self.sink(text)

    def clear(self) -> None:
        self._lines.clear()

    def text(self) -> str:
        return "\n".join(self._lines)

    def lines(self) -> List[str]:
        """Current contents as individual lines (multi-line appends are split)."""
        return split_log_lines(self.text())


class OutputLogHandler(logging.Handler):
    """Forward log records into an OutputLog (safe from worker threads)."""

    def __init__(self, output: OutputLog, level: int = logging.INFO) -> None:
        super().__init__(level)
        self.output = output
        self.setFormatter(logging.Formatter("%(message)s"))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            if record.levelno >= logging.WARNING:
                msg = f"{record.levelname}: {msg}"
            self.output.append(msg)
        except Exception:
            self.handleError(record)
