"""Transaction logs that record every change made to a key-value store."""

from __future__ import annotations

import queue
import re
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path
from typing import Iterator
from urllib.parse import quote_plus, unquote_plus

_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


class EventType(IntEnum):
    """Kinds of change a transaction log records."""

    DELETE = 1
    PUT = 2


@dataclass(frozen=True)
class Event:
    """One recorded change."""

    sequence: int
    event_type: EventType
    key: str
    value: str = ""


class TransactionLogError(Exception):
    """Raised when a transaction log cannot be opened, read or written."""


class TransactionLogger(ABC):
    """A durable record of puts and deletes that can be replayed."""

    @abstractmethod
    def write_delete(self, key: str) -> None:
        """Queue a delete of ``key`` for writing."""

    @abstractmethod
    def write_put(self, key: str, value: str) -> None:
        """Queue a put of ``value`` under ``key`` for writing."""

    @abstractmethod
    def errors(self) -> queue.Queue:
        """Return the queue on which write errors are reported."""

    @abstractmethod
    def last_sequence(self) -> int:
        """Return the last sequence number read or written."""

    @abstractmethod
    def run(self) -> None:
        """Start writing queued events."""

    @abstractmethod
    def wait(self) -> None:
        """Block until every queued event has been written."""

    @abstractmethod
    def close(self) -> None:
        """Write what is queued, stop writing and release the log."""

    @abstractmethod
    def read_events(self) -> Iterator[Event]:
        """Yield the events already in the log, oldest first."""

    def __enter__(self) -> TransactionLogger:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def _decode_value(raw: str) -> str:
    if _BAD_ESCAPE.search(raw):
        raise TransactionLogError(f"value decoding failure: invalid escape in {raw!r}")
    return unquote_plus(raw)


def _parse_line(line: str) -> Event:
    fields = line.split()
    try:
        sequence = int(fields[0])
    except (IndexError, ValueError):
        raise TransactionLogError("transaction numbers out of sequence") from None
    try:
        event_type = EventType(int(fields[1]))
        key = fields[2]
    except (IndexError, ValueError):
        raise TransactionLogError(f"malformed transaction log line: {line!r}") from None
    raw_value = fields[3] if len(fields) > 3 else ""
    return Event(sequence, event_type, key, raw_value)


class FileTransactionLogger(TransactionLogger):
    """A transaction log kept as tab-separated lines in a file."""

    def __init__(self, filename: str | Path) -> None:
        self._path = Path(filename)
        try:
            self._file = open(self._path, "a", encoding="utf-8")
        except OSError as exc:
            raise TransactionLogError(f"cannot open transaction log file: {exc}") from exc
        self._lock = threading.Lock()
        self._last_sequence = 0
        self._events: queue.Queue = queue.Queue()
        self._errors: queue.Queue = queue.Queue()
        self._worker: threading.Thread | None = None

    def write_put(self, key: str, value: str) -> None:
        self._enqueue(Event(0, EventType.PUT, key, quote_plus(value, safe="")))

    def write_delete(self, key: str) -> None:
        self._enqueue(Event(0, EventType.DELETE, key))

    def _enqueue(self, event: Event) -> None:
        if self._worker is None:
            raise RuntimeError("transaction logger is not running")
        self._events.put(event)

    def errors(self) -> queue.Queue:
        return self._errors

    def last_sequence(self) -> int:
        with self._lock:
            return self._last_sequence

    def run(self) -> None:
        if self._worker is not None:
            return
        self._worker = threading.Thread(target=self._drain, daemon=True)
        self._worker.start()

    def _drain(self) -> None:
        while True:
            event = self._events.get()
            try:
                if event is None:
                    return
                with self._lock:
                    self._last_sequence += 1
                    sequence = self._last_sequence
                try:
                    self._file.write(
                        f"{sequence}\t{int(event.event_type)}\t{event.key}\t{event.value}\n"
                    )
                    self._file.flush()
                except (OSError, ValueError) as exc:
                    self._errors.put(TransactionLogError(f"cannot write to log file: {exc}"))
            finally:
                self._events.task_done()

    def wait(self) -> None:
        self._events.join()

    def close(self) -> None:
        self.wait()
        worker, self._worker = self._worker, None
        if worker is not None:
            self._events.put(None)
            worker.join()
        self._file.close()

    def read_events(self) -> Iterator[Event]:
        try:
            with open(self._path, encoding="utf-8") as source:
                for line in source:
                    parsed = _parse_line(line)
                    with self._lock:
                        if self._last_sequence >= parsed.sequence:
                            raise TransactionLogError("transaction numbers out of sequence")
                    event = Event(
                        parsed.sequence, parsed.event_type, parsed.key, _decode_value(parsed.value)
                    )
                    with self._lock:
                        self._last_sequence = event.sequence
                    yield event
        except OSError as exc:
            raise TransactionLogError(f"transaction log read failure: {exc}") from exc