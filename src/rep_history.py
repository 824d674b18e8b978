import csv
import io
import json
import logging
import os
import tempfile
import threading
from datetime import datetime
from pathlib import Path
from typing import Protocol

from rep_errors import EmptyHistory, InvalidStoredData, PersistenceUnavailable
from rep_counter import RepCompleted
from pushup_settings import HISTORY_KEY, TIMESTAMP_FORMAT

logger = logging.getLogger(__name__)

CSV_HEADER = ["Repetition", "Timestamp"]

_path_locks = {}
_path_locks_guard = threading.Lock()


def lock_for_path(path: Path) -> threading.RLock:
    """One lock per resolved file path, shared by every store in the process."""
    key = Path(path).resolve()
    with _path_locks_guard:
        return _path_locks.setdefault(key, threading.RLock())


class KeyValueStore(Protocol):
    lock: threading.RLock

    def get(self, key: str) -> str | None: ...
    def set(self, key: str, value: str) -> None: ...
    def remove(self, key: str) -> None: ...


class MemoryKeyValueStore:
    """Dict-backed store (tests, throwaway sessions)."""

    def __init__(self, data=None):
        self.data = dict(data or {})
        self.lock = threading.RLock()

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value):
        self.data[key] = value

    def remove(self, key):
        self.data.pop(key, None)


class JsonFileKeyValueStore:
    """
    String key-value store kept in a single JSON object file.

    Every call reads the file again, so changes made by another process
    between calls are seen. Stores opened on the same path share `lock`, so
    read-modify-write sequences from different threads do not interleave.
    I/O failures are raised as PersistenceUnavailable.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self.lock = lock_for_path(self.path)

    def _load(self) -> dict:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                text = f.read()
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise PersistenceUnavailable(f"Cannot read {self.path}: {exc}") from exc

        if not text.strip():
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            logger.warning("Ignoring unreadable store file %s", self.path)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring store file %s: not a JSON object", self.path)
            return {}
        return data

    def _dump(self, data: dict):
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=self.path.name, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, ensure_ascii=False, indent=2)
                os.replace(tmp, self.path)
            except BaseException:
                if os.path.exists(tmp):
                    os.unlink(tmp)
                raise
        except OSError as exc:
            raise PersistenceUnavailable(f"Cannot write {self.path}: {exc}") from exc

    def get(self, key):
        with self.lock:
            value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set(self, key, value):
        with self.lock:
            data = self._load()
            data[key] = value
            self._dump(data)

    def remove(self, key):
        with self.lock:
            data = self._load()
            if key in data:
                del data[key]
                self._dump(data)


def encode_history(events) -> str:
    return json.dumps([{"timestamp": e.timestamp.isoformat()} for e in events])


def parse_timestamp(text: str) -> datetime:
    # fromisoformat only accepts a "Z" suffix from 3.11 on
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def decode_history(text: str) -> list[RepCompleted]:
    """Parse the stored JSON list of {"timestamp": ISO-8601} objects."""
    try:
        items = json.loads(text)
    except json.JSONDecodeError as exc:
        raise InvalidStoredData(f"History is not valid JSON: {exc}") from exc
    if not isinstance(items, list):
        raise InvalidStoredData("History is not a list")

    events = []
    for i, item in enumerate(items):
        try:
            events.append(RepCompleted(timestamp=parse_timestamp(item["timestamp"])))
        except (AttributeError, TypeError, KeyError, ValueError) as exc:
            raise InvalidStoredData(f"Bad history entry #{i}: {item!r}") from exc
    return events


def format_timestamp(ts: datetime) -> str:
    # Formatted in the offset it was recorded with, not the reader's zone
    return ts.strftime(TIMESTAMP_FORMAT)


class RepHistory:
    """
    Append-only log of completed push-ups on top of a KeyValueStore.

    Nothing is cached: list() decodes the backend on every call, so a clear
    made elsewhere shows up at the next read.
    """

    def __init__(self, backend: KeyValueStore, key=HISTORY_KEY):
        self.backend = backend
        self.key = key

    def _read(self) -> list[RepCompleted]:
        text = self.backend.get(self.key)
        if text is None:
            return []
        try:
            return decode_history(text)
        except InvalidStoredData as exc:
            logger.warning("Discarding stored history: %s", exc)
            return []

    def append(self, event: RepCompleted):
        with self.backend.lock:
            events = self._read()
            events.append(event)
            self.backend.set(self.key, encode_history(events))

    def list(self) -> list[RepCompleted]:
        return self._read()

    def clear(self):
        with self.backend.lock:
            self.backend.remove(self.key)
        logger.info("History cleared")

    def __len__(self):
        return len(self._read())

    def export_csv(self) -> str:
        """
        Render the log as CSV: "Repetition,Timestamp" then one 1-based row per push-up.

        Raises:
            EmptyHistory: if nothing has been recorded
        """
        events = self._read()
        if not events:
            raise EmptyHistory()

        buf = io.StringIO()
        writer = csv.writer(buf, lineterminator="\n")
        writer.writerow(CSV_HEADER)
        for i, event in enumerate(events, start=1):
            writer.writerow([i, format_timestamp(event.timestamp)])
        return buf.getvalue()

    def write_csv(self, directory: Path) -> Path:
        """Write export_csv() to pushup_history_<timestamp>.csv inside directory."""
        text = self.export_csv()
        directory = Path(directory)
        stamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
        path = directory / f"pushup_history_{stamp}.csv"
        try:
            directory.mkdir(parents=True, exist_ok=True)
            with open(path, "w", newline="", encoding="utf-8") as f:
                f.write(text)
        except OSError as exc:
            raise PersistenceUnavailable(f"Cannot write {path}: {exc}") from exc
        logger.info("History exported to %s", path)
        return path
