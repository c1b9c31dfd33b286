# Database file: header(12) followed by count fixed-size employee records(100 each)
from __future__ import annotations
from enum import Enum
from pathlib import Path
from typing import Optional, Union
import io
import logging
import os
import sys
import time

from empdb.core.codec import RECORD_SIZE, decode_records, encode_record
from empdb.core.header import (
    HEADER_SIZE, DatabaseHeader, create_header, decode_header, encode_header, validate_header,
)
from empdb.core.errors import (
    AlreadyExistsError, DatabaseIOError, DatabaseLockedError, DatabaseNotFoundError,
)
from empdb.io_counters import count_read, count_write
from empdb.store import EmployeeStore

logger = logging.getLogger(__name__)

# ── cross-platform advisory whole-file lock ───────────
if sys.platform.startswith("win"):
    import msvcrt
    # msvcrt has no shared mode; readers lock exclusively too
    def _lock(f, shared=False):
        f.seek(0)
        msvcrt.locking(f.fileno(), msvcrt.LK_NBLCK, 1)
    def _unlock(f):
        f.seek(0)
        msvcrt.locking(f.fileno(), msvcrt.LK_UNLCK, 1)
else:
    import fcntl
    def _lock(f, shared=False):
        fcntl.flock(f.fileno(), (fcntl.LOCK_SH if shared else fcntl.LOCK_EX) | fcntl.LOCK_NB)
    def _unlock(f):
        fcntl.flock(f.fileno(), fcntl.LOCK_UN)

# An open file cannot be renamed over on Windows
_REPLACE_WHILE_OPEN = not sys.platform.startswith("win")
_LOCK_POLL = 0.05
# ───────────────────────────────────────────────────


class State(Enum):
    CLOSED = "closed"
    OPEN = "open"


class DatabaseFile:
    """Owns the open database file, its exclusive lock and the in-memory store.

    Build one with ``create_new`` or ``open_existing``; the lock is held until
    ``close`` (or the end of a ``with`` block). ``open_existing(read_only=True)``
    takes a shared lock, so readers do not exclude each other.
    """

    def __init__(self, path: Union[str, os.PathLike], f: io.BufferedRandom, store: EmployeeStore,
                 read_only: bool = False):
        self.path = Path(path)
        self.read_only = read_only
        self.f: Optional[io.BufferedRandom] = f
        self.store = store
        self.state = State.OPEN
        self.reads = 0
        self.writes = 0

    # ---- Construction ----
    @classmethod
    def create_new(cls, path: Union[str, os.PathLike]) -> "DatabaseFile":
        path = Path(path)
        try:
            f = open(path, "x+b")
        except FileExistsError as e:
            raise AlreadyExistsError(f"Database file already exists: {path}") from e
        except OSError as e:
            raise DatabaseIOError(f"Unable to create database file {path}: {e}") from e

        try:
            _acquire(f, path)
            db = cls(path, f, EmployeeStore(create_header()))
            db.persist()
        except BaseException:
            f.close()
            _discard(path)
            raise
        logger.info("Created database %s", path)
        return db

    @classmethod
    def open_existing(cls, path: Union[str, os.PathLike], read_only: bool = False,
                      lock_timeout: float = 0.0) -> "DatabaseFile":
        path = Path(path)
        try:
            f = open(path, "rb" if read_only else "r+b")
        except FileNotFoundError as e:
            raise DatabaseNotFoundError(f"Database file not found: {path}") from e
        except OSError as e:
            raise DatabaseIOError(f"Unable to open database file {path}: {e}") from e

        try:
            _acquire(f, path, shared=read_only, timeout=lock_timeout)
            store, reads = _load(f)
        except BaseException:
            f.close()
            raise
        db = cls(path, f, store, read_only=read_only)
        db.reads += reads
        logger.info("Opened database %s (%d employees)", path, store.header.count)
        return db

    @classmethod
    def open(cls, path: Union[str, os.PathLike], create_new: bool = False) -> "DatabaseFile":
        if create_new:
            return cls.create_new(path)
        return cls.open_existing(path)

    # ---- Accessors ----
    @property
    def header(self) -> DatabaseHeader:
        self._check_open()
        return self.store.header

    @property
    def is_open(self) -> bool:
        return self.state is State.OPEN

    def add_employee(self, text: str):
        self._check_writable()
        return self.store.add_from_text(text)

    # ---- Persist ----
    def persist(self, atomic: bool = False) -> None:
        """Rewrite header and every record from offset 0."""
        self._check_writable()
        image = self._image()
        if atomic:
            self._persist_atomic(image)
            return
        try:
            self.f.seek(0)
            self.f.write(image)
            self.f.flush()
            os.fsync(self.f.fileno())
        except OSError as e:
            raise DatabaseIOError(f"Write to {self.path} failed: {e}") from e
        self._count_writes(len(image))
        logger.debug("Persisted %s: %d employees, %d bytes", self.path, self.header.count, len(image))

    def _persist_atomic(self, image: bytes) -> None:
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            nf = open(tmp, "w+b")
        except OSError as e:
            raise DatabaseIOError(f"Unable to create {tmp}: {e}") from e
        try:
            _acquire(nf, tmp)
            nf.write(image)
            nf.flush()
            os.fsync(nf.fileno())
            if _REPLACE_WHILE_OPEN:
                os.replace(tmp, self.path)
        except BaseException as e:
            _release(nf)
            _discard(tmp)
            if isinstance(e, OSError):
                raise DatabaseIOError(f"Atomic write to {self.path} failed: {e}") from e
            raise
        if _REPLACE_WHILE_OPEN:
            old, self.f = self.f, nf
            _release(old)
        else:
            self._replace_closed(tmp, nf)
        self._count_writes(len(image))
        logger.debug("Atomically persisted %s: %d employees", self.path, self.header.count)

    def _replace_closed(self, tmp: Path, nf) -> None:
        """Rename with both handles closed, then reopen and relock the target.

        The lock is dropped between the close and the reopen.
        """
        _release(nf)
        _release(self.f)
        self.f = None
        try:
            os.replace(tmp, self.path)
            self.f = open(self.path, "r+b")
            _acquire(self.f, self.path)
        except BaseException as e:
            if self.f is not None:
                self.f.close()
                self.f = None
            self.state = State.CLOSED
            _discard(tmp)
            if isinstance(e, OSError):
                raise DatabaseIOError(f"Atomic write to {self.path} failed: {e}") from e
            raise

    def _image(self) -> bytes:
        header = self.store.sync_header()
        parts = [encode_header(header)]
        parts += [encode_record(r) for r in self.store.list_all()]
        return b"".join(parts)

    def _count_writes(self, nbytes: int) -> None:
        self.writes += 1
        count_write(nbytes)

    # ---- Close ----
    def close(self) -> None:
        if self.state is State.CLOSED:
            return
        _release(self.f)
        self.f = None
        self.state = State.CLOSED
        logger.debug("Closed database %s", self.path)

    def _check_open(self) -> None:
        if self.state is not State.OPEN:
            raise DatabaseIOError(f"Database {self.path} is closed")

    def _check_writable(self) -> None:
        self._check_open()
        if self.read_only:
            raise DatabaseIOError(f"Database {self.path} was opened read-only")

    def __enter__(self) -> "DatabaseFile":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def _acquire(f, path: Path, shared: bool = False, timeout: float = 0.0) -> None:
    """Take the lock, retrying until timeout seconds have passed."""
    deadline = time.monotonic() + timeout
    while True:
        try:
            _lock(f, shared)
            return
        except OSError as e:
            if time.monotonic() >= deadline:
                raise DatabaseLockedError(f"Database {path} is locked by another process") from e
        time.sleep(_LOCK_POLL)


def _release(f) -> None:
    try:
        _unlock(f)
    except OSError:
        logger.warning("Unable to release lock on %s", getattr(f, "name", f))
    finally:
        f.close()


def _discard(path: Path) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass


def _load(f) -> tuple:
    """Read, validate and decode header + records; returns (store, reads)."""
    try:
        f.seek(0)
        hdr = f.read(HEADER_SIZE)
        count_read(len(hdr))
        header = decode_header(hdr)
        validate_header(header, os.fstat(f.fileno()).st_size)
        body = f.read(header.count * RECORD_SIZE) if header.count else b""
    except OSError as e:
        raise DatabaseIOError(f"Read from {getattr(f, 'name', f)} failed: {e}") from e
    reads = 1
    if header.count:
        count_read(len(body))
        reads += 1
    records = decode_records(body, header.count)
    return EmployeeStore(header, records), reads
