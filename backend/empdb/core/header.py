# Header: magic(u32), version(u16), count(u16), filesize(u32), big-endian
from __future__ import annotations
from dataclasses import dataclass, replace
import logging

from empdb.core.schema import Schema, Field, Kind
from empdb.core.codec import RECORD_SIZE
from empdb.core.errors import (
    BadMagicError, ShortReadError, SizeMismatchError, UnsupportedVersionError,
)

logger = logging.getLogger(__name__)

HEADER_MAGIC = 0x4C4C4144  # "LLAD"
HEADER_VERSION = 1

HEADER_SCHEMA = Schema([
    Field("magic",    Kind.UINT, fmt="I"),
    Field("version",  Kind.UINT, fmt="H"),
    Field("count",    Kind.UINT, fmt="H"),
    Field("filesize", Kind.UINT, fmt="I"),
])
HEADER_SIZE = HEADER_SCHEMA.size  # 12

MAX_RECORDS = 0xFFFF


@dataclass
class DatabaseHeader:
    magic: int = HEADER_MAGIC
    version: int = HEADER_VERSION
    count: int = 0
    filesize: int = HEADER_SIZE

    def expected_filesize(self) -> int:
        return HEADER_SIZE + self.count * RECORD_SIZE

    def synced(self) -> "DatabaseHeader":
        """Copy with filesize recomputed from count."""
        return replace(self, filesize=self.expected_filesize())

    def to_dict(self):
        return {"magic": self.magic, "version": self.version,
                "count": self.count, "filesize": self.filesize}


def create_header() -> DatabaseHeader:
    return DatabaseHeader(magic=HEADER_MAGIC, version=HEADER_VERSION,
                          count=0, filesize=HEADER_SIZE)


def decode_header(data: bytes) -> DatabaseHeader:
    if len(data) < HEADER_SIZE:
        raise ShortReadError(f"Header needs {HEADER_SIZE} bytes, only {len(data)} available")
    row = HEADER_SCHEMA.unpack(data[:HEADER_SIZE])
    return DatabaseHeader(**row)


def validate_header(header: DatabaseHeader, actual_size: int) -> None:
    """Check magic, version and filesize in that order; raise on the first failure."""
    if header.magic != HEADER_MAGIC:
        raise BadMagicError(f"Improper header magic: 0x{header.magic:08X}")
    if header.version != HEADER_VERSION:
        raise UnsupportedVersionError(f"Improper header version: {header.version}")
    if header.filesize != actual_size:
        raise SizeMismatchError(
            f"Corrupted database: header filesize {header.filesize} != actual size {actual_size}"
        )
    logger.debug("Header ok: count=%d filesize=%d", header.count, header.filesize)


def encode_header(header: DatabaseHeader) -> bytes:
    return HEADER_SCHEMA.pack({
        "magic": header.magic,
        "version": header.version,
        "count": header.count,
        "filesize": header.filesize,
    })
