# backend/empdb/src_tests/test_header.py
import struct

import pytest

from empdb.core.errors import (
    BadMagicError, HeaderValidationError, ShortReadError, SizeMismatchError, UnsupportedVersionError,
)
from empdb.core.header import (
    HEADER_MAGIC, HEADER_SIZE, DatabaseHeader, create_header, decode_header, encode_header,
    validate_header,
)


def test_header_layout_is_twelve_bytes():
    assert HEADER_SIZE == 12


def test_create_header_defaults():
    h = create_header()
    assert (h.magic, h.version, h.count, h.filesize) == (HEADER_MAGIC, 1, 0, HEADER_SIZE)


def test_encode_is_big_endian_and_pure():
    h = DatabaseHeader(magic=HEADER_MAGIC, version=1, count=3, filesize=312)
    data = encode_header(h)
    assert data == struct.pack(">IHHI", HEADER_MAGIC, 1, 3, 312)
    assert data[:4] == b"LLAD"
    # encoding twice gives the same bytes and leaves the header alone
    assert encode_header(h) == data
    assert h == DatabaseHeader(magic=HEADER_MAGIC, version=1, count=3, filesize=312)


def test_decode_inverts_encode():
    h = DatabaseHeader(magic=HEADER_MAGIC, version=1, count=65535, filesize=0xFFFFFFFF)
    assert decode_header(encode_header(h)) == h


def test_decode_short_read():
    with pytest.raises(ShortReadError):
        decode_header(b"\x00" * (HEADER_SIZE - 1))


def test_validate_accepts_consistent_header():
    h = create_header()
    validate_header(h, HEADER_SIZE)


@pytest.mark.parametrize("header, size, error, check", [
    (DatabaseHeader(magic=0xDEADBEEF), HEADER_SIZE, BadMagicError, "magic"),
    (DatabaseHeader(version=2), HEADER_SIZE, UnsupportedVersionError, "version"),
    (DatabaseHeader(filesize=HEADER_SIZE), HEADER_SIZE + 1, SizeMismatchError, "filesize"),
])
def test_validate_reports_each_failed_check(header, size, error, check):
    with pytest.raises(error) as info:
        validate_header(header, size)
    assert isinstance(info.value, HeaderValidationError)
    assert info.value.check == check


def test_validate_checks_magic_first():
    h = DatabaseHeader(magic=0, version=9, filesize=1)
    with pytest.raises(BadMagicError):
        validate_header(h, 99)


def test_synced_recomputes_filesize_without_mutating():
    h = DatabaseHeader(count=2, filesize=HEADER_SIZE)
    s = h.synced()
    assert s.filesize == HEADER_SIZE + 2 * 100
    assert h.filesize == HEADER_SIZE
