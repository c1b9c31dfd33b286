from __future__ import annotations
from typing import Iterator, List, Optional
import logging

from empdb.core.codec import EmployeeRecord
from empdb.core.header import DatabaseHeader, MAX_RECORDS, create_header
from empdb.core.errors import MalformedInputError, StoreFullError

logger = logging.getLogger(__name__)

_FIELDS = ("name", "address", "hours")
_MAX_HOURS = 0xFFFFFFFF


def parse_employee(text: str) -> EmployeeRecord:
    """Parse "name,address,hours" into a record (name/address clamped to capacity)."""
    if text is None:
        raise MalformedInputError("Employee text is required")
    parts = text.split(",")
    if len(parts) != len(_FIELDS):
        raise MalformedInputError(
            f"Expected {len(_FIELDS)} comma-separated fields (name,address,hours), got {len(parts)}"
        )
    name, address, raw_hours = parts
    raw_hours = raw_hours.strip()
    if not raw_hours.isascii() or not raw_hours.isdigit():
        raise MalformedInputError(f"Hours must be a non-negative integer, got {raw_hours!r}")
    hours = int(raw_hours)
    if hours > _MAX_HOURS:
        raise MalformedInputError(f"Hours {hours} does not fit in 32 bits")
    return EmployeeRecord.from_text(name, address, hours)


class EmployeeStore:
    """Ordered in-memory employees plus the header that describes them.

    ``len(records) == header.count`` holds before and after every public call.
    """

    def __init__(self, header: Optional[DatabaseHeader] = None,
                 records: Optional[List[EmployeeRecord]] = None):
        self._header = header if header is not None else create_header()
        self._records: List[EmployeeRecord] = list(records or [])
        if len(self._records) != self._header.count:
            raise ValueError(
                f"Header count {self._header.count} != {len(self._records)} loaded records"
            )

    @property
    def header(self) -> DatabaseHeader:
        return self._header

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[EmployeeRecord]:
        return iter(list(self._records))

    def add_from_text(self, text: str) -> EmployeeRecord:
        record = parse_employee(text)
        if self._header.count >= MAX_RECORDS:
            raise StoreFullError(f"Database already holds {MAX_RECORDS} employees")
        self._records.append(record)
        self._header.count += 1
        logger.debug("Added employee %r (count=%d)", record.name_text, self._header.count)
        return record

    def list_all(self) -> List[EmployeeRecord]:
        return list(self._records)

    def sync_header(self) -> DatabaseHeader:
        self._header.filesize = self._header.expected_filesize()
        return self._header
