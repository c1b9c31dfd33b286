from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Any, List, Protocol

from empdb.core.schema import Schema, Field, Kind, clamp
from empdb.core.errors import ShortReadError

NAME_LEN = 32
ADDRESS_LEN = 64

# name(32s) address(64s) hours(u32), big-endian
EMPLOYEE_SCHEMA = Schema([
    Field("name",    Kind.CHAR, size=NAME_LEN),
    Field("address", Kind.CHAR, size=ADDRESS_LEN),
    Field("hours",   Kind.UINT, fmt="I"),
])
RECORD_SIZE = EMPLOYEE_SCHEMA.size  # 100

# ----------------------------- Codec Layer -----------------------------------

class RecordCodec(Protocol):
    """Protocol for (de)serializing fixed-size records to bytes."""
    def record_size(self) -> int: ...
    def pack(self, record: "EmployeeRecord") -> bytes: ...
    def unpack(self, b: bytes) -> "EmployeeRecord": ...

def _sfix(text: str, n: int) -> bytes:
    return clamp(str(text).encode('utf-8'), n)

def _sunfix(b: bytes) -> str:
    return b.decode('utf-8', errors='replace')


@dataclass
class EmployeeRecord:
    name: bytes = b""
    address: bytes = b""
    hours: int = 0

    @classmethod
    def from_text(cls, name: str, address: str, hours: int) -> "EmployeeRecord":
        """Build a record from text, clamping name/address to their fixed capacity."""
        return cls(name=_sfix(name, NAME_LEN), address=_sfix(address, ADDRESS_LEN), hours=hours)

    @property
    def name_text(self) -> str:
        return _sunfix(self.name)

    @property
    def address_text(self) -> str:
        return _sunfix(self.address)

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name_text, "address": self.address_text, "hours": self.hours}


@dataclass
class EmployeeCodec(RecordCodec):
    """Employee codec (100 bytes)."""
    schema: Schema = EMPLOYEE_SCHEMA

    def record_size(self) -> int:
        return self.schema.size

    def pack(self, record: EmployeeRecord) -> bytes:
        return self.schema.pack({
            "name": record.name,
            "address": record.address,
            "hours": record.hours,
        })

    def unpack(self, b: bytes) -> EmployeeRecord:
        row = self.schema.unpack(b)
        return EmployeeRecord(name=row["name"], address=row["address"], hours=row["hours"])


_codec = EmployeeCodec()

def encode_record(record: EmployeeRecord) -> bytes:
    return _codec.pack(record)

def decode_record(data: bytes) -> EmployeeRecord:
    return _codec.unpack(data)

def decode_records(data: bytes, count: int) -> List[EmployeeRecord]:
    if count == 0:
        return []
    need = count * RECORD_SIZE
    if len(data) < need:
        raise ShortReadError(f"Expected {count} records ({need} bytes), got {len(data)} bytes")
    return [decode_record(data[off:off + RECORD_SIZE]) for off in range(0, need, RECORD_SIZE)]
