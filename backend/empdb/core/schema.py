# backend/empdb/core/schema.py
import struct
from dataclasses import dataclass
from enum import Enum
from typing import List, Dict, Any

from empdb.core.errors import CorruptRecordError, ShortReadError

class Kind(Enum):
    UINT = 'UINT'
    CHAR = 'CHAR'

@dataclass
class Field:
    name: str
    kind: Kind
    size: int = 0      # only for CHAR, includes the NUL terminator
    fmt: str = ''      # required for UINT ("B", "H", "I", "Q")

class Schema:
    """Fixed-width big-endian layout built from a list of fields."""

    def __init__(self, fields: List[Field]):
        self.fields = fields

        for f in self.fields:
            if f.kind == Kind.UINT and not f.fmt:
                raise ValueError(f"Field '{f.name}' ({f.kind}) requires a struct fmt ('H', 'I', ...).")
            if f.kind == Kind.UINT and f.fmt not in 'BHIQ':
                raise ValueError(f"Field '{f.name}' fmt '{f.fmt}' is not an unsigned integer format.")
            if f.kind == Kind.CHAR and f.size <= 0:
                raise ValueError(f"Field '{f.name}' (CHAR) requires size > 0.")

        parts = []
        for f in fields:
            if f.kind == Kind.UINT:
                parts.append(f.fmt)
            elif f.kind == Kind.CHAR:
                parts.append(f'{f.size}s')
        self.fmt = '>' + ''.join(parts)  # network byte order
        self.struct = struct.Struct(self.fmt)
        self.size = self.struct.size

    def pack(self, row: Dict[str, Any]) -> bytes:
        vals = []
        for f in self.fields:
            v = row.get(f.name)
            if f.kind == Kind.UINT:
                vals.append(int(v or 0))
            elif f.kind == Kind.CHAR:
                vals.append(clamp(v or b'', f.size).ljust(f.size, b'\x00'))
        try:
            return self.struct.pack(*vals)
        except struct.error as e:
            raise ValueError(f"Value out of range for layout {self.fmt}: {e}") from e

    def unpack(self, data: bytes) -> Dict[str, Any]:
        if len(data) < self.size:
            raise ShortReadError(f"Expected {self.size} bytes, got {len(data)}")
        tup = self.struct.unpack(data[:self.size])
        row: Dict[str, Any] = {}
        for f, v in zip(self.fields, tup):
            if f.kind == Kind.CHAR:
                if b"\x00" not in v:
                    raise CorruptRecordError(f"Field '{f.name}' has no NUL terminator within {f.size} bytes")
                row[f.name] = v.split(b"\x00", 1)[0]
            else:
                row[f.name] = v
        return row


def clamp(value: bytes, size: int) -> bytes:
    """Cut a C-string field so it always leaves room for its terminator."""
    return bytes(value).split(b'\x00', 1)[0][:size - 1]
