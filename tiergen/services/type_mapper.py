"""
SQL type mapping.
Maps source SQL type names to semantic types, and semantic types to their C#
spelling, data reader accessor, display text and text parser.
"""
from __future__ import annotations

import math
import re
import uuid
from datetime import datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, NamedTuple

from tiergen.core.exceptions import FormatError
from tiergen.schemas.schema import SemanticType

NULL_DISPLAY = "[NULL]"
BINARY_DISPLAY = "[Binary Data]"

# ── Source SQL type → semantic type ──────────────────────────────────────────

_SQL_TYPE_MAP: dict[str, SemanticType] = {
    # Integer types
    "int": SemanticType.INT32,
    "smallint": SemanticType.INT16,
    "tinyint": SemanticType.INT8,
    "bigint": SemanticType.INT64,
    # Boolean
    "bit": SemanticType.BOOL,
    # Date/time types
    "datetime": SemanticType.DATETIME,
    "datetime2": SemanticType.DATETIME,
    "smalldatetime": SemanticType.DATETIME,
    "date": SemanticType.DATETIME,
    "datetimeoffset": SemanticType.DATETIMEOFFSET,
    "time": SemanticType.TIMESPAN,
    # Exact numerics
    "decimal": SemanticType.DECIMAL,
    "money": SemanticType.DECIMAL,
    "smallmoney": SemanticType.DECIMAL,
    "numeric": SemanticType.DECIMAL,
    # Floating point
    "float": SemanticType.FLOAT64,
    "real": SemanticType.FLOAT32,
    # Identifier
    "uniqueidentifier": SemanticType.GUID,
    # Binary types
    "binary": SemanticType.BINARY,
    "varbinary": SemanticType.BINARY,
    "image": SemanticType.BINARY,
    "timestamp": SemanticType.BINARY,
    "rowversion": SemanticType.BINARY,
    # String types
    "char": SemanticType.STRING,
    "varchar": SemanticType.STRING,
    "nchar": SemanticType.STRING,
    "nvarchar": SemanticType.STRING,
    "text": SemanticType.STRING,
    "ntext": SemanticType.STRING,
    "xml": SemanticType.STRING,
    "sysname": SemanticType.STRING,
    # Generic spellings reported by SQLAlchemy reflection
    "integer": SemanticType.INT32,
    "boolean": SemanticType.BOOL,
    "double": SemanticType.FLOAT64,
    "uuid": SemanticType.GUID,
    "blob": SemanticType.BINARY,
}

# Every semantic label maps back to itself
_SQL_TYPE_MAP.update({semantic.value: semantic for semantic in SemanticType})


def map_source_type(sql_type_name: str | None) -> SemanticType:
    """Map a SQL type name to its semantic type. Unknown or empty input maps to string."""
    if not sql_type_name:
        return SemanticType.STRING
    return _SQL_TYPE_MAP.get(sql_type_name.strip().lower(), SemanticType.STRING)


# ── Semantic type → C# ────────────────────────────────────────────────────────

_CSHARP_TYPES: dict[SemanticType, str] = {
    SemanticType.INT8: "byte",
    SemanticType.INT16: "short",
    SemanticType.INT32: "int",
    SemanticType.INT64: "long",
    SemanticType.BOOL: "bool",
    SemanticType.FLOAT32: "float",
    SemanticType.FLOAT64: "double",
    SemanticType.DECIMAL: "decimal",
    SemanticType.DATETIME: "DateTime",
    SemanticType.DATETIMEOFFSET: "DateTimeOffset",
    SemanticType.TIMESPAN: "TimeSpan",
    SemanticType.GUID: "Guid",
    SemanticType.BINARY: "byte[]",
    SemanticType.STRING: "string",
}


class ReaderAccessor(NamedTuple):
    """How a value is pulled from a data reader row."""

    getter: str
    reference_cast: str | None = None


_READER_ACCESSORS: dict[SemanticType, ReaderAccessor] = {
    SemanticType.INT8: ReaderAccessor("GetByte"),
    SemanticType.INT16: ReaderAccessor("GetInt16"),
    SemanticType.INT32: ReaderAccessor("GetInt32"),
    SemanticType.INT64: ReaderAccessor("GetInt64"),
    SemanticType.BOOL: ReaderAccessor("GetBoolean"),
    SemanticType.FLOAT32: ReaderAccessor("GetFloat"),
    SemanticType.FLOAT64: ReaderAccessor("GetDouble"),
    SemanticType.DECIMAL: ReaderAccessor("GetDecimal"),
    SemanticType.DATETIME: ReaderAccessor("GetDateTime"),
    SemanticType.DATETIMEOFFSET: ReaderAccessor("GetDateTimeOffset"),
    SemanticType.TIMESPAN: ReaderAccessor("GetTimeSpan"),
    SemanticType.GUID: ReaderAccessor("GetGuid"),
    # Read as object and cast; a database NULL becomes null
    SemanticType.BINARY: ReaderAccessor("GetValue", "byte[]"),
    SemanticType.STRING: ReaderAccessor("GetValue", "string"),
}


def csharp_type(semantic: SemanticType, optional: bool = False) -> str:
    """C# spelling of a semantic type; value types get '?' when optional."""
    spelling = _CSHARP_TYPES[semantic]
    if optional and not semantic.is_reference:
        return f"{spelling}?"
    return spelling


def reader_accessor(semantic: SemanticType) -> ReaderAccessor:
    return _READER_ACCESSORS[semantic]


# ── Display rendering ─────────────────────────────────────────────────────────

def _format_timespan(value: timedelta) -> str:
    """Constant ("c") TimeSpan format: [-][d.]hh:mm:ss[.fffffff]."""
    total = value // timedelta(microseconds=1)
    sign = "-" if total < 0 else ""
    total = abs(total)
    seconds, micros = divmod(total, 1_000_000)
    minutes, seconds = divmod(seconds, 60)
    hours, minutes = divmod(minutes, 60)
    days, hours = divmod(hours, 24)
    text = f"{sign}{days}." if days else sign
    text += f"{hours:02d}:{minutes:02d}:{seconds:02d}"
    if micros:
        text += f".{micros * 10:07d}"
    return text


def render_value(semantic: SemanticType, value: Any) -> str:
    """Render a value read from a row the way the console front end displays it."""
    if value is None:
        return NULL_DISPLAY
    if semantic is SemanticType.BINARY or isinstance(value, (bytes, bytearray)):
        return BINARY_DISPLAY
    if semantic is SemanticType.BOOL:
        return "True" if value else "False"
    if semantic in (SemanticType.DATETIME, SemanticType.DATETIMEOFFSET):
        return value.isoformat(sep=" ")
    if semantic is SemanticType.TIMESPAN:
        return _format_timespan(value)
    if semantic in (SemanticType.FLOAT32, SemanticType.FLOAT64):
        return repr(float(value))
    return str(value)


# ── Text parsing ──────────────────────────────────────────────────────────────

_INTEGER_RANGES: dict[SemanticType, tuple[int, int]] = {
    SemanticType.INT8: (0, 2**8 - 1),
    SemanticType.INT16: (-(2**15), 2**15 - 1),
    SemanticType.INT32: (-(2**31), 2**31 - 1),
    SemanticType.INT64: (-(2**63), 2**63 - 1),
}

_FLOAT32_MAX = 3.4028234663852886e38

_INTEGER_RE = re.compile(r"^[+-]?\d+$")
_TIMESPAN_RE = re.compile(
    r"^(?P<sign>-)?(?:(?P<days>\d+)\.)?(?P<hours>\d{1,2}):(?P<minutes>\d{2})"
    r"(?::(?P<seconds>\d{2})(?:\.(?P<fraction>\d{1,7}))?)?$"
)


def _parse_integer(semantic: SemanticType, text: str) -> int:
    if not _INTEGER_RE.match(text):
        raise FormatError(semantic.value, text)
    value = int(text)
    low, high = _INTEGER_RANGES[semantic]
    if not low <= value <= high:
        raise FormatError(semantic.value, text, f"must be between {low} and {high}")
    return value


def _parse_float(semantic: SemanticType, text: str) -> float:
    try:
        value = float(text)
    except ValueError:
        raise FormatError(semantic.value, text) from None
    if semantic is SemanticType.FLOAT32 and math.isfinite(value) and abs(value) > _FLOAT32_MAX:
        raise FormatError(semantic.value, text, "out of range")
    return value


def _parse_decimal(text: str) -> Decimal:
    try:
        value = Decimal(text)
    except InvalidOperation:
        raise FormatError(SemanticType.DECIMAL.value, text) from None
    if not value.is_finite():
        raise FormatError(SemanticType.DECIMAL.value, text, "must be a finite number")
    return value


def _parse_datetime(semantic: SemanticType, text: str) -> datetime:
    try:
        value = datetime.fromisoformat(text)
    except ValueError:
        raise FormatError(semantic.value, text) from None
    if semantic is SemanticType.DATETIME and value.tzinfo is not None:
        raise FormatError(semantic.value, text, "unexpected UTC offset")
    if semantic is SemanticType.DATETIMEOFFSET and value.tzinfo is None:
        raise FormatError(semantic.value, text, "missing UTC offset")
    return value


def _parse_timespan(text: str) -> timedelta:
    match = _TIMESPAN_RE.match(text)
    if match is None:
        raise FormatError(SemanticType.TIMESPAN.value, text)
    hours = int(match["hours"])
    minutes = int(match["minutes"])
    seconds = int(match["seconds"] or 0)
    if hours > 23 or minutes > 59 or seconds > 59:
        raise FormatError(SemanticType.TIMESPAN.value, text, "component out of range")
    ticks = int((match["fraction"] or "0").ljust(7, "0"))
    value = timedelta(
        days=int(match["days"] or 0),
        hours=hours,
        minutes=minutes,
        seconds=seconds,
        microseconds=ticks // 10,
    )
    return -value if match["sign"] else value


def parse_from_text(semantic: SemanticType, text: str) -> Any:
    """
    Convert user-entered text into a value of the given semantic type.
    Raises FormatError when the text does not match the type.
    """
    if semantic is SemanticType.STRING:
        return text
    if semantic is SemanticType.BINARY:
        raise FormatError(semantic.value, text, "binary values are display-only")

    stripped = text.strip()
    if semantic in _INTEGER_RANGES:
        return _parse_integer(semantic, stripped)
    if semantic is SemanticType.BOOL:
        lowered = stripped.lower()
        if lowered not in ("true", "false"):
            raise FormatError(semantic.value, text)
        return lowered == "true"
    if semantic in (SemanticType.FLOAT32, SemanticType.FLOAT64):
        return _parse_float(semantic, stripped)
    if semantic is SemanticType.DECIMAL:
        return _parse_decimal(stripped)
    if semantic in (SemanticType.DATETIME, SemanticType.DATETIMEOFFSET):
        return _parse_datetime(semantic, stripped)
    if semantic is SemanticType.TIMESPAN:
        return _parse_timespan(stripped)
    if semantic is SemanticType.GUID:
        try:
            return uuid.UUID(stripped)
        except ValueError:
            raise FormatError(semantic.value, text) from None
    raise FormatError(semantic.value, text, "unsupported type")
