"""
Coercion of raw property values to their declared kinds.

Raw values usually arrive as serialized text. Each helper either returns
a value of the declared kind or raises ValueCoercionMismatch, which the
element compiler turns into a comment instruction.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

from replaygen.core.errors import ValueCoercionMismatch
from replaygen.core.ir import EnumSpec, PrimitiveKind

_INTEGER_RANGES: dict[PrimitiveKind, tuple[int, int]] = {
    PrimitiveKind.BYTE: (0, 2**8 - 1),
    PrimitiveKind.SBYTE: (-(2**7), 2**7 - 1),
    PrimitiveKind.INT16: (-(2**15), 2**15 - 1),
    PrimitiveKind.UINT16: (0, 2**16 - 1),
    PrimitiveKind.INT32: (-(2**31), 2**31 - 1),
    PrimitiveKind.UINT32: (0, 2**32 - 1),
    PrimitiveKind.INT64: (-(2**63), 2**63 - 1),
    PrimitiveKind.UINT64: (0, 2**64 - 1),
}

_TRUE_TOKENS = {"true", "1", "on"}
_FALSE_TOKENS = {"false", "0", "off"}

# Day zero of the tick-based date representation.
_TICKS_EPOCH = datetime(1, 1, 1)


def coerce_simple(kind: PrimitiveKind, raw: object, property_name: str) -> object:
    """
    Coerce a raw simple-property value to its declared primitive kind.

    Raises:
        ValueCoercionMismatch: if the value does not fit the kind
    """
    try:
        if kind == PrimitiveKind.STRING:
            return str(raw)
        if kind == PrimitiveKind.BOOLEAN:
            return _coerce_bool(raw)
        if kind in _INTEGER_RANGES:
            value = _coerce_int(raw)
            low, high = _INTEGER_RANGES[kind]
            if not low <= value <= high:
                raise ValueError(f"{value} out of range for {kind.value}")
            return value
        if kind in (PrimitiveKind.SINGLE, PrimitiveKind.DOUBLE):
            if isinstance(raw, bool):
                raise TypeError("boolean is not a floating point value")
            return float(raw)  # type: ignore[arg-type]
        if kind == PrimitiveKind.DECIMAL:
            if isinstance(raw, bool):
                raise TypeError("boolean is not a decimal value")
            value = Decimal(str(raw).strip())
            if not value.is_finite():
                raise ValueError("decimal value must be finite")
            return value
        if kind == PrimitiveKind.DATETIME:
            if isinstance(raw, datetime):
                return raw
            return datetime.fromisoformat(str(raw).strip())
    except (ValueError, TypeError, ArithmeticError) as exc:
        raise ValueCoercionMismatch(property_name, raw) from exc

    raise ValueCoercionMismatch(property_name, raw)


def coerce_enum(enum: EnumSpec, raw: object, property_name: str) -> str:
    """
    Map a raw enum code to the name of its constant.

    Raises:
        ValueCoercionMismatch: if no constant carries the raw code
    """
    constant = enum.constant_for(raw)
    if constant is None:
        raise ValueCoercionMismatch(
            property_name,
            raw,
            f"{enum.type.name} enum does not contain '{raw}' field",
        )
    return constant


def datetime_ticks(value: datetime) -> int:
    """100-nanosecond intervals between 0001-01-01 and ``value``.

    Aware values are converted to UTC first, so distinct instants never share ticks.
    """
    if value.utcoffset() is not None:
        value = value.astimezone(timezone.utc)
    wall = value.replace(tzinfo=None)
    return (wall - _TICKS_EPOCH) // timedelta(microseconds=1) * 10


def datetime_kind(value: datetime) -> str:
    """``Utc`` for aware values (their ticks are UTC), ``Unspecified`` for naive ones."""
    if value.utcoffset() is None:
        return "Unspecified"
    return "Utc"


def _coerce_bool(raw: object) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, int) and raw in (0, 1):
        return bool(raw)
    if isinstance(raw, str):
        token = raw.strip().lower()
        if token in _TRUE_TOKENS:
            return True
        if token in _FALSE_TOKENS:
            return False
    raise ValueError(f"{raw!r} is not a boolean")


def _coerce_int(raw: object) -> int:
    if isinstance(raw, bool):
        raise TypeError("boolean is not an integer")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        if not raw.is_integer():
            raise ValueError(f"{raw} is not an integer")
        return int(raw)
    return int(str(raw).strip(), 10)
