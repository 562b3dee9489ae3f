# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""ValueConverter — coerces scalar values to a destination type.

Rules, in order:

1. ``None`` converts only to a nullable destination.
2. Values already of the destination type pass through unchanged; bools
   and enum members become plain numbers for ``int`` or ``float``.
3. Strings parse into ``UUID``, ``datetime``, ``date``, ``time`` and
   ``timedelta``; a parse error fails the conversion.
4. Numbers (and numeric strings) convert between ``int``, ``float``,
   ``complex``, ``bool`` and ``Decimal``.
5. Enum destinations match member names case-insensitively, or member
   values for numeric sources.

Errors in steps 3-5 are reported as a failed conversion, never raised.
"""

from __future__ import annotations

import datetime
import enum
import functools
import math
import numbers
import re
import types
import uuid
from collections.abc import Callable, Mapping
from decimal import Decimal
from typing import Any, Literal, TypeVar, Union, get_args, get_origin

from graphmap.mapping.introspection import type_origin, unwrap_optional

_SIMPLE_TYPES: tuple[type, ...] = (
    bool,
    int,
    float,
    complex,
    Decimal,
    str,
    bytes,
    datetime.datetime,
    datetime.date,
    datetime.time,
    datetime.timedelta,
    uuid.UUID,
    enum.Enum,
)

# Checked in order: bool before int since bool subclasses int.
_NUMERIC_TARGETS: tuple[type, ...] = (bool, int, float, complex, Decimal)

_DOTNET_TIMESPAN_RE = re.compile(
    r"^(?P<sign>-)?(?:(?P<days>\d+)\.)?(?P<hours>\d{1,2}):(?P<minutes>\d{2})"
    r"(?::(?P<seconds>\d{2})(?:\.(?P<fraction>\d{1,7}))?)?$"
)
_PY_TIMEDELTA_RE = re.compile(
    r"^(?P<days>-?\d+) days?, (?P<hours>\d{1,2}):(?P<minutes>\d{2}):(?P<seconds>\d{2})"
    r"(?:\.(?P<fraction>\d{1,6}))?$"
)
_DAYS_RE = re.compile(r"^-?\d+$")

_TRUE_STRINGS = frozenset({"true"})
_FALSE_STRINGS = frozenset({"false"})


def _is_any(tp: Any) -> bool:
    return tp is Any or tp is object or isinstance(tp, TypeVar)


def _passes_through(value: Any, cls: type) -> bool:
    """Instances of *cls* are kept as-is, except bools and enums bound for a plain number."""
    if not isinstance(value, cls):
        return False
    return not (cls in (int, float) and isinstance(value, (bool, enum.Enum)))


@functools.lru_cache(maxsize=1024)
def _is_simple_cached(tp: Any) -> bool:
    target, _ = unwrap_optional(tp)
    if _is_any(target) or target is type(None):
        return True
    origin = get_origin(target)
    if origin in (Union, types.UnionType, Literal):
        return True
    origin = type_origin(target)
    if not isinstance(origin, type):
        return False
    return issubclass(origin, _SIMPLE_TYPES) or issubclass(origin, Mapping)


def is_simple_type(tp: Any) -> bool:
    """True for scalar-like destination types handled by :class:`ValueConverter`.

    Mappings count as simple: they are assigned, never iterated.
    """
    try:
        return _is_simple_cached(tp)
    except TypeError:
        # unhashable annotation
        return _is_simple_cached.__wrapped__(tp)


def is_simple_value(value: Any) -> bool:
    return isinstance(value, _SIMPLE_TYPES) or isinstance(value, Mapping)


def parse_timedelta(text: str) -> datetime.timedelta:
    """Parse ``[-][d.]hh:mm[:ss[.fffffff]]``, ``str(timedelta)`` output or whole days."""
    text = text.strip()
    if _DAYS_RE.match(text):
        return datetime.timedelta(days=int(text))

    match = _PY_TIMEDELTA_RE.match(text)
    if match:
        fraction = match["fraction"] or ""
        hours, minutes, seconds = int(match["hours"]), int(match["minutes"]), int(match["seconds"])
        if hours > 23 or minutes > 59 or seconds > 59:
            raise ValueError(f"Invalid timedelta: {text!r}")
        return datetime.timedelta(
            days=int(match["days"]),
            hours=hours,
            minutes=minutes,
            seconds=seconds,
            microseconds=int(fraction.ljust(6, "0")) if fraction else 0,
        )

    match = _DOTNET_TIMESPAN_RE.match(text)
    if match is None:
        raise ValueError(f"Invalid timedelta: {text!r}")
    hours, minutes = int(match["hours"]), int(match["minutes"])
    seconds = int(match["seconds"] or 0)
    if hours > 23 or minutes > 59 or seconds > 59:
        raise ValueError(f"Invalid timedelta: {text!r}")
    # seven fractional digits are 100ns ticks
    fraction = match["fraction"] or ""
    result = datetime.timedelta(
        days=int(match["days"] or 0),
        hours=hours,
        minutes=minutes,
        seconds=seconds,
        microseconds=int(fraction.ljust(7, "0")) // 10 if fraction else 0,
    )
    return -result if match["sign"] else result


_STRING_PARSERS: dict[type, Callable[[str], Any]] = {
    uuid.UUID: uuid.UUID,
    datetime.datetime: datetime.datetime.fromisoformat,
    datetime.date: datetime.date.fromisoformat,
    datetime.time: datetime.time.fromisoformat,
    datetime.timedelta: parse_timedelta,
}


class ValueConverter:
    """Converts single values; ``convert`` returns ``(ok, value)``."""

    def convert(self, value: Any, dest_type: Any) -> tuple[bool, Any]:
        target, nullable = unwrap_optional(dest_type)

        if value is None:
            return nullable or _is_any(target) or target is type(None), None
        if _is_any(target):
            return True, value

        origin = get_origin(target)
        if origin is Literal:
            return (True, value) if value in get_args(target) else (False, None)
        if origin in (Union, types.UnionType):
            return self._convert_union(value, get_args(target))

        cls = type_origin(target)
        if not isinstance(cls, type):
            return False, None
        if _passes_through(value, cls):
            return True, value

        try:
            return self._coerce(value, cls)
        except Exception:
            return False, None

    def _convert_union(self, value: Any, members: tuple[Any, ...]) -> tuple[bool, Any]:
        for member in members:
            cls = type_origin(member)
            if _is_any(member) or (isinstance(cls, type) and _passes_through(value, cls)):
                return True, value
        for member in members:
            ok, converted = self.convert(value, member)
            if ok:
                return True, converted
        return False, None

    def _coerce(self, value: Any, cls: type) -> tuple[bool, Any]:
        if isinstance(value, str):
            for parsed_type, parser in _STRING_PARSERS.items():
                if issubclass(cls, parsed_type):
                    return True, parser(value)

        if issubclass(cls, enum.Enum):
            return True, self._to_enum(value, cls)

        for numeric in _NUMERIC_TARGETS:
            if issubclass(cls, numeric):
                converted = self._to_number(value, numeric)
                return True, converted if cls is numeric else cls(converted)

        return False, None

    @staticmethod
    def _to_enum(value: Any, cls: type[enum.Enum]) -> enum.Enum:
        if isinstance(value, enum.Enum):
            value = value.name
        if isinstance(value, str):
            name = value.strip()
            if name in cls.__members__:
                return cls.__members__[name]
            folded = name.casefold()
            for member_name, member in cls.__members__.items():
                if member_name.casefold() == folded:
                    return member
            if _DAYS_RE.match(name):
                return cls(int(name))
            raise ValueError(f"{value!r} is not a member of {cls.__name__}")
        if isinstance(value, bool) or not isinstance(value, numbers.Number):
            raise TypeError(f"Cannot convert {type(value).__name__} to {cls.__name__}")
        return cls(value)

    @staticmethod
    def _to_number(value: Any, numeric: type) -> Any:
        if isinstance(value, enum.Enum):
            value = value.value
        if isinstance(value, str):
            text = value.strip()
            if numeric is bool:
                folded = text.casefold()
                if folded in _TRUE_STRINGS:
                    return True
                if folded in _FALSE_STRINGS:
                    return False
                raise ValueError(f"{value!r} is not a boolean")
            return int(text) if numeric is int else numeric(text)
        if not isinstance(value, numbers.Number):
            raise TypeError(f"{type(value).__name__} is not numeric")

        if numeric is bool:
            return bool(value)
        if numeric is int:
            if isinstance(value, numbers.Integral):
                return int(value)
            if isinstance(value, complex) or not math.isfinite(value):
                raise ValueError(f"Cannot convert {value!r} to int")
            # round half to even, matching invariant numeric conversion
            return int(round(value))
        if numeric is Decimal and isinstance(value, float):
            return Decimal(repr(value))
        return numeric(value)
