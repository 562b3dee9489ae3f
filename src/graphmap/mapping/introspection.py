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
"""Runtime discovery of the readable and writable fields of a class.

Supports pydantic v2 models, dataclasses, annotated plain classes,
``__slots__`` and properties. Only attributes count as fields: methods and
indexers are never accessors.
"""

from __future__ import annotations

import dataclasses
import functools
import inspect
import types
from typing import Annotated, Any, ClassVar, Union, get_args, get_origin, get_type_hints

from graphmap.mapping.types import FieldAccessor

_NONE_TYPE = type(None)

# Framework base classes whose own properties are not data fields.
_FOREIGN_MODULE_PREFIXES = (
    "builtins",
    "abc",
    "_collections_abc",
    "collections",
    "typing",
    "enum",
    "dataclasses",
    "pydantic",
)


def unwrap_optional(tp: Any) -> tuple[Any, bool]:
    """Strip ``Annotated`` and ``None`` members from *tp*.

    Returns the remaining type and whether ``None`` was allowed.
    ``Optional[int]`` -> ``(int, True)``; ``int | str`` -> ``(int | str, False)``.
    """
    if get_origin(tp) is Annotated:
        tp = get_args(tp)[0]
    if tp is None or tp is _NONE_TYPE:
        return _NONE_TYPE, True
    if get_origin(tp) in (Union, types.UnionType):
        members = get_args(tp)
        rest = tuple(m for m in members if m is not _NONE_TYPE)
        nullable = len(rest) != len(members)
        if len(rest) == 1:
            inner, _ = unwrap_optional(rest[0])
            return inner, nullable
        return Union[rest], nullable  # type: ignore[return-value]
    return tp, False


def type_origin(tp: Any) -> Any:
    """``list`` for ``list[int]``, the type itself for plain classes."""
    return get_origin(tp) or tp


def is_pydantic_model(cls: type) -> bool:
    return isinstance(getattr(cls, "model_fields", None), dict) and hasattr(cls, "model_construct")


def _is_classvar(hint: Any) -> bool:
    if isinstance(hint, str):
        return hint.startswith(("ClassVar", "typing.ClassVar"))
    return hint is ClassVar or get_origin(hint) is ClassVar


def _type_hints(cls: type) -> dict[str, Any]:
    """Resolved annotations across the MRO; unresolvable ones become ``Any``."""
    try:
        return get_type_hints(cls)
    except Exception:
        hints: dict[str, Any] = {}
        for klass in reversed(cls.__mro__):
            try:
                raw = inspect.get_annotations(klass)
            except Exception:
                continue
            for name, hint in raw.items():
                hints[name] = hint if not isinstance(hint, str) or _is_classvar(hint) else Any
        return hints


def _return_type(func: Any) -> Any:
    try:
        return get_type_hints(func).get("return", Any)
    except Exception:
        return Any


def _is_foreign(klass: type) -> bool:
    module = klass.__module__
    return any(module == p or module.startswith(p + ".") for p in _FOREIGN_MODULE_PREFIXES)


def _own_classes(cls: type) -> list[type]:
    """MRO entries that belong to user code, base-most first."""
    return [klass for klass in reversed(cls.__mro__) if not _is_foreign(klass)]


def _pydantic_fields(cls: type) -> dict[str, FieldAccessor]:
    frozen_model = bool(cls.model_config.get("frozen", False))  # type: ignore[attr-defined]
    return {
        name: FieldAccessor(
            name,
            info.annotation if info.annotation is not None else Any,
            readable=True,
            writable=not (frozen_model or info.frozen),
        )
        for name, info in cls.model_fields.items()  # type: ignore[attr-defined]
    }


def _dataclass_fields(cls: type, hints: dict[str, Any]) -> dict[str, FieldAccessor]:
    frozen = cls.__dataclass_params__.frozen  # type: ignore[attr-defined]
    return {
        f.name: FieldAccessor(f.name, hints.get(f.name, Any), readable=True, writable=not frozen)
        for f in dataclasses.fields(cls)
    }


def _annotated_fields(cls: type, hints: dict[str, Any]) -> dict[str, FieldAccessor]:
    return {
        name: FieldAccessor(name, hint)
        for name, hint in hints.items()
        if not name.startswith("_") and not _is_classvar(hint)
    }


@functools.lru_cache(maxsize=None)
def discover_fields(cls: type) -> tuple[FieldAccessor, ...]:
    """All fields of *cls* in definition order, properties last."""
    hints = _type_hints(cls)

    fields: dict[str, FieldAccessor]
    if is_pydantic_model(cls):
        fields = _pydantic_fields(cls)
    elif dataclasses.is_dataclass(cls):
        fields = _dataclass_fields(cls, hints)
    else:
        fields = _annotated_fields(cls, hints)

    for klass in _own_classes(cls):
        slots = klass.__dict__.get("__slots__", ())
        for name in (slots,) if isinstance(slots, str) else slots:
            if name.startswith("_") or name in fields:
                continue
            fields[name] = FieldAccessor(name, hints.get(name, Any))

    for klass in _own_classes(cls):
        for name, attr in vars(klass).items():
            if name.startswith("_"):
                continue
            if isinstance(attr, property):
                fields[name] = FieldAccessor(
                    name,
                    _return_type(attr.fget) if attr.fget is not None else Any,
                    readable=attr.fget is not None,
                    writable=attr.fset is not None,
                )
            elif isinstance(attr, functools.cached_property):
                fields[name] = FieldAccessor(name, _return_type(attr.func), readable=True, writable=False)

    return tuple(fields.values())


def readable_fields(cls: type) -> list[FieldAccessor]:
    return [f for f in discover_fields(cls) if f.readable]


def writable_fields(cls: type) -> list[FieldAccessor]:
    return [f for f in discover_fields(cls) if f.writable]


def name_index(accessors: list[FieldAccessor]) -> dict[str, FieldAccessor]:
    """Case-insensitive index; the first accessor for a folded name wins."""
    index: dict[str, FieldAccessor] = {}
    for accessor in accessors:
        index.setdefault(accessor.name.casefold(), accessor)
    return index
