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
"""CollectionReconciler — maps iterable sources into destination collections."""

from __future__ import annotations

import collections
import collections.abc
from collections.abc import Callable, Iterable, Mapping
from typing import Any, TypeVar, get_args, get_origin

from graphmap.kernel.types import SkipReason
from graphmap.mapping.context import MappingContext
from graphmap.mapping.converter import ValueConverter, is_simple_type
from graphmap.mapping.factory import InstanceFactory
from graphmap.mapping.introspection import type_origin, unwrap_optional
from graphmap.mapping.types import FieldAccessor

#: ``(item, element type, context, depth, path) -> new destination or None``
MapObject = Callable[[Any, Any, MappingContext, int, str], Any]

_SCALAR_ITERABLES = (str, bytes, bytearray)

# Unparameterised forms of these have element type Any.
_KNOWN_COLLECTIONS: frozenset[type] = frozenset(
    {
        list,
        tuple,
        set,
        frozenset,
        collections.deque,
        collections.abc.Iterable,
        collections.abc.Collection,
        collections.abc.Sequence,
        collections.abc.MutableSequence,
        collections.abc.Reversible,
        collections.abc.Set,
        collections.abc.MutableSet,
    }
)


def is_collection_type(tp: Any) -> bool:
    """Iterable destination types other than strings, bytes and mappings."""
    target, _ = unwrap_optional(tp)
    cls = type_origin(target)
    if not isinstance(cls, type) or issubclass(cls, (*_SCALAR_ITERABLES, Mapping)):
        return False
    if issubclass(cls, tuple) and hasattr(cls, "_fields"):
        # named tuples are records, not collections
        return False
    return issubclass(cls, Iterable)


def element_type(tp: Any) -> tuple[bool, Any]:
    """Return ``(immutable, element type)`` for a collection type.

    Tuples and frozensets are immutable and always rebuilt. The element type
    is ``None`` when it cannot be determined.
    """
    target, _ = unwrap_optional(tp)
    cls = type_origin(target)
    immutable = issubclass(cls, (tuple, frozenset))
    args = get_args(target)

    if args:
        if issubclass(cls, tuple):
            if len(args) == 2 and args[1] is Ellipsis:
                return True, args[0]
            return True, args[0] if all(a == args[0] for a in args) else None
        return immutable, args[0]

    if cls in _KNOWN_COLLECTIONS:
        return immutable, Any

    for klass in cls.__mro__:
        for base in klass.__dict__.get("__orig_bases__", ()):
            base_origin = get_origin(base)
            base_args = get_args(base)
            if (
                isinstance(base_origin, type)
                and issubclass(base_origin, Iterable)
                and base_args
                and not isinstance(base_args[0], TypeVar)
            ):
                return immutable, base_args[0]
    return immutable, None


def _is_mutable(collection: Any) -> bool:
    if isinstance(collection, (collections.abc.MutableSequence, collections.abc.MutableSet)):
        return True
    return hasattr(collection, "clear") and (hasattr(collection, "append") or hasattr(collection, "add"))


def _extend(collection: Any, items: list[Any]) -> bool:
    if hasattr(collection, "append"):
        for item in items:
            collection.append(item)
        return True
    if hasattr(collection, "add"):
        for item in items:
            collection.add(item)
        return True
    return False


class CollectionReconciler:
    """Fills collection-typed destination fields from iterable source values.

    Elements are converted (simple element types) or mapped through
    *map_object* (nested objects); ``None`` elements are dropped. Tuples and
    frozensets are always replaced. An existing mutable collection on the
    destination is cleared and refilled, or appended to in merge-only mode;
    otherwise a new collection is built and assigned.
    """

    def __init__(self, converter: ValueConverter, factory: InstanceFactory) -> None:
        self._converter = converter
        self._factory = factory

    def reconcile(
        self,
        value: Any,
        destination: Any,
        accessor: FieldAccessor,
        ctx: MappingContext,
        depth: int,
        path: str,
        map_object: MapObject,
    ) -> None:
        declared = accessor.declared_type

        if isinstance(value, (*_SCALAR_ITERABLES, Mapping)) or not isinstance(value, Iterable):
            # never iterate strings or mappings; assign only if already compatible
            ok, converted = self._converter.convert(value, declared)
            if ok:
                ctx.write(destination, accessor, converted, path)
            else:
                ctx.skip(path, SkipReason.CONVERSION_FAILED, f"{type(value).__name__} is not a collection")
            return

        immutable, elem = element_type(declared)
        if elem is None:
            ctx.skip(path, SkipReason.UNKNOWN_ELEMENT_TYPE, declared)
            return

        items = self.map_elements(value, elem, ctx, depth, path, map_object)

        if not immutable:
            existing = self._existing(destination, accessor)
            if existing is not None and _is_mutable(existing):
                snapshot = list(existing)
                try:
                    if not ctx.merge_only:
                        existing.clear()
                    _extend(existing, items)
                except Exception as exc:
                    # leave the destination as it was before the refill
                    existing.clear()
                    _extend(existing, snapshot)
                    ctx.skip(path, SkipReason.WRITE_FAILED, repr(exc))
                else:
                    ctx.mapped(path)
                return
            if ctx.merge_only and isinstance(existing, Iterable) and not isinstance(existing, _SCALAR_ITERABLES):
                items = [*existing, *items]

        collection = self.new_collection(declared, items)
        if collection is None:
            ctx.skip(path, SkipReason.UNSUPPORTED_COLLECTION, declared)
            return
        ctx.write(destination, accessor, collection, path)

    def map_elements(
        self,
        source: Iterable[Any],
        elem: Any,
        ctx: MappingContext,
        depth: int,
        path: str,
        map_object: MapObject,
    ) -> list[Any]:
        simple = is_simple_type(elem)
        nested_collection = not simple and is_collection_type(elem)
        mapped: list[Any] = []

        for index, item in enumerate(source):
            if item is None:
                continue
            item_path = f"{path}[{index}]"

            if simple:
                ok, converted = self._converter.convert(item, elem)
                if ok:
                    mapped.append(converted)
                else:
                    ctx.skip(item_path, SkipReason.CONVERSION_FAILED, f"{item!r} -> {elem!r}")
            elif nested_collection:
                inner = self._nested_collection(item, elem, ctx, depth, item_path, map_object)
                if inner is not None:
                    mapped.append(inner)
            else:
                result = map_object(item, elem, ctx, depth + 1, item_path)
                if result is not None:
                    mapped.append(result)

        return mapped

    def new_collection(self, tp: Any, items: list[Any]) -> Any | None:
        """Build a collection of type *tp* holding *items*, or ``None``."""
        target, _ = unwrap_optional(tp)
        cls = type_origin(target)
        try:
            if issubclass(cls, (tuple, frozenset)):
                return cls(items)
            instance = self._factory.create(target)
            if instance is None or not _extend(instance, items):
                return None
            return instance
        except Exception:
            return None

    def _nested_collection(
        self,
        item: Any,
        elem: Any,
        ctx: MappingContext,
        depth: int,
        path: str,
        map_object: MapObject,
    ) -> Any | None:
        if isinstance(item, (*_SCALAR_ITERABLES, Mapping)) or not isinstance(item, Iterable):
            ctx.skip(path, SkipReason.CONVERSION_FAILED, f"{type(item).__name__} is not a collection")
            return None
        _, inner_elem = element_type(elem)
        if inner_elem is None:
            ctx.skip(path, SkipReason.UNKNOWN_ELEMENT_TYPE, elem)
            return None
        collection = self.new_collection(elem, self.map_elements(item, inner_elem, ctx, depth, path, map_object))
        if collection is None:
            ctx.skip(path, SkipReason.UNSUPPORTED_COLLECTION, elem)
        return collection

    @staticmethod
    def _existing(destination: Any, accessor: FieldAccessor) -> Any | None:
        try:
            existing = accessor.read(destination)
        except Exception:
            return None
        # a class-level default is shared by every instance; never mutate it
        if existing is not None and getattr(type(destination), accessor.name, None) is existing:
            return None
        return existing
