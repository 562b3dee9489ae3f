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
"""Generic object-graph mapper.

Copies data between two arbitrary object shapes (dataclasses, pydantic
models, annotated plain classes) by matching field names
case-insensitively. Scalars are coerced to the destination field's declared
type, collections are rebuilt element by element, and nested objects are
mapped recursively with cycle detection and a depth limit.

Example::

    mapper = Mapper()
    dto = mapper.map(user_entity, UserDTO)

    # Merge a DTO into an existing entity; None values keep entity values
    mapper.map_onto(update_dto, user_entity)

    # With custom field mapping
    mapper.register_custom_mappings(User, UserDTO, {"username": "name"})
    dto = mapper.map(user, UserDTO)
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any, TypeVar

import structlog

from graphmap.kernel.exceptions import IncompleteMappingException, MappingDepthExceededException
from graphmap.kernel.types import MappingReport, SkipReason
from graphmap.mapping.context import MappingContext, join_path
from graphmap.mapping.converter import ValueConverter, is_simple_type, is_simple_value
from graphmap.mapping.factory import InstanceFactory
from graphmap.mapping.introspection import type_origin, unwrap_optional
from graphmap.mapping.reconciler import CollectionReconciler, is_collection_type
from graphmap.mapping.shape_cache import TypeShapeCache
from graphmap.mapping.types import FieldAccessor, FieldMapping, TypePair

logger = structlog.get_logger("graphmap.mapping")

S = TypeVar("S")
D = TypeVar("D")

# report path of the top-level destination
_ROOT_PATH = "<root>"


class Mapper:
    """Maps object graphs between types using a shared :class:`TypeShapeCache`.

    A mapper holds no per-call state and is safe to share between threads.
    Pass the same ``shape_cache`` to several mappers to share discovered
    shapes and custom mappings.

    Args:
        shape_cache: Cache of field correspondences; a private one is
            created when omitted.
        merge_only: Default for appending into existing destination
            collections instead of clearing them first.
        max_depth: Default nesting limit; exceeding it raises
            :class:`MappingDepthExceededException`.
        strict: Default for raising :class:`IncompleteMappingException`
            when any field could not be mapped.
    """

    def __init__(
        self,
        shape_cache: TypeShapeCache | None = None,
        *,
        converter: ValueConverter | None = None,
        factory: InstanceFactory | None = None,
        merge_only: bool = False,
        max_depth: int = 10,
        strict: bool = False,
    ) -> None:
        self._shapes = shape_cache if shape_cache is not None else TypeShapeCache()
        self._converter = converter if converter is not None else ValueConverter()
        self._factory = factory if factory is not None else InstanceFactory()
        self._collections = CollectionReconciler(self._converter, self._factory)
        self._merge_only = merge_only
        self._max_depth = self._check_depth(max_depth)
        self._strict = strict

    @property
    def shape_cache(self) -> TypeShapeCache:
        return self._shapes

    def register_custom_mappings(
        self,
        source_type: type[S],
        dest_type: type[D],
        field_map: dict[str, str] | None = None,
        *,
        transformers: dict[str, Callable[[Any], Any]] | None = None,
        exclude: set[str] | None = None,
    ) -> None:
        """Register a custom mapping between source and destination types.

        Args:
            source_type: The source type to map from.
            dest_type: The destination type to map to.
            field_map: Maps source field names to destination field names.
                When given, only these pairs are mapped for the type pair.
            transformers: Functions applied to non-None source values before
                conversion, keyed by destination field name.
            exclude: Destination fields that are never written.

        Raises:
            InvalidMappingException: A named field does not exist.

        A shape already cached for the pair is discarded, so registration
        takes effect on the next call regardless of call order.
        """
        pair = self._shapes.registry.register(
            source_type,
            dest_type,
            field_map=field_map,
            transformers=transformers,
            exclude=exclude,
        )
        invalidated = self._shapes.invalidate(source_type, dest_type)
        logger.debug("custom_mapping_registered", pair=pair, invalidated=invalidated)

    def map(
        self,
        source: S | None,
        dest_type: type[D],
        *,
        merge_only: bool | None = None,
        max_depth: int | None = None,
        strict: bool | None = None,
        report: MappingReport | None = None,
    ) -> D | None:
        """Create a new *dest_type* instance populated from *source*.

        Returns ``None`` when *source* is ``None``, *dest_type* cannot be
        instantiated, or the source leaves a required field of *dest_type*
        unset.
        """
        if source is None:
            return None
        destination = self._factory.create(dest_type)
        if destination is None:
            logger.debug("destination_not_constructible", dest_type=dest_type)
            return None

        if not self._run(source, destination, merge_only, max_depth, strict, report, created=True):
            return None
        return destination

    def map_onto(
        self,
        source: S | None,
        destination: D | None,
        *,
        merge_only: bool | None = None,
        max_depth: int | None = None,
        strict: bool | None = None,
        report: MappingReport | None = None,
    ) -> None:
        """Copy values from *source* into an existing *destination*.

        Destination values are kept wherever the source value is ``None``.
        Does nothing when either argument is ``None``.
        """
        if source is None or destination is None:
            return
        self._run(source, destination, merge_only, max_depth, strict, report)

    def map_list(
        self,
        sources: Iterable[S | None],
        dest_type: type[D],
        *,
        merge_only: bool | None = None,
        max_depth: int | None = None,
        strict: bool | None = None,
        report: MappingReport | None = None,
    ) -> list[D]:
        """Map each source to a new *dest_type*; ``None`` results are dropped."""
        results: list[D] = []
        for source in sources:
            mapped = self.map(
                source,
                dest_type,
                merge_only=merge_only,
                max_depth=max_depth,
                strict=strict,
                report=report,
            )
            if mapped is not None:
                results.append(mapped)
        return results

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _check_depth(max_depth: int) -> int:
        if max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {max_depth}")
        return max_depth

    def _run(
        self,
        source: Any,
        destination: Any,
        merge_only: bool | None,
        max_depth: int | None,
        strict: bool | None,
        report: MappingReport | None,
        *,
        created: bool = False,
    ) -> bool:
        ctx = MappingContext(
            merge_only=self._merge_only if merge_only is None else merge_only,
            max_depth=self._max_depth if max_depth is None else self._check_depth(max_depth),
            report=report if report is not None else MappingReport(),
        )
        pair = TypePair(type(source), type(destination))
        with structlog.contextvars.bound_contextvars(mapping=pair):
            self._map_into(source, destination, ctx, 0, "")
            complete = not created or self._check_constructed(destination, ctx, _ROOT_PATH)

        if (self._strict if strict is None else strict) and not ctx.report.complete:
            raise IncompleteMappingException(ctx.report, destination if complete else None)
        return complete

    def _map_into(self, source: Any, destination: Any, ctx: MappingContext, depth: int, path: str) -> None:
        if depth > ctx.max_depth:
            logger.warning(
                "mapping_depth_exceeded",
                max_depth=ctx.max_depth,
                path=path,
                source_type=type(source),
            )
            raise MappingDepthExceededException(ctx.max_depth, depth, path, type(source))

        if not ctx.remember(source, destination):
            return

        shape = self._shapes.get_shape(type(source), type(destination))
        for mapping in shape:
            self._map_field(source, destination, mapping, ctx, depth, join_path(path, mapping.name))

    def _map_field(
        self,
        source: Any,
        destination: Any,
        mapping: FieldMapping,
        ctx: MappingContext,
        depth: int,
        path: str,
    ) -> None:
        try:
            value = mapping.source.read(source)
        except Exception as exc:
            ctx.skip(path, SkipReason.READ_FAILED, repr(exc))
            return

        if value is not None and mapping.transformer is not None:
            try:
                value = mapping.transformer(value)
            except Exception as exc:
                ctx.skip(path, SkipReason.CONVERSION_FAILED, repr(exc))
                return

        if value is None:
            ctx.skip(path, SkipReason.NULL_SOURCE)
            return

        accessor = mapping.destination
        declared = accessor.declared_type

        if is_simple_type(declared):
            self._map_scalar(value, destination, accessor, ctx, path)
        elif is_collection_type(declared):
            self._collections.reconcile(value, destination, accessor, ctx, depth, path, self._map_object)
        elif is_simple_value(value):
            # a scalar source cannot be walked into an object field
            self._map_scalar(value, destination, accessor, ctx, path)
        else:
            self._map_nested(value, destination, accessor, ctx, depth, path)

    def _map_scalar(
        self,
        value: Any,
        destination: Any,
        accessor: FieldAccessor,
        ctx: MappingContext,
        path: str,
    ) -> None:
        ok, converted = self._converter.convert(value, accessor.declared_type)
        if not ok:
            ctx.skip(path, SkipReason.CONVERSION_FAILED, f"{type(value).__name__} -> {accessor.declared_type!r}")
            return
        ctx.write(destination, accessor, converted, path)

    def _map_nested(
        self,
        value: Any,
        destination: Any,
        accessor: FieldAccessor,
        ctx: MappingContext,
        depth: int,
        path: str,
    ) -> None:
        try:
            current = accessor.read(destination)
        except AttributeError:
            # declared but never assigned
            current = None
        except Exception as exc:
            ctx.skip(path, SkipReason.READ_FAILED, repr(exc))
            return

        if current is not None and getattr(type(destination), accessor.name, None) is current:
            # class-level default shared by all instances
            current = None

        if current is not None:
            self._map_into(value, current, ctx, depth + 1, path)
            return

        created, reused = self._produce(value, accessor.declared_type, ctx, path)
        if created is None:
            return
        if not reused:
            self._map_into(value, created, ctx, depth + 1, path)
            if not self._check_constructed(created, ctx, path):
                ctx.forget(value, created)
                return
        ctx.write(destination, accessor, created, path)

    def _map_object(self, item: Any, elem: Any, ctx: MappingContext, depth: int, path: str) -> Any | None:
        """Map a collection element into a new instance of *elem*."""
        if is_simple_value(item):
            ok, converted = self._converter.convert(item, elem)
            if not ok:
                ctx.skip(path, SkipReason.CONVERSION_FAILED, f"{type(item).__name__} -> {elem!r}")
                return None
            return converted

        instance, reused = self._produce(item, elem, ctx, path)
        if instance is not None and not reused:
            self._map_into(item, instance, ctx, depth, path)
            if not self._check_constructed(instance, ctx, path):
                ctx.forget(item, instance)
                return None
        return instance

    def _check_constructed(self, instance: Any, ctx: MappingContext, path: str) -> bool:
        """False, with a CONSTRUCTION_FAILED outcome, if required fields were never set."""
        missing = self._factory.missing_fields(instance)
        if not missing:
            return True
        ctx.skip(
            path,
            SkipReason.CONSTRUCTION_FAILED,
            f"{type(instance).__qualname__} is missing required field(s): {', '.join(missing)}",
        )
        return False

    def _produce(self, value: Any, dest_type: Any, ctx: MappingContext, path: str) -> tuple[Any | None, bool]:
        """Return ``(instance, reused)`` for mapping *value* as *dest_type*.

        Reuses the destination already produced for *value* in this call,
        otherwise creates a new one.
        """
        cls = type_origin(unwrap_optional(dest_type)[0])
        if isinstance(cls, type):
            produced = ctx.produced(value, cls)
            if produced is not None:
                return produced, True

        instance = self._factory.create(dest_type)
        if instance is None:
            ctx.skip(path, SkipReason.CONSTRUCTION_FAILED, dest_type)
        return instance, False
