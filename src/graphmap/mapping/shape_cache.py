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
"""TypeShapeCache — memoized field correspondence per type pair."""

from __future__ import annotations

import threading

import structlog

from graphmap.mapping.introspection import name_index, readable_fields, writable_fields
from graphmap.mapping.registry import CustomMappingRegistry
from graphmap.mapping.types import FieldMapping, MappingConfig, TypePair, TypeShape

logger = structlog.get_logger("graphmap.mapping.shapes")


class TypeShapeCache:
    """Builds and caches the :class:`TypeShape` of each (source, destination) pair.

    Lookups are lock-free dict reads. A first-time build runs outside the
    lock and is published with ``setdefault``, so two threads racing on the
    same pair compute equivalent shapes and only the first one is kept.
    Every :meth:`invalidate` bumps the pair's generation; a build started
    under an older generation is discarded and rebuilt, never published.
    """

    def __init__(self, registry: CustomMappingRegistry | None = None) -> None:
        self._registry = registry if registry is not None else CustomMappingRegistry()
        self._shapes: dict[TypePair, TypeShape] = {}
        self._generations: dict[TypePair, int] = {}
        self._lock = threading.Lock()

    @property
    def registry(self) -> CustomMappingRegistry:
        return self._registry

    def get_shape(self, source_type: type, dest_type: type) -> TypeShape:
        pair = TypePair(source_type, dest_type)
        while True:
            shape = self._shapes.get(pair)
            if shape is not None:
                return shape

            generation = self._generations.get(pair, 0)
            built = self._build(pair)
            with self._lock:
                if self._generations.get(pair, 0) == generation:
                    shape = self._shapes.setdefault(pair, built)
                    break

        if shape is built:
            logger.debug("shape_built", pair=pair, fields=shape.field_names)
        return shape

    def invalidate(self, source_type: type, dest_type: type) -> bool:
        """Drop the cached shape of a pair. Returns True if one was cached."""
        pair = TypePair(source_type, dest_type)
        with self._lock:
            self._generations[pair] = self._generations.get(pair, 0) + 1
            removed = self._shapes.pop(pair, None)
        if removed is not None:
            logger.debug("shape_invalidated", pair=pair)
        return removed is not None

    def clear(self) -> None:
        with self._lock:
            self._shapes.clear()

    def __contains__(self, pair: object) -> bool:
        return pair in self._shapes

    def __len__(self) -> int:
        return len(self._shapes)

    def _build(self, pair: TypePair) -> TypeShape:
        sources = readable_fields(pair.source)
        source_index = name_index(sources)
        dest_index = name_index(writable_fields(pair.destination))

        config = self._registry.get(pair) or MappingConfig()
        excluded = {name.casefold() for name in config.exclude}
        transformers = {name.casefold(): func for name, func in config.transformers.items()}

        if config.field_map:
            candidates = [
                (source_index[src.casefold()], dest_index[dest.casefold()])
                for src, dest in config.field_map.items()
                if src.casefold() in source_index and dest.casefold() in dest_index
            ]
        else:
            candidates = [
                (src, dest_index[src.name.casefold()])
                for src in sources
                if src.name.casefold() in dest_index
            ]

        mappings = tuple(
            FieldMapping(src, dest, transformers.get(dest.name.casefold()))
            for src, dest in candidates
            if dest.name.casefold() not in excluded
        )
        return TypeShape(pair, mappings)
