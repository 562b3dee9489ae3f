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
"""Value types shared by the mapper components."""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Iterator
from typing import Any


@dataclasses.dataclass(frozen=True)
class TypePair:
    """Cache key for a (source type, destination type) pair. Order matters."""

    source: type
    destination: type

    def __str__(self) -> str:
        return f"{self.source.__qualname__} -> {self.destination.__qualname__}"


@dataclasses.dataclass(frozen=True)
class FieldAccessor:
    """A named attribute of a class with its declared type."""

    name: str
    declared_type: Any = Any
    readable: bool = True
    writable: bool = True

    def read(self, obj: object) -> Any:
        return getattr(obj, self.name)

    def write(self, obj: object, value: Any) -> None:
        setattr(obj, self.name, value)


@dataclasses.dataclass(frozen=True)
class FieldMapping:
    """A matched (source accessor, destination accessor) pair.

    ``transformer`` is applied to the source value before conversion.
    """

    source: FieldAccessor
    destination: FieldAccessor
    transformer: Callable[[Any], Any] | None = None

    @property
    def name(self) -> str:
        return self.destination.name


@dataclasses.dataclass(frozen=True)
class TypeShape:
    """Ordered field mappings for one :class:`TypePair`. Immutable once built."""

    pair: TypePair
    mappings: tuple[FieldMapping, ...] = ()

    def __iter__(self) -> Iterator[FieldMapping]:
        return iter(self.mappings)

    def __len__(self) -> int:
        return len(self.mappings)

    @property
    def field_names(self) -> list[tuple[str, str]]:
        """``(source name, destination name)`` for every mapping, in order."""
        return [(m.source.name, m.destination.name) for m in self.mappings]


@dataclasses.dataclass
class MappingConfig:
    """Custom mapping entry for a type pair.

    Attributes:
        field_map: Maps source field names to destination field names. When
            non-empty, only these pairs are mapped.
        transformers: Functions to transform values, keyed by dest field name.
        exclude: Destination fields that are never written.
    """

    field_map: dict[str, str] = dataclasses.field(default_factory=dict)
    transformers: dict[str, Callable[[Any], Any]] = dataclasses.field(default_factory=dict)
    exclude: set[str] = dataclasses.field(default_factory=set)
