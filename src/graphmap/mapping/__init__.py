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
"""graphmap mapping — the object-graph mapper and its components.

- :class:`TypeShapeCache` discovers and memoizes matched field pairs.
- :class:`CustomMappingRegistry` holds explicit field-name overrides.
- :class:`ValueConverter` coerces scalar values.
- :class:`InstanceFactory` creates destination objects and collections.
- :class:`CollectionReconciler` fills collection fields.
- :class:`Mapper` drives the recursion with cycle and depth control.
"""

from graphmap.mapping.auto_configuration import create_mapper
from graphmap.mapping.context import MappingContext
from graphmap.mapping.converter import ValueConverter, is_simple_type
from graphmap.mapping.factory import InstanceFactory
from graphmap.mapping.mapper import Mapper
from graphmap.mapping.reconciler import CollectionReconciler, element_type, is_collection_type
from graphmap.mapping.registry import CustomMappingRegistry
from graphmap.mapping.shape_cache import TypeShapeCache
from graphmap.mapping.types import FieldAccessor, FieldMapping, MappingConfig, TypePair, TypeShape

__all__ = [
    "CollectionReconciler",
    "CustomMappingRegistry",
    "FieldAccessor",
    "FieldMapping",
    "InstanceFactory",
    "Mapper",
    "MappingConfig",
    "MappingContext",
    "TypePair",
    "TypeShape",
    "TypeShapeCache",
    "ValueConverter",
    "create_mapper",
    "element_type",
    "is_collection_type",
    "is_simple_type",
]
