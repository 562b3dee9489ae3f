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
"""CustomMappingRegistry — per type-pair field-name overrides."""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any

from graphmap.kernel.exceptions import InvalidMappingException
from graphmap.mapping.introspection import name_index, readable_fields, writable_fields
from graphmap.mapping.types import MappingConfig, TypePair


class CustomMappingRegistry:
    """Holds validated :class:`MappingConfig` entries keyed by :class:`TypePair`.

    Names are checked against the discovered fields of both types when an
    entry is registered, so a typo fails at registration rather than being
    dropped silently on first use.
    """

    def __init__(self) -> None:
        self._entries: dict[TypePair, MappingConfig] = {}
        self._lock = threading.Lock()

    def register(
        self,
        source_type: type,
        dest_type: type,
        *,
        field_map: dict[str, str] | None = None,
        transformers: dict[str, Callable[[Any], Any]] | None = None,
        exclude: set[str] | None = None,
    ) -> TypePair:
        config = MappingConfig(
            field_map=dict(field_map or {}),
            transformers=dict(transformers or {}),
            exclude=set(exclude or ()),
        )
        self._validate(source_type, dest_type, config)

        pair = TypePair(source_type, dest_type)
        with self._lock:
            self._entries[pair] = config
        return pair

    def get(self, pair: TypePair) -> MappingConfig | None:
        return self._entries.get(pair)

    def __contains__(self, pair: object) -> bool:
        return pair in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    @staticmethod
    def _validate(source_type: type, dest_type: type, config: MappingConfig) -> None:
        sources = name_index(readable_fields(source_type))
        dests = name_index(writable_fields(dest_type))

        problems: list[str] = []
        for src_name, dest_name in config.field_map.items():
            if src_name.casefold() not in sources:
                problems.append(f"source has no readable field '{src_name}'")
            if dest_name.casefold() not in dests:
                problems.append(f"destination has no writable field '{dest_name}'")
        for dest_name in (*config.transformers, *config.exclude):
            if dest_name.casefold() not in dests:
                problems.append(f"destination has no writable field '{dest_name}'")
        for dest_name, func in config.transformers.items():
            if not callable(func):
                problems.append(f"transformer for '{dest_name}' is not callable")

        if problems:
            raise InvalidMappingException(source_type, dest_type, problems)
