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
"""InstanceFactory — builds destination objects when none exist yet."""

from __future__ import annotations

import collections.abc
import dataclasses
import inspect
from typing import Any

import structlog

from graphmap.mapping.introspection import is_pydantic_model, type_origin, unwrap_optional

logger = structlog.get_logger("graphmap.mapping.factory")

# Abstract collection shapes satisfied by a plain list.
_LIST_ABSTRACTIONS: frozenset[type] = frozenset(
    {
        collections.abc.Iterable,
        collections.abc.Collection,
        collections.abc.Sequence,
        collections.abc.MutableSequence,
        collections.abc.Reversible,
        collections.abc.Container,
        collections.abc.Sized,
    }
)

_SET_ABSTRACTIONS: frozenset[type] = frozenset({collections.abc.Set, collections.abc.MutableSet})


class InstanceFactory:
    """Creates an empty destination instance, or ``None`` when it cannot.

    Concrete classes are called without arguments. Dataclasses and pydantic
    models whose constructors require arguments are created uninitialised
    with their defaults applied; fields are filled in by the mapper.
    """

    def create(self, tp: Any) -> Any | None:
        target, _ = unwrap_optional(tp)
        cls = type_origin(target)

        if cls in _LIST_ABSTRACTIONS:
            return []
        if cls in _SET_ABSTRACTIONS:
            return set()
        if not isinstance(cls, type) or inspect.isabstract(cls) or getattr(cls, "_is_protocol", False):
            return None

        try:
            return cls()
        except Exception as exc:
            # required arguments, or a pydantic ValidationError for required fields
            error: Exception = exc

        try:
            instance = self._create_uninitialised(cls)
        except Exception as exc:
            error, instance = exc, None
        if instance is None:
            logger.debug("construction_failed", type=cls, error=repr(error))
        return instance

    @staticmethod
    def _create_uninitialised(cls: type) -> Any | None:
        if is_pydantic_model(cls):
            return cls.model_construct()  # type: ignore[attr-defined]
        if not dataclasses.is_dataclass(cls):
            return None

        instance = cls.__new__(cls)
        for f in dataclasses.fields(cls):
            if f.default is not dataclasses.MISSING:
                object.__setattr__(instance, f.name, f.default)
            elif f.default_factory is not dataclasses.MISSING:
                object.__setattr__(instance, f.name, f.default_factory())
        return instance

    @staticmethod
    def missing_fields(instance: Any) -> list[str]:
        """Required dataclass or pydantic fields that *instance* never received.

        Only instances built by the uninitialised fallback can have any.
        """
        cls = type(instance)
        if is_pydantic_model(cls):
            required = [name for name, info in cls.model_fields.items() if info.is_required()]  # type: ignore[attr-defined]
        elif dataclasses.is_dataclass(cls):
            required = [
                f.name
                for f in dataclasses.fields(cls)
                if f.init and f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING
            ]
        else:
            return []
        return [name for name in required if not hasattr(instance, name)]
