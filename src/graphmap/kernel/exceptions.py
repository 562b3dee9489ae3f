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
"""Unified exception hierarchy for graphmap.

All library exceptions inherit from GraphMapException, carrying an optional
machine-readable code and a context dict for structured error data.

Categories:
- MappingException: failures raised by the object-graph mapper
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from graphmap.kernel.types import MappingReport


# =============================================================================
# Base Exception
# =============================================================================


class GraphMapException(Exception):
    """Base exception for all graphmap errors.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "MAPPING_DEPTH_EXCEEDED").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


# =============================================================================
# Mapping Exceptions
# =============================================================================


class MappingException(GraphMapException):
    """Failures raised while mapping one object graph onto another."""


class MappingDepthExceededException(MappingException):
    """Nested-object recursion went deeper than the configured maximum.

    This is the only failure that aborts a whole mapping call; it usually
    signals an undeclared cycle or pathological nesting.
    """

    def __init__(self, max_depth: int, depth: int, path: str, source_type: type) -> None:
        super().__init__(
            f"Mapping depth exceeded {max_depth} at '{path or '<root>'}'. Possible circular reference.",
            code="MAPPING_DEPTH_EXCEEDED",
            context={
                "max_depth": max_depth,
                "depth": depth,
                "path": path,
                "source_type": source_type.__qualname__,
            },
        )
        self.max_depth = max_depth
        self.depth = depth
        self.path = path


class InvalidMappingException(MappingException):
    """A custom field mapping names fields that do not exist on either side."""

    def __init__(self, source_type: type, dest_type: type, problems: list[str]) -> None:
        super().__init__(
            f"Invalid custom mapping {source_type.__qualname__} -> {dest_type.__qualname__}: "
            + "; ".join(problems),
            code="INVALID_MAPPING",
            context={
                "source_type": source_type.__qualname__,
                "dest_type": dest_type.__qualname__,
                "problems": list(problems),
            },
        )
        self.problems = list(problems)


class IncompleteMappingException(MappingException):
    """Raised in strict mode when one or more fields could not be mapped.

    ``report`` holds every per-field outcome of the call and ``destination``
    the partially populated destination object.
    """

    def __init__(self, report: MappingReport, destination: Any) -> None:
        failures = report.failures
        paths = ", ".join(f"{o.path} ({o.reason.value})" for o in failures[:10])
        if len(failures) > 10:
            paths += f", ... {len(failures) - 10} more"
        super().__init__(
            f"{len(failures)} field(s) could not be mapped: {paths}",
            code="INCOMPLETE_MAPPING",
            context={"failures": len(failures)},
        )
        self.report = report
        self.destination = destination
