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
"""MappingContext — state scoped to one top-level mapping call."""

from __future__ import annotations

import dataclasses
from typing import Any

import structlog

from graphmap.kernel.types import MappingReport, SkipReason
from graphmap.mapping.types import FieldAccessor

logger = structlog.get_logger("graphmap.mapping")


@dataclasses.dataclass
class MappingContext:
    """Visited set, options and report of a single ``map``/``map_onto`` call.

    ``visited`` is keyed by ``(id(source), destination type)``. The source
    object is stored alongside its destination so its id cannot be reused
    by another object while the call is running.
    """

    merge_only: bool = False
    max_depth: int = 10
    report: MappingReport = dataclasses.field(default_factory=MappingReport)
    visited: dict[tuple[int, type], tuple[Any, Any]] = dataclasses.field(default_factory=dict)

    def remember(self, source: Any, destination: Any) -> bool:
        """Record *destination* as the result for *source*; False if already seen."""
        key = (id(source), type(destination))
        if key in self.visited:
            return False
        self.visited[key] = (source, destination)
        return True

    def forget(self, source: Any, destination: Any) -> None:
        """Drop a destination that was discarded so later references do not reuse it."""
        self.visited.pop((id(source), type(destination)), None)

    def produced(self, source: Any, dest_type: type) -> Any | None:
        """The destination already produced for *source* as *dest_type*, if any."""
        entry = self.visited.get((id(source), dest_type))
        return None if entry is None else entry[1]

    def write(self, destination: Any, accessor: FieldAccessor, value: Any, path: str) -> bool:
        """Best-effort setter call; a failing setter is recorded, not raised."""
        try:
            accessor.write(destination, value)
        except Exception as exc:
            self.skip(path, SkipReason.WRITE_FAILED, repr(exc))
            return False
        self.mapped(path)
        return True

    def mapped(self, path: str) -> None:
        self.report.mapped(path)

    def skip(self, path: str, reason: SkipReason, detail: Any = None) -> None:
        self.report.skipped(path, reason, detail)
        if reason is not SkipReason.NULL_SOURCE:
            logger.debug("field_skipped", path=path, reason=reason, detail=None if detail is None else str(detail))


def join_path(parent: str, name: str) -> str:
    return f"{parent}.{name}" if parent else name
