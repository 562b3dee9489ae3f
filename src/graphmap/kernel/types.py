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
"""Per-field outcome types aggregated by the mapper.

These types use only the Python standard library.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class FieldStatus(Enum):
    """Whether a field pair produced a write."""

    MAPPED = "MAPPED"
    SKIPPED = "SKIPPED"


class SkipReason(Enum):
    """Why a field pair did not produce a write."""

    NULL_SOURCE = "NULL_SOURCE"
    READ_FAILED = "READ_FAILED"
    WRITE_FAILED = "WRITE_FAILED"
    CONVERSION_FAILED = "CONVERSION_FAILED"
    CONSTRUCTION_FAILED = "CONSTRUCTION_FAILED"
    UNKNOWN_ELEMENT_TYPE = "UNKNOWN_ELEMENT_TYPE"
    UNSUPPORTED_COLLECTION = "UNSUPPORTED_COLLECTION"


@dataclass(frozen=True)
class FieldOutcome:
    """Outcome of a single field pair (or collection element) during mapping.

    ``path`` is dotted from the top-level destination, with ``[i]`` for
    collection elements, e.g. ``orders[2].total``.
    """

    path: str
    status: FieldStatus
    reason: SkipReason | None = None
    detail: str | None = None

    @property
    def is_failure(self) -> bool:
        return self.status is FieldStatus.SKIPPED and self.reason is not SkipReason.NULL_SOURCE


@dataclass
class MappingReport:
    """Ordered outcomes of one top-level mapping call."""

    outcomes: list[FieldOutcome] = field(default_factory=list)

    def mapped(self, path: str) -> None:
        self.outcomes.append(FieldOutcome(path, FieldStatus.MAPPED))

    def skipped(self, path: str, reason: SkipReason, detail: Any = None) -> FieldOutcome:
        outcome = FieldOutcome(
            path,
            FieldStatus.SKIPPED,
            reason,
            None if detail is None else str(detail),
        )
        self.outcomes.append(outcome)
        return outcome

    @property
    def failures(self) -> list[FieldOutcome]:
        """Skipped outcomes other than null sources."""
        return [o for o in self.outcomes if o.is_failure]

    @property
    def mapped_paths(self) -> list[str]:
        return [o.path for o in self.outcomes if o.status is FieldStatus.MAPPED]

    @property
    def complete(self) -> bool:
        return not self.failures

    def reasons(self) -> dict[str, SkipReason]:
        """Map each failed path to its skip reason."""
        return {o.path: o.reason for o in self.failures if o.reason is not None}
