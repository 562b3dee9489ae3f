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
"""Tests for mapping reports and strict mode."""

from __future__ import annotations

import abc
import uuid
from dataclasses import dataclass, field

import pytest

from graphmap.kernel.exceptions import IncompleteMappingException
from graphmap.kernel.types import FieldStatus, MappingReport, SkipReason
from graphmap.mapping.mapper import Mapper

ACCOUNT_ID = "12345678-1234-5678-1234-567812345678"


@dataclass
class Account:
    id: str = ""
    name: str | None = None


@dataclass
class AccountDTO:
    id: uuid.UUID | None = None
    name: str = "unset"


@dataclass
class Street:
    street: str | None = None


@dataclass
class Holder:
    address: Street | None = None
    scores: list[str] = field(default_factory=list)


@dataclass
class HolderDTO:
    address: Street | None = None
    scores: list[int] = field(default_factory=list)


class Flaky:
    @property
    def value(self) -> int:
        raise RuntimeError("boom")


@dataclass
class Reading:
    value: int = 0


class Guarded:
    def __init__(self) -> None:
        self._value = 0

    @property
    def value(self) -> int:
        return self._value

    @value.setter
    def value(self, value: int) -> None:
        raise ValueError("read only")


class Shape(abc.ABC):
    @abc.abstractmethod
    def area(self) -> float: ...


@dataclass
class Circle:
    radius: float = 1.0


@dataclass
class Drawing:
    shape: Circle | None = None


@dataclass
class DrawingDTO:
    shape: Shape | None = None


class TestStrictMode:
    def test_conversion_failure_raises(self) -> None:
        with pytest.raises(IncompleteMappingException) as exc_info:
            Mapper().map(Account(id="not-a-uuid", name="Ada"), AccountDTO, strict=True)

        exc = exc_info.value
        assert exc.report.reasons() == {"id": SkipReason.CONVERSION_FAILED}
        assert isinstance(exc.destination, AccountDTO)
        assert exc.destination.name == "Ada"
        assert exc.destination.id is None

    def test_lenient_by_default(self) -> None:
        dto = Mapper().map(Account(id="not-a-uuid", name="Ada"), AccountDTO)
        assert dto == AccountDTO(id=None, name="Ada")

    def test_null_sources_do_not_fail(self) -> None:
        dto = Mapper().map(Account(id=ACCOUNT_ID), AccountDTO, strict=True)
        assert dto.id == uuid.UUID(ACCOUNT_ID)
        assert dto.name == "unset"

    def test_mapper_default(self) -> None:
        with pytest.raises(IncompleteMappingException):
            Mapper(strict=True).map(Account(id="bad"), AccountDTO)

    def test_call_overrides_mapper_default(self) -> None:
        dto = Mapper(strict=True).map(Account(id="bad"), AccountDTO, strict=False)
        assert dto.id is None

    def test_map_onto_strict(self) -> None:
        dest = AccountDTO(id=uuid.UUID(ACCOUNT_ID))
        with pytest.raises(IncompleteMappingException) as exc_info:
            Mapper().map_onto(Account(id="bad"), dest, strict=True)
        assert exc_info.value.destination is dest
        assert dest.id == uuid.UUID(ACCOUNT_ID)


class TestMappingReport:
    def test_records_paths(self) -> None:
        report = MappingReport()
        Mapper().map(Holder(address=Street(street="Main"), scores=["1", "x"]), HolderDTO, report=report)

        assert report.mapped_paths == ["address.street", "address", "scores"]
        assert report.reasons() == {"scores[1]": SkipReason.CONVERSION_FAILED}

    def test_records_null_sources(self) -> None:
        report = MappingReport()
        Mapper().map(Account(id=ACCOUNT_ID), AccountDTO, report=report)

        null = [o for o in report.outcomes if o.reason is SkipReason.NULL_SOURCE]
        assert [o.path for o in null] == ["name"]
        assert null[0].status is FieldStatus.SKIPPED
        assert report.complete

    def test_read_failure(self) -> None:
        report = MappingReport()
        result = Mapper().map(Flaky(), Reading, report=report)

        assert result == Reading()
        assert report.reasons() == {"value": SkipReason.READ_FAILED}
        assert "boom" in report.failures[0].detail

    def test_write_failure(self) -> None:
        report = MappingReport()
        Mapper().map(Reading(value=3), Guarded, report=report)

        assert report.reasons() == {"value": SkipReason.WRITE_FAILED}

    def test_construction_failure(self) -> None:
        report = MappingReport()
        dto = Mapper().map(Drawing(shape=Circle()), DrawingDTO, report=report)

        assert dto.shape is None
        assert report.reasons() == {"shape": SkipReason.CONSTRUCTION_FAILED}

    def test_map_list_shares_report(self) -> None:
        report = MappingReport()
        Mapper().map_list([Account(id="bad"), None, Account(id=ACCOUNT_ID)], AccountDTO, report=report)

        assert [o.path for o in report.failures] == ["id"]
        assert report.mapped_paths == ["id"]
