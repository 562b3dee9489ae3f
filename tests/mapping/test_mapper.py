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
"""Tests for Mapper — construct-and-map, map-onto and custom mappings."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date

import pytest
import structlog
from pydantic import BaseModel

from graphmap.kernel.exceptions import IncompleteMappingException, InvalidMappingException
from graphmap.kernel.types import MappingReport, SkipReason
from graphmap.mapping.mapper import Mapper
from graphmap.mapping.types import TypePair

# ---------------------------------------------------------------------------
# Test types
# ---------------------------------------------------------------------------


@dataclass
class UserEntity:
    id: int
    username: str
    email: str
    active: bool = True


@dataclass
class UserDTO:
    username: str
    email: str


@dataclass
class UserResponse:
    name: str = ""
    email: str = ""
    is_active: bool = True


@dataclass
class ProfileDTO:
    username: str
    email: str
    bio: str = ""


@dataclass
class Person:
    name: str
    age: int
    score: float
    born: date
    ref: uuid.UUID


@dataclass
class LooseSource:
    name: str | None = None
    age: str | None = None


@dataclass
class TypedDest:
    name: str = ""
    age: int = 0


@dataclass
class Contact:
    full_name: str | None = None


@dataclass
class LegacyContact:
    FullName: str = ""


@dataclass
class Card:
    name: str = ""


@dataclass
class CamelSource:
    UserName: str = ""


@dataclass
class Child:
    id: int = 0


@dataclass
class Parent:
    name: str = ""
    child: Child | None = None


@dataclass
class Ticket:
    id: str | None = None


@dataclass
class TicketEntity:
    id: uuid.UUID | None = None


class UserModel(BaseModel):
    username: str
    email: str
    active: bool = True


@dataclass
class Applicant:
    name: str = ""


@dataclass
class FullApplicant:
    name: str = ""
    age: int = 0


@dataclass
class Enrollment:
    name: str
    age: int


class EnrollmentModel(BaseModel):
    name: str
    age: int


@dataclass
class ApplicantGroup:
    lead: Applicant | None = None
    members: list[Applicant] = field(default_factory=list)


@dataclass
class EnrollmentGroup:
    lead: Enrollment | None = None
    members: list[Enrollment] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestBasicAutoMapping:
    """Auto-mapping between dataclasses with matching field names."""

    def test_matching_fields_are_mapped(self) -> None:
        entity = UserEntity(id=1, username="alice", email="alice@example.com")
        mapper = Mapper()

        dto = mapper.map(entity, UserDTO)

        assert isinstance(dto, UserDTO)
        assert dto.username == "alice"
        assert dto.email == "alice@example.com"

    def test_entity_extra_fields_are_ignored(self) -> None:
        entity = UserEntity(id=42, username="bob", email="bob@test.com", active=False)

        dto = Mapper().map(entity, UserDTO)

        assert dto == UserDTO(username="bob", email="bob@test.com")

    def test_unmatched_destination_field_keeps_default(self) -> None:
        source = UserDTO(username="carol", email="carol@test.com")

        profile = Mapper().map(source, ProfileDTO)

        assert profile.username == "carol"
        assert profile.email == "carol@test.com"
        assert profile.bio == ""

    def test_names_match_case_insensitively(self) -> None:
        @dataclass
        class Target:
            username: str = ""

        result = Mapper().map(CamelSource(UserName="dave"), Target)

        assert result.username == "dave"

    def test_same_type_copy_is_distinct_and_equal(self) -> None:
        person = Person(
            name="Ada",
            age=36,
            score=9.5,
            born=date(1815, 12, 10),
            ref=uuid.UUID("3fa85f64-5717-4562-b3fc-2c963f66afa6"),
        )

        copy = Mapper().map(person, Person)

        assert copy is not person
        assert copy == person

    def test_string_values_are_coerced_to_declared_types(self) -> None:
        result = Mapper().map(LooseSource(name="Alice", age="30"), TypedDest)

        assert result == TypedDest(name="Alice", age=30)


class TestNullHandling:
    def test_none_source_returns_none(self) -> None:
        assert Mapper().map(None, UserDTO) is None

    def test_map_onto_with_none_arguments_is_noop(self) -> None:
        mapper = Mapper()
        dest = TypedDest(name="kept", age=1)

        mapper.map_onto(None, dest)
        mapper.map_onto(LooseSource(name="x"), None)

        assert dest == TypedDest(name="kept", age=1)

    def test_none_source_field_keeps_destination_value(self) -> None:
        dest = TypedDest(name="kept", age=7)

        Mapper().map_onto(LooseSource(name=None, age="8"), dest)

        assert dest.name == "kept"
        assert dest.age == 8

    def test_none_nested_source_keeps_destination_child(self) -> None:
        child = Child(id=1)
        dest = Parent(name="p", child=child)

        Mapper().map_onto(Parent(name="q", child=None), dest)

        assert dest.child is child
        assert dest.child == Child(id=1)
        assert dest.name == "q"

    def test_unconstructible_destination_returns_none(self) -> None:
        class NeedsArgs:
            def __init__(self, value: int) -> None:
                self.value = value

        assert Mapper().map(UserDTO(username="a", email="b"), NeedsArgs) is None


class TestMapOnto:
    def test_map_onto_is_idempotent_for_scalars(self) -> None:
        mapper = Mapper()
        source = LooseSource(name="Alice", age="30")
        dest = TypedDest()

        mapper.map_onto(source, dest)
        first = TypedDest(name=dest.name, age=dest.age)
        mapper.map_onto(source, dest)

        assert dest == first

    def test_nested_object_is_created_when_missing(self) -> None:
        dest = Parent()

        Mapper().map_onto(Parent(name="p", child=Child(id=5)), dest)

        assert dest.child == Child(id=5)

    def test_existing_nested_object_is_updated_in_place(self) -> None:
        child = Child(id=1)
        dest = Parent(child=child)

        Mapper().map_onto(Parent(child=Child(id=9)), dest)

        assert dest.child is child
        assert child.id == 9

    def test_nested_copy_does_not_share_source_instance(self) -> None:
        source = Parent(name="p", child=Child(id=3))

        copy = Mapper().map(source, Parent)

        assert copy.child == source.child
        assert copy.child is not source.child


class TestUuidConversion:
    def test_valid_uuid_string_is_parsed(self) -> None:
        result = Mapper().map(Ticket(id="3fa85f64-5717-4562-b3fc-2c963f66afa6"), TicketEntity)

        assert result.id == uuid.UUID("3fa85f64-5717-4562-b3fc-2c963f66afa6")

    def test_invalid_uuid_string_keeps_previous_value(self) -> None:
        previous = uuid.uuid4()
        dest = TicketEntity(id=previous)

        Mapper().map_onto(Ticket(id="not-a-uuid"), dest)

        assert dest.id == previous


class TestCustomFieldMap:
    """Explicit source -> dest field name mapping."""

    def test_field_map_renames_field(self) -> None:
        entity = UserEntity(id=1, username="alice", email="a@b.com", active=True)
        mapper = Mapper()
        mapper.register_custom_mappings(
            UserEntity,
            UserResponse,
            {"username": "name", "active": "is_active", "email": "email"},
        )

        resp = mapper.map(entity, UserResponse)

        assert resp == UserResponse(name="alice", email="a@b.com", is_active=True)

    def test_field_map_is_exclusive(self) -> None:
        entity = UserEntity(id=1, username="alice", email="a@b.com")
        mapper = Mapper()
        mapper.register_custom_mappings(UserEntity, UserResponse, {"username": "name"})

        resp = mapper.map(entity, UserResponse)

        assert resp.name == "alice"
        assert resp.email == ""

    def test_without_registration_only_identical_names_match(self) -> None:
        entity = UserEntity(id=1, username="alice", email="a@b.com")

        resp = Mapper().map(entity, UserResponse)

        assert resp.name == ""
        assert resp.email == "a@b.com"

    def test_registered_names_differing_from_defaults(self) -> None:
        mapper = Mapper()
        mapper.register_custom_mappings(LegacyContact, Card, {"FullName": "Name"})

        card = mapper.map(LegacyContact(FullName="Ada"), Card)

        assert card.name == "Ada"

    def test_registration_after_first_use_takes_effect(self) -> None:
        mapper = Mapper()
        assert mapper.map(Contact(full_name="Ada"), Card).name == ""

        mapper.register_custom_mappings(Contact, Card, {"full_name": "name"})

        assert mapper.map(Contact(full_name="Ada"), Card).name == "Ada"

    def test_unknown_source_field_fails_at_registration(self) -> None:
        mapper = Mapper()

        with pytest.raises(InvalidMappingException) as exc_info:
            mapper.register_custom_mappings(Contact, Card, {"nickname": "name"})

        assert exc_info.value.code == "INVALID_MAPPING"
        assert "nickname" in str(exc_info.value)

    def test_unknown_destination_field_fails_at_registration(self) -> None:
        with pytest.raises(InvalidMappingException):
            Mapper().register_custom_mappings(Contact, Card, {"full_name": "title"})


class TestTransformersAndExclude:
    def test_transformer_applied_to_field(self) -> None:
        entity = UserEntity(id=1, username="alice", email="a@b.com")
        mapper = Mapper()
        mapper.register_custom_mappings(UserEntity, UserDTO, transformers={"username": str.upper})

        dto = mapper.map(entity, UserDTO)

        assert dto.username == "ALICE"
        assert dto.email == "a@b.com"

    def test_failing_transformer_skips_field(self) -> None:
        def explode(value: str) -> str:
            raise RuntimeError("boom")

        mapper = Mapper()
        mapper.register_custom_mappings(UserEntity, ProfileDTO, transformers={"email": explode})
        dto = ProfileDTO(username="old", email="keep@me")

        mapper.map_onto(UserEntity(id=1, username="u", email="e"), dto)

        assert dto.username == "u"
        assert dto.email == "keep@me"

    def test_excluded_field_is_not_written(self) -> None:
        mapper = Mapper()
        mapper.register_custom_mappings(UserEntity, ProfileDTO, exclude={"email"})

        dest = ProfileDTO(username="old", email="keep@me")
        mapper.map_onto(UserEntity(id=1, username="new", email="x@y"), dest)

        assert dest.username == "new"
        assert dest.email == "keep@me"


class TestPydanticModels:
    def test_model_to_dataclass(self) -> None:
        model = UserModel(username="erin", email="erin@test.com")

        dto = Mapper().map(model, UserDTO)

        assert dto == UserDTO(username="erin", email="erin@test.com")

    def test_dataclass_to_model(self) -> None:
        entity = UserEntity(id=3, username="frank", email="f@test.com", active=False)

        model = Mapper().map(entity, UserModel)

        assert isinstance(model, UserModel)
        assert model.username == "frank"
        assert model.active is False


class TestMapList:
    def test_map_list(self) -> None:
        entities = [
            UserEntity(id=1, username="a", email="a@x.com"),
            None,
            UserEntity(id=2, username="b", email="b@x.com"),
        ]

        dtos = Mapper().map_list(entities, UserDTO)

        assert [d.username for d in dtos] == ["a", "b"]

    def test_map_list_empty(self) -> None:
        assert Mapper().map_list([], UserDTO) == []


class TestOptions:
    def test_negative_max_depth_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            Mapper(max_depth=-1)

        with pytest.raises(ValueError):
            Mapper().map(Child(id=1), Child, max_depth=-1)

    def test_shared_shape_cache(self) -> None:
        first = Mapper()
        second = Mapper(first.shape_cache)
        first.register_custom_mappings(Contact, Card, {"full_name": "name"})

        assert second.map(Contact(full_name="Grace"), Card).name == "Grace"


class TestRequiredDestinationFields:
    def test_missing_required_field_returns_none(self) -> None:
        report = MappingReport()

        assert Mapper().map(Applicant(name="a"), Enrollment, report=report) is None
        assert report.reasons() == {"<root>": SkipReason.CONSTRUCTION_FAILED}
        assert "age" in report.failures[0].detail

    def test_all_required_fields_supplied(self) -> None:
        assert Mapper().map(FullApplicant(name="a", age=3), Enrollment) == Enrollment(name="a", age=3)

    def test_pydantic_model_missing_required_field(self) -> None:
        assert Mapper().map(Applicant(name="a"), EnrollmentModel) is None

    def test_strict_mode_reports_no_destination(self) -> None:
        with pytest.raises(IncompleteMappingException) as exc_info:
            Mapper().map(Applicant(name="a"), Enrollment, strict=True)

        assert exc_info.value.destination is None

    def test_incomplete_nested_object_is_not_assigned(self) -> None:
        report = MappingReport()
        group = Mapper().map(
            ApplicantGroup(lead=Applicant(name="x"), members=[Applicant(name="y")]),
            EnrollmentGroup,
            report=report,
        )

        assert group == EnrollmentGroup(lead=None, members=[])
        assert report.reasons() == {
            "lead": SkipReason.CONSTRUCTION_FAILED,
            "members[0]": SkipReason.CONSTRUCTION_FAILED,
        }


class TestLoggingContext:
    def test_type_pair_is_bound_during_the_call(self) -> None:
        seen = []

        def capture(value: str) -> str:
            seen.append(structlog.contextvars.get_contextvars().get("mapping"))
            return value

        mapper = Mapper()
        mapper.register_custom_mappings(UserEntity, UserDTO, transformers={"email": capture})
        mapper.map(UserEntity(id=1, username="u", email="e"), UserDTO)

        assert seen == [TypePair(UserEntity, UserDTO)]
        assert "mapping" not in structlog.contextvars.get_contextvars()
