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
"""Tests for per-field outcome types."""

from graphmap.kernel.types import FieldOutcome, FieldStatus, MappingReport, SkipReason


class TestFieldOutcome:
    def test_mapped_is_not_failure(self):
        assert not FieldOutcome("name", FieldStatus.MAPPED).is_failure

    def test_null_source_is_not_failure(self):
        assert not FieldOutcome("name", FieldStatus.SKIPPED, SkipReason.NULL_SOURCE).is_failure

    def test_other_skips_are_failures(self):
        assert FieldOutcome("id", FieldStatus.SKIPPED, SkipReason.READ_FAILED).is_failure


class TestMappingReport:
    def test_empty_report_is_complete(self):
        report = MappingReport()
        assert report.complete
        assert report.outcomes == []

    def test_records_outcomes_in_order(self):
        report = MappingReport()
        report.mapped("name")
        report.skipped("email", SkipReason.NULL_SOURCE)
        report.skipped("tags[1]", SkipReason.CONVERSION_FAILED, 42)

        assert [o.path for o in report.outcomes] == ["name", "email", "tags[1]"]
        assert report.mapped_paths == ["name"]
        assert report.outcomes[2].detail == "42"
        assert not report.complete

    def test_reasons_exclude_null_sources(self):
        report = MappingReport()
        report.skipped("email", SkipReason.NULL_SOURCE)
        report.skipped("id", SkipReason.CONVERSION_FAILED)

        assert report.reasons() == {"id": SkipReason.CONVERSION_FAILED}
        assert [o.path for o in report.failures] == ["id"]
