"""Tests for the AppRecord model."""

from datetime import UTC, datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from flowstore.domain.records import (
    DEFAULT_APP_COLOR,
    DEFAULT_APP_ICON,
    SCHEMA_VERSION,
    AppRecord,
    format_timestamp,
    parse_timestamp,
)

CREATED = "2024-01-01T00:00:00.000000+00:00"
LATER = "2024-01-02T00:00:00.000000+00:00"


class TestAppRecord:
    def test_defaults(self) -> None:
        record = AppRecord(id="a", name="A", created_at=CREATED, updated_at=CREATED)
        assert record.icon == DEFAULT_APP_ICON
        assert record.color == DEFAULT_APP_COLOR
        assert record.version == SCHEMA_VERSION
        assert record.nodes == []
        assert record.edges == []

    def test_updated_before_created_rejected(self) -> None:
        with pytest.raises(ValidationError):
            AppRecord(id="a", name="A", created_at=LATER, updated_at=CREATED)

    def test_extra_fields_round_trip(self) -> None:
        raw = {
            "id": "a",
            "name": "A",
            "created_at": CREATED,
            "updated_at": LATER,
            "owner": "someone",
        }
        assert AppRecord.from_record(raw).to_record()["owner"] == "someone"

    def test_camel_case_timestamps(self) -> None:
        raw = {"id": "a", "name": "A", "createdAt": CREATED, "updatedAt": LATER}
        record = AppRecord.from_record(raw)
        assert record.created_at == CREATED
        dumped = record.to_record()
        assert dumped["updated_at"] == LATER
        assert "createdAt" not in dumped

    def test_unparseable_timestamp_rejected(self) -> None:
        with pytest.raises(ValidationError):
            AppRecord.from_record(
                {"id": "a", "name": "A", "created_at": "yesterday", "updated_at": LATER}
            )

    def test_to_record_is_plain(self) -> None:
        record = AppRecord(
            id="a",
            name="A",
            nodes=[{"id": "n", "data": {"config": {"k": [1, 2]}}}],
            created_at=CREATED,
            updated_at=LATER,
        )
        dumped = record.to_record()
        assert dumped["nodes"] == [{"id": "n", "data": {"config": {"k": [1, 2]}}}]
        assert dumped["updated_at"] == LATER

    def test_updated_property(self) -> None:
        record = AppRecord(id="a", name="A", created_at=CREATED, updated_at=LATER)
        assert record.updated == datetime(2024, 1, 2, tzinfo=UTC)


class TestTimestamps:
    def test_naive_parses_as_utc(self) -> None:
        assert parse_timestamp("2024-01-01T00:00:00") == datetime(2024, 1, 1, tzinfo=UTC)

    def test_zulu_suffix(self) -> None:
        assert parse_timestamp("2024-01-01T00:00:00.000Z") == datetime(2024, 1, 1, tzinfo=UTC)

    def test_format_fixed_precision(self) -> None:
        assert format_timestamp(datetime(2024, 1, 1, tzinfo=UTC)) == CREATED

    def test_format_converts_to_utc(self) -> None:
        plus_two = timezone(timedelta(hours=2))
        moment = datetime(2024, 1, 1, 2, 0, tzinfo=plus_two)
        assert format_timestamp(moment) == CREATED
