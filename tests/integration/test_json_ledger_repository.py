"""
Integration tests for JsonLedgerRepository using the real filesystem.
"""

import json
from datetime import datetime, timedelta, timezone

import pytest

from reeldrop.domain.errors import LedgerIOError
from reeldrop.domain.file_storage import MetadataLedger
from reeldrop.infrastructure.json_ledger_repository import (
    JsonLedgerRepository,
    format_timestamp,
    parse_timestamp,
)


@pytest.mark.integration
class TestJsonLedgerRepository:

    @pytest.fixture
    def repository(self, tmp_path):
        return JsonLedgerRepository(tmp_path)

    def test_missing_document_is_a_fresh_start(self, repository):
        result = repository.load()

        assert result.ok is True
        assert result.entries == {}

    def test_round_trip(self, repository, fixed_now):
        repository.save({"Clip.mp4": fixed_now, "Song.mp3": fixed_now - timedelta(hours=5)})

        result = repository.load()

        assert result.ok
        assert result.entries == {
            "Clip.mp4": fixed_now,
            "Song.mp3": fixed_now - timedelta(hours=5),
        }

    def test_document_format(self, repository, fixed_now):
        repository.save({"Clip.mp4": fixed_now})

        document = json.loads(repository.path.read_text(encoding="utf-8"))

        assert repository.path.name == ".metadata.json"
        assert document == {"Clip.mp4": "2024-01-15T12:00:00.000Z"}

    def test_reads_documents_written_by_other_tools(self, repository):
        repository.path.write_text(
            json.dumps({
                "a.mp4": "2024-01-15T12:00:00.000Z",
                "b.mp4": "2024-01-15T12:00:00+00:00",
            }),
            encoding="utf-8",
        )

        entries = repository.load().entries

        expected = datetime(2024, 1, 15, 12, tzinfo=timezone.utc)
        assert entries == {"a.mp4": expected, "b.mp4": expected}

    def test_corrupt_document_yields_empty_mapping_with_error(self, repository):
        repository.path.write_text("{not json", encoding="utf-8")

        result = repository.load()

        assert result.ok is False
        assert result.entries == {}

    def test_non_object_document(self, repository):
        repository.path.write_text("[1, 2, 3]", encoding="utf-8")

        assert repository.load().ok is False

    def test_invalid_timestamps_are_skipped(self, repository):
        repository.path.write_text(
            json.dumps({"good.mp4": "2024-01-15T12:00:00.000Z", "bad.mp4": "yesterday", "num.mp4": 5}),
            encoding="utf-8",
        )

        result = repository.load()

        assert result.ok
        assert list(result.entries) == ["good.mp4"]

    def test_save_leaves_no_temporary_file(self, repository, tmp_path, fixed_now):
        repository.save({"Clip.mp4": fixed_now})

        assert sorted(p.name for p in tmp_path.iterdir()) == [".metadata.json"]

    def test_unwritable_directory_raises_ledger_error(self, tmp_path, fixed_now):
        repository = JsonLedgerRepository(tmp_path / "does-not-exist")

        with pytest.raises(LedgerIOError):
            repository.save({"Clip.mp4": fixed_now})

    def test_corrupt_document_is_replaced_on_next_write(self, repository, fixed_now):
        repository.path.write_text("garbage", encoding="utf-8")
        ledger = MetadataLedger(repository, clock=lambda: fixed_now)

        ledger.record_creation("Clip.mp4")

        assert repository.load().entries == {"Clip.mp4": fixed_now}


class TestTimestamps:

    def test_naive_timestamps_are_utc(self):
        assert parse_timestamp("2024-01-15T12:00:00") == datetime(2024, 1, 15, 12, tzinfo=timezone.utc)

    def test_offsets_are_normalized(self):
        value = parse_timestamp("2024-01-15T14:00:00+02:00")

        assert format_timestamp(value) == "2024-01-15T12:00:00.000Z"
