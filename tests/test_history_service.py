"""Generation gallery tests."""

from __future__ import annotations

import json

from studio.services.history_service import GalleryRecord, GenerationHistoryService


def make_record(number: int) -> GalleryRecord:
    return GalleryRecord(
        prompt=f"prompt {number}",
        image_url=f"https://img/{number}.jpg",
        model="seedream-4",
        created_at=1_700_000_000.0 + number,
    )


def test_records_are_newest_first(tmp_path):
    service = GenerationHistoryService(tmp_path / "history.json")

    service.record(make_record(1))
    service.record(make_record(2))

    listed = service.list()
    assert [record.prompt for record in listed] == ["prompt 2", "prompt 1"]
    assert listed[0].id == "generated_1700000002000"


def test_history_is_capped(tmp_path):
    service = GenerationHistoryService(tmp_path / "history.json", max_items=3)

    for number in range(5):
        service.record(make_record(number))

    listed = service.list(limit=10)
    assert [record.prompt for record in listed] == ["prompt 4", "prompt 3", "prompt 2"]


def test_record_result_keeps_metadata(tmp_path):
    service = GenerationHistoryService(tmp_path / "history.json")

    record = service.record_result(
        "burger",
        "https://img/burger.jpg",
        "seedream-4",
        credits_used=2,
        category="foodfoto",
        resolution="4k",
    )

    stored = service.list()[0]
    assert stored.id == record.id
    assert stored.credits_used == 2
    assert stored.category == "foodfoto"
    assert stored.resolution == "4k"


def test_corrupt_history_is_treated_as_empty(tmp_path):
    path = tmp_path / "history.json"
    path.write_text("[oops", encoding="utf-8")
    service = GenerationHistoryService(path)

    assert service.list() == []
    service.record(make_record(1))
    assert len(service.list()) == 1


def test_clear_removes_file(tmp_path):
    path = tmp_path / "history.json"
    service = GenerationHistoryService(path)
    service.record(make_record(1))

    service.clear()

    assert not path.exists()
    assert service.list() == []


def test_malformed_records_are_skipped(tmp_path):
    path = tmp_path / "history.json"
    path.write_text(
        json.dumps(
            [
                {"prompt": "broken", "created_at": None},
                {"prompt": "bad credits", "created_at": 1.0, "credits_used": "two"},
                "not a record",
                {"prompt": "fine", "image_url": "https://img/ok.jpg", "model": "seedream-4", "created_at": 2.0},
            ]
        ),
        encoding="utf-8",
    )
    service = GenerationHistoryService(path)

    listed = service.list()

    assert [record.prompt for record in listed] == ["fine"]
