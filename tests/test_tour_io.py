import asyncio
import itertools
import json

import pytest

from onboarding.design.theme_resolver import ThemeConfig
from onboarding.errors import ImportCancelledError, ImportFileError, ValidationError
from onboarding.services.event_bus import EventBus, TourEvent
from onboarding.tour.models import Tour
from onboarding.tour.tour_io import (
    MergeMode,
    build_export_document,
    export_to_file,
    import_from_file,
    merge_tours,
    parse_import_text,
    validate_import_data,
)


def _ids():
    counter = itertools.count(1)
    return lambda: f"new-{next(counter)}"


def _tour(name, tour_id):
    return Tour(tour_id=tour_id, tour_name=name)


@pytest.mark.parametrize(
    "data,message",
    [
        ([], "Import data must be a JSON object"),
        ({"tours": {}}, 'Import data must contain a "tours" array'),
        ({"tours": [1]}, "Tour at index 0 is not an object"),
        ({"tours": [{"tourId": "x", "steps": []}]}, 'Tour at index 0 is missing a valid "tourName"'),
        ({"tours": [{"tourName": "A", "steps": []}]}, 'Tour at index 0 is missing a valid "tourId"'),
        ({"tours": [{"tourName": "A", "tourId": "x"}]}, 'Tour "A" is missing a "steps" array'),
    ],
)
def test_validation_reports_first_violation(data, message):
    with pytest.raises(ValidationError) as exc:
        validate_import_data(data)
    assert str(exc.value) == message


def test_validation_order_checks_name_before_id():
    with pytest.raises(ValidationError, match="tourName"):
        validate_import_data({"tours": [{"tourName": 5, "tourId": 7}]})


def test_valid_bundle_parses_tours_and_optional_blocks():
    bundle = validate_import_data(
        {"tours": [{"tourName": "A", "tourId": "x", "steps": []}], "theme": {"preset": "leanGreen"}, "widget": "bad"}
    )
    assert [t.tour_name for t in bundle.tours] == ["A"]
    assert bundle.theme == {"preset": "leanGreen"}
    assert bundle.widget is None


def test_parse_invalid_json():
    with pytest.raises(ValidationError, match="Invalid import file"):
        parse_import_text("{oops")


def test_replace_matching_keeps_existing_id():
    merged = merge_tours([_tour("A", "t0")], [_tour("A", "t1")], MergeMode.REPLACE_MATCHING, id_factory=_ids())
    assert [(t.tour_name, t.tour_id) for t in merged] == [("A", "t0")]


def test_replace_matching_appends_unmatched_with_fresh_ids():
    existing = [_tour("A", "t0"), _tour("B", "t9")]
    imported = [_tour("C", "x1"), _tour("B", "x2"), _tour("D", "x3")]
    merged = merge_tours(existing, imported, "replaceMatching", id_factory=_ids())
    assert [(t.tour_name, t.tour_id) for t in merged] == [
        ("A", "t0"),
        ("B", "t9"),
        ("C", "new-1"),
        ("D", "new-2"),
    ]
    assert len(merged) == len(existing) + 2
    # inputs untouched
    assert existing[1].tour_id == "t9"


def test_replace_all_and_add_modes():
    existing = [_tour("A", "t0")]
    imported = [_tour("A", "x1"), _tour("B", "x2")]
    replaced = merge_tours(existing, imported, "replaceAll", id_factory=_ids())
    assert [(t.tour_name, t.tour_id) for t in replaced] == [("A", "new-1"), ("B", "new-2")]
    added = merge_tours(existing, imported, MergeMode.ADD_TO_EXISTING, id_factory=_ids())
    assert [t.tour_id for t in added] == ["t0", "new-1", "new-2"]


def test_unknown_mode_behaves_as_add(caplog):
    merged = merge_tours([_tour("A", "t0")], [_tour("A", "x1")], "mystery", id_factory=_ids())
    assert [t.tour_id for t in merged] == ["t0", "new-1"]
    assert any("Unknown import mode" in r.message for r in caplog.records)


def test_fresh_ids_are_unique_by_default():
    merged = merge_tours([], [_tour("A", "x"), _tour("A", "x")], "addToExisting")
    assert len({t.tour_id for t in merged}) == 2


def test_export_document_shape(tour_dict):
    theme = ThemeConfig(preset="leanGreen", overrides={"buttonBgColor": {"color": "111111", "index": -1}})
    doc = build_export_document([Tour.from_dict(tour_dict)], theme, {"buttonText": "Help"})
    assert doc["version"] == 1
    assert doc["exportedAt"].endswith("Z")
    assert doc["tours"][0]["tourId"] == "t-1"
    assert doc["theme"] == {"preset": "leanGreen", "buttonBgColor": "#111111"}
    assert doc["widget"] == {"buttonText": "Help"}
    assert build_export_document([])["theme"] == {}


def test_export_then_import_file(tmp_path, tour_dict):
    path = tmp_path / "out" / "tours.json"
    export_to_file(path, [Tour.from_dict(tour_dict)], {"preset": "corporateGold"})
    bus = EventBus()
    got = []
    bus.subscribe(TourEvent.TOURS_IMPORTED, lambda e: got.append(e.payload["count"]))

    async def picker():
        return path

    bundle = asyncio.run(import_from_file(picker, bus=bus))
    assert bundle.tours[0] == Tour.from_dict(tour_dict)
    assert bundle.theme == {"preset": "corporateGold"}
    assert got == [1]


def test_import_cancelled():
    async def picker():
        return None

    with pytest.raises(ImportCancelledError):
        asyncio.run(import_from_file(picker))


def test_import_unreadable_file(tmp_path):
    async def picker():
        return tmp_path / "missing.json"

    with pytest.raises(ImportFileError):
        asyncio.run(import_from_file(picker))


def test_import_invalid_content(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"tours": [{"tourName": "A"}]}), encoding="utf-8")

    async def picker():
        return path

    with pytest.raises(ValidationError) as exc:
        asyncio.run(import_from_file(picker))
    assert str(exc.value) == 'Invalid import file: Tour at index 0 is missing a valid "tourId"'


def test_import_reads_off_the_event_loop(tmp_path, monkeypatch, tour_dict):
    import time

    from onboarding.tour import tour_io

    path = tmp_path / "slow.json"
    path.write_text(json.dumps({"tours": [tour_dict]}), encoding="utf-8")
    window = {}
    ticks = []
    real_read = tour_io._read_text

    def slow_read(p):
        window["start"] = time.monotonic()
        time.sleep(0.2)
        window["end"] = time.monotonic()
        return real_read(p)

    monkeypatch.setattr(tour_io, "_read_text", slow_read)

    async def picker():
        return path

    async def ticker():
        for _ in range(30):
            ticks.append(time.monotonic())
            await asyncio.sleep(0.01)

    async def run():
        bundle, _ = await asyncio.gather(import_from_file(picker), ticker())
        return bundle

    bundle = asyncio.run(run())
    assert len(bundle.tours) == 1
    assert any(window["start"] < t < window["end"] for t in ticks)
