import pytest
from pathlib import Path
from datetime import datetime

from image_sorter.organization.dedupe import Deduplicator
from image_sorter.organization.sorter import sort_chronologically
from image_sorter.organization.rules import DestinationPlanner
from image_sorter.organization.mover import FileCopier
from image_sorter.exceptions import CopyError
from image_sorter.models import ExtractionResult
from image_sorter.store import RecordStore


# --- Record Store ---

def test_store_preserves_order_and_rejects_repeated_paths(make_record):
    a = make_record("a.jpg", datetime(2020, 1, 1))
    b = make_record("b.jpg")
    store = RecordStore([ExtractionResult(a), ExtractionResult(b)])

    assert list(store) == [a, b]
    assert store.dated() == [a]
    assert store.undated() == [b]

    with pytest.raises(ValueError):
        store.add(ExtractionResult(make_record("a.jpg")))
    assert len(store) == 2


# --- Deduplicator ---

def test_dedupe_keeps_earliest_of_same_name_and_size(make_record):
    late = make_record("photo.jpg", datetime(2021, 5, 1), folder="/src/a")
    early = make_record("photo.jpg", datetime(2020, 5, 1), folder="/src/b")
    other = make_record("other.jpg", datetime(2022, 1, 1))

    result = Deduplicator().dedupe([late, other, early])

    assert result.kept == [early, other]
    assert len(result.discarded) == 1
    assert result.discarded[0].discarded is late
    assert result.discarded[0].kept is early


def test_dedupe_tie_keeps_first_seen(make_record):
    dt = datetime(2020, 1, 1)
    first = make_record("photo.jpg", dt, folder="/src/a")
    second = make_record("photo.jpg", dt, folder="/src/b")

    result = Deduplicator().dedupe([first, second])

    assert result.kept == [first]
    assert result.discarded[0].discarded is second


def test_dedupe_requires_same_size(make_record):
    a = make_record("photo.jpg", datetime(2020, 1, 1), size=100, folder="/src/a")
    b = make_record("photo.jpg", datetime(2020, 1, 1), size=101, folder="/src/b")
    c = make_record("photo.jpg", datetime(2020, 1, 1), size=None, folder="/src/c")
    d = make_record("photo.jpg", datetime(2020, 1, 1), size=None, folder="/src/d")

    result = Deduplicator().dedupe([a, b, c, d])

    assert result.kept == [a, b, c, d]
    assert result.discarded == []


def test_dedupe_reports_final_winner(make_record):
    a = make_record("p.jpg", datetime(2022, 1, 1), folder="/1")
    b = make_record("p.jpg", datetime(2021, 1, 1), folder="/2")
    c = make_record("p.jpg", datetime(2020, 1, 1), folder="/3")

    result = Deduplicator().dedupe([a, b, c])

    assert result.kept == [c]
    assert {m.discarded.source_path for m in result.discarded} == {Path("/1/p.jpg"), Path("/2/p.jpg")}
    assert all(m.kept is c for m in result.discarded)


def test_dedupe_is_idempotent(make_record):
    records = [
        make_record("x.jpg", datetime(2020, 3, 1), folder="/a"),
        make_record("x.jpg", datetime(2020, 2, 1), folder="/b"),
        make_record("y.jpg", datetime(2020, 1, 1), folder="/a"),
        make_record("y.jpg", datetime(2020, 1, 1), size=5, folder="/b"),
    ]
    dedup = Deduplicator()

    once = dedup.dedupe(records).kept
    twice = dedup.dedupe(once)

    assert twice.kept == once
    assert twice.discarded == []


def test_dedupe_does_not_mutate_input(make_record):
    records = [
        make_record("x.jpg", datetime(2020, 3, 1), folder="/a"),
        make_record("x.jpg", datetime(2020, 2, 1), folder="/b"),
    ]
    snapshot = list(records)

    Deduplicator().dedupe(records)

    assert records == snapshot


# --- Sorter ---

def test_sort_is_chronological_and_stable(make_record):
    same = datetime(2020, 6, 1)
    r1 = make_record("first.jpg", same)
    r2 = make_record("old.jpg", datetime(2019, 1, 1))
    r3 = make_record("second.jpg", same)
    r4 = make_record("third.jpg", same)

    ordered = sort_chronologically([r1, r2, r3, r4])

    assert [r.file_name for r in ordered] == ["old.jpg", "first.jpg", "second.jpg", "third.jpg"]


def test_sort_rejects_undated(make_record):
    with pytest.raises(ValueError):
        sort_chronologically([make_record("a.jpg", None)])


# --- Planner ---

def test_plan_uses_year_month_folders(make_record, tmp_path):
    planner = DestinationPlanner(tmp_path)
    rec = make_record("a.jpg", datetime(2021, 3, 9, 12, 0, 0))

    assert planner.plan(rec) == tmp_path / "2021" / "2021-03" / "a.jpg"
    # Planning never creates folders
    assert not (tmp_path / "2021").exists()


def test_plan_stamps_names(make_record, tmp_path):
    planner = DestinationPlanner(tmp_path, stamp_names=True)
    rec = make_record("a.jpg", datetime(2021, 3, 9, 12, 5, 7))

    assert planner.plan(rec).name == "a_2021-03-09_12-05-07.jpg"


def test_plan_disambiguates_collisions_in_order(make_record, tmp_path):
    dt = datetime(2021, 3, 9)
    recs = [make_record("a.jpg", dt, size=s, folder=f"/src/{s}") for s in (1, 2, 3)]

    planned = DestinationPlanner(tmp_path).plan_all(recs)

    assert [dest.name for _, dest in planned] == ["a.jpg", "a_1.jpg", "a_2.jpg"]
    assert [rec for rec, _ in planned] == recs


def test_plan_avoids_existing_files(make_record, tmp_path):
    folder = tmp_path / "2021" / "2021-03"
    folder.mkdir(parents=True)
    (folder / "a.jpg").write_bytes(b"already here")

    dest = DestinationPlanner(tmp_path).plan(make_record("a.jpg", datetime(2021, 3, 9)))

    assert dest == folder / "a_1.jpg"


# --- Copier ---

def test_copier_copies_and_keeps_original(make_record, tmp_path):
    src = tmp_path / "src" / "a.jpg"
    src.parent.mkdir()
    src.write_bytes(b"content")
    rec = make_record("a.jpg", datetime(2020, 1, 1), folder=str(src.parent))
    dest = tmp_path / "out" / "2020" / "2020-01" / "a.jpg"

    outcomes = FileCopier(progress=False).copy_all([(rec, dest)])

    assert outcomes[0].ok
    assert dest.read_bytes() == b"content"
    assert src.exists()


def test_copier_continues_after_failure(make_record, tmp_path):
    good_src = tmp_path / "good.jpg"
    good_src.write_bytes(b"good")
    good = make_record("good.jpg", datetime(2020, 1, 1), folder=str(tmp_path))
    missing = make_record("missing.jpg", datetime(2020, 1, 1), folder=str(tmp_path))
    out = tmp_path / "out"

    outcomes = FileCopier(progress=False).copy_all([
        (missing, out / "missing.jpg"),
        (good, out / "good.jpg"),
    ])

    assert [o.ok for o in outcomes] == [False, True]
    assert isinstance(outcomes[0].error, CopyError)
    assert (out / "good.jpg").read_bytes() == b"good"


def test_copier_dry_run_touches_nothing(make_record, tmp_path):
    src = tmp_path / "a.jpg"
    src.write_bytes(b"x")
    rec = make_record("a.jpg", datetime(2020, 1, 1), folder=str(tmp_path))
    dest = tmp_path / "out" / "a.jpg"

    outcomes = FileCopier(dry_run=True, progress=False).copy_all([(rec, dest)])

    assert outcomes[0].ok
    assert not (tmp_path / "out").exists()
