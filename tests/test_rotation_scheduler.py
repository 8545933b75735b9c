import logging

from facility_rotation.sim.config import RotationConfig
from facility_rotation.sim.facility import NEVER_GENERATED, Facility
from facility_rotation.sim.scheduler import RotationScheduler


def _build_scheduler(interval_ticks: int = 1000) -> RotationScheduler:
    return RotationScheduler(RotationConfig(interval_ticks=interval_ticks))


def test_rotation_never_due_before_first_generation() -> None:
    scheduler = _build_scheduler()
    facility = Facility(facility_id=7)

    assert not scheduler.is_rotation_due(facility, 0)
    assert not scheduler.is_rotation_due(facility, 1_000_000)


def test_rotation_due_after_full_interval() -> None:
    scheduler = _build_scheduler()
    facility = Facility(facility_id=7, rotation_timestamp=100)

    assert not scheduler.is_rotation_due(facility, 100)
    assert not scheduler.is_rotation_due(facility, 1099)
    assert scheduler.is_rotation_due(facility, 1100)
    assert scheduler.is_rotation_due(facility, 5000)


def test_clock_regression_is_logged_and_not_due(caplog) -> None:
    scheduler = _build_scheduler()
    facility = Facility(facility_id=7, rotation_timestamp=5000)

    with caplog.at_level(logging.WARNING, logger="facility_rotation.sim.scheduler"):
        assert not scheduler.is_rotation_due(facility, 4000)

    assert "clock regression" in caplog.text
    assert facility.rotation_timestamp == 5000


def test_preview_tick_uses_virtual_boundary_for_unvisited_facility() -> None:
    scheduler = _build_scheduler()
    facility = Facility(facility_id=7)

    assert scheduler.preview_tick(facility, 2300) == 1801
    assert scheduler.preview_tick(facility, 500) == 0
    assert facility.rotation_timestamp == NEVER_GENERATED


def test_preview_tick_uses_stored_timestamp_once_generated() -> None:
    scheduler = _build_scheduler()
    facility = Facility(facility_id=7, rotation_timestamp=2300)

    assert scheduler.preview_tick(facility, 2300) == 2300
    assert scheduler.preview_tick(facility, 9999) == 2300


def test_next_rotation_tick_and_countdown() -> None:
    scheduler = _build_scheduler()
    unvisited = Facility(facility_id=7)
    visited = Facility(facility_id=7, rotation_timestamp=1801)

    assert scheduler.next_rotation_tick(unvisited, 500) == 801
    assert scheduler.next_rotation_tick(visited, 2300) == 2801
    assert scheduler.ticks_until_rotation(visited, 2300) == 501
    assert scheduler.ticks_until_rotation(visited, 4000) == 0


def test_needs_regeneration_honours_visits() -> None:
    scheduler = _build_scheduler()
    unvisited = Facility(facility_id=3)
    assert not scheduler.needs_regeneration(unvisited, 2000)

    unvisited.visiting = True
    assert scheduler.needs_regeneration(unvisited, 2000)

    stale = Facility(facility_id=3, rotation_timestamp=100)
    assert scheduler.needs_regeneration(stale, 2000)

    stale.visiting = True
    assert not scheduler.needs_regeneration(stale, 2000)
