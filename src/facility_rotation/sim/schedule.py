from __future__ import annotations

DESYNC_PRIME = 123457
MIN_BOUNDARY_TICK = 0


def _require_interval(interval_ticks: int) -> None:
    if isinstance(interval_ticks, bool) or not isinstance(interval_ticks, int) or interval_ticks <= 0:
        raise ValueError("interval_ticks must be a positive integer")


def desync_offset(facility_id: int, interval_ticks: int) -> int:
    """Per-facility phase shift in ``[0, interval_ticks)`` derived only from identity."""
    _require_interval(interval_ticks)
    return (facility_id * DESYNC_PRIME) % interval_ticks


def _unclamped_boundary(facility_id: int, now: int, interval_ticks: int) -> int:
    offset = desync_offset(facility_id, interval_ticks)
    return ((now + offset) // interval_ticks) * interval_ticks - offset


def expected_boundary(facility_id: int, now: int, interval_ticks: int) -> int:
    """Latest rotation boundary at or before ``now`` on the facility's virtual schedule.

    Boundaries are the ticks ``b`` with ``(b + offset) % interval_ticks == 0``.
    Early in a session the latest such tick can be negative; it is clamped to
    ``MIN_BOUNDARY_TICK`` instead.
    """
    return max(_unclamped_boundary(facility_id, now, interval_ticks), MIN_BOUNDARY_TICK)


def next_boundary(facility_id: int, now: int, interval_ticks: int) -> int:
    """First boundary strictly after ``now``; never affected by the early clamp."""
    return _unclamped_boundary(facility_id, now, interval_ticks) + interval_ticks
