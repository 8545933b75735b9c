from __future__ import annotations

import logging

from facility_rotation.sim.config import RotationConfig
from facility_rotation.sim.facility import Facility
from facility_rotation.sim.schedule import expected_boundary, next_boundary

logger = logging.getLogger(__name__)


class RotationScheduler:
    """Decides when a facility rotates and which tick a preview reads from."""

    def __init__(self, config: RotationConfig | None = None) -> None:
        self.config = config if config is not None else RotationConfig()

    @property
    def interval_ticks(self) -> int:
        return self.config.interval_ticks

    def expected_boundary(self, facility: Facility, now: int) -> int:
        return expected_boundary(facility.facility_id, now, self.interval_ticks)

    def is_rotation_due(self, facility: Facility, now: int) -> bool:
        if facility.never_generated:
            return False
        stored = facility.rotation_timestamp
        if now < stored:
            logger.warning(
                "clock regression for facility %s: now=%s is before rotation_timestamp=%s; treating rotation as not due",
                facility.facility_id,
                now,
                stored,
            )
            return False
        return now - stored >= self.interval_ticks

    def preview_tick(self, facility: Facility, now: int) -> int:
        if facility.never_generated:
            return self.expected_boundary(facility, now)
        return facility.rotation_timestamp

    def next_rotation_tick(self, facility: Facility, now: int) -> int:
        if facility.never_generated:
            return next_boundary(facility.facility_id, now, self.interval_ticks)
        return facility.rotation_timestamp + self.interval_ticks

    def ticks_until_rotation(self, facility: Facility, now: int) -> int:
        return max(self.next_rotation_tick(facility, now) - now, 0)

    def needs_regeneration(self, facility: Facility, now: int) -> bool:
        if facility.never_generated:
            return facility.visiting
        if facility.visiting:
            return False
        return self.is_rotation_due(facility, now)
