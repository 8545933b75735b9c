from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from facility_rotation.content.catalogs import Variant
from facility_rotation.sim.clock import Clock
from facility_rotation.sim.coordinator import RegenerationCoordinator
from facility_rotation.sim.facility import Facility

logger = logging.getLogger(__name__)

MaterializeCallback = Callable[[Facility, Variant], None]


class RotationHost:
    """Drives the coordinator from a host clock.

    Owns the default regenerate operation: query the chosen variant, hand it to
    the content layer's ``materialize`` callback, then stamp the facility with
    the current tick.
    """

    def __init__(
        self,
        *,
        clock: Clock,
        coordinator: RegenerationCoordinator,
        materialize: MaterializeCallback | None = None,
    ) -> None:
        self.clock = clock
        self.coordinator = coordinator
        self.scheduler = coordinator.scheduler
        self._materialize = materialize

    def preview(self, facility: Facility) -> Variant:
        return self.coordinator.query_outside_regeneration(facility, self.clock.now())

    def regenerate(self, facility: Facility) -> Variant:
        now = self.clock.now()
        return self.coordinator.regenerate(facility, now, self._build_operation(now))

    def visit(self, facility: Facility) -> Variant:
        facility.visiting = True
        if self.scheduler.needs_regeneration(facility, self.clock.now()):
            return self.regenerate(facility)
        return self.preview(facility)

    def leave(self, facility: Facility) -> None:
        facility.visiting = False

    def rotate_due(self, facilities: Iterable[Facility]) -> list[tuple[Facility, Variant]]:
        now = self.clock.now()
        rotated: list[tuple[Facility, Variant]] = []
        for facility in sorted(facilities, key=lambda current: current.facility_id):
            if facility.never_generated or not self.scheduler.needs_regeneration(facility, now):
                continue
            rotated.append((facility, self.regenerate(facility)))
        return rotated

    def describe(self, facility: Facility) -> str:
        variant = self.preview(facility)
        text = f"Docked vessel: {variant.label}"
        if facility.visiting:
            # Rotation is paused while the map is loaded.
            return text
        now = self.clock.now()
        days = self.scheduler.ticks_until_rotation(facility, now) / self.scheduler.config.ticks_per_day
        return f"{text} (departs in {days:.1f} days)"

    def _build_operation(self, now: int) -> Callable[[Facility], None]:
        def _regenerate_contents(facility: Facility) -> None:
            variant = self.coordinator.query_during_regeneration(facility, now)
            if self._materialize is not None:
                self._materialize(facility, variant)
            facility.rotation_timestamp = self.clock.now()
            logger.debug("regenerated facility=%s variant=%s", facility.facility_id, variant.variant_id)

        return _regenerate_contents
