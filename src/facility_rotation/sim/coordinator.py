from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum

from facility_rotation.content.catalogs import SelectionContext, Variant
from facility_rotation.sim.errors import AlreadyRegeneratingError, NotRegeneratingError
from facility_rotation.sim.facility import Facility
from facility_rotation.sim.scheduler import RotationScheduler
from facility_rotation.sim.selection import select_for_tick

logger = logging.getLogger(__name__)

RegenerateOperation = Callable[[Facility], None]
ContextProvider = Callable[[Facility], SelectionContext]

DEFAULT_SELECTION_CONTEXT = SelectionContext()


class CoordinationPhase(Enum):
    IDLE = "idle"
    FIRST_TIME_ALIGNING = "first_time_aligning"
    ROTATING = "rotating"


@dataclass
class CoordinationState:
    phase: CoordinationPhase
    saved_timestamp: int
    begin_tick: int
    query_count: int = 0


class RegenerationCoordinator:
    """Keeps variant queries consistent across an opaque regenerate operation.

    A span runs ``begin`` -> external operation -> ``commit`` for one facility.
    The external operation may call ``query_during_regeneration`` any number of
    times and is expected to write ``facility.rotation_timestamp = now`` once.

    * Rotating (facility generated before): queries inside the span use ``now``,
      the value the operation is about to commit, so they agree with every
      query made after the commit.
    * First-time aligning (never generated): ``begin`` pre-seeds the timestamp
      with the facility's virtual boundary, queries use that boundary, and
      ``commit`` restores it over whatever the operation wrote. The variant
      therefore matches the preview shown before the first visit and the
      facility stays on its desynchronized schedule.

    Span state lives on the coordinator instance, keyed by facility id.
    """

    def __init__(
        self,
        scheduler: RotationScheduler,
        variants: Sequence[Variant],
        *,
        context_provider: ContextProvider | None = None,
    ) -> None:
        self.scheduler = scheduler
        self._variants: tuple[Variant, ...] = tuple(variants)
        self._context_provider = context_provider
        self._states: dict[int, CoordinationState] = {}
        self._variant_cache: dict[int, tuple[int, SelectionContext, Variant]] = {}

    @property
    def variants(self) -> tuple[Variant, ...]:
        return self._variants

    def replace_catalog(self, variants: Sequence[Variant]) -> None:
        self._variants = tuple(variants)
        self._variant_cache.clear()

    def evict(self, facility_id: int) -> None:
        self._variant_cache.pop(facility_id, None)

    def phase_of(self, facility: Facility) -> CoordinationPhase:
        state = self._states.get(facility.facility_id)
        return CoordinationPhase.IDLE if state is None else state.phase

    def is_idle(self, facility: Facility) -> bool:
        return facility.facility_id not in self._states

    def begin(self, facility: Facility, now: int) -> CoordinationPhase:
        facility_id = facility.facility_id
        active = self._states.get(facility_id)
        if active is not None:
            raise AlreadyRegeneratingError(
                facility_id,
                f"facility {facility_id} is already regenerating (phase={active.phase.value})",
            )

        if facility.never_generated:
            facility.rotation_timestamp = self.scheduler.expected_boundary(facility, now)
            phase = CoordinationPhase.FIRST_TIME_ALIGNING
        else:
            if now < facility.rotation_timestamp:
                logger.warning(
                    "clock regression for facility %s: regenerating at now=%s before rotation_timestamp=%s",
                    facility_id,
                    now,
                    facility.rotation_timestamp,
                )
            phase = CoordinationPhase.ROTATING

        self._states[facility_id] = CoordinationState(
            phase=phase,
            saved_timestamp=facility.rotation_timestamp,
            begin_tick=now,
        )
        logger.debug(
            "begin regeneration facility=%s phase=%s saved_timestamp=%s now=%s",
            facility_id,
            phase.value,
            facility.rotation_timestamp,
            now,
        )
        return phase

    def query_during_regeneration(self, facility: Facility, now: int) -> Variant:
        state = self._states.get(facility.facility_id)
        if state is None:
            raise NotRegeneratingError(
                facility.facility_id,
                f"facility {facility.facility_id} has no active regeneration span",
            )
        state.query_count += 1
        return self._select(facility, self._effective_tick(state, now))

    def commit(self, facility: Facility) -> None:
        facility_id = facility.facility_id
        # Popped before anything else so the facility is idle on every exit path.
        state = self._states.pop(facility_id, None)
        if state is None:
            raise NotRegeneratingError(facility_id, f"commit without begin for facility {facility_id}")

        written = facility.rotation_timestamp
        if state.phase is CoordinationPhase.FIRST_TIME_ALIGNING:
            facility.rotation_timestamp = state.saved_timestamp
            logger.info(
                "first generation facility=%s aligned rotation_timestamp=%s (operation wrote %s)",
                facility_id,
                state.saved_timestamp,
                written,
            )
        elif written < state.saved_timestamp:
            logger.warning(
                "clock regression for facility %s: operation wrote rotation_timestamp=%s below %s; keeping %s",
                facility_id,
                written,
                state.saved_timestamp,
                state.saved_timestamp,
            )
            facility.rotation_timestamp = state.saved_timestamp
        elif written == state.saved_timestamp and state.begin_tick != state.saved_timestamp:
            logger.warning(
                "regenerate operation for facility %s did not write rotation_timestamp (still %s, began at %s)",
                facility_id,
                written,
                state.begin_tick,
            )
        else:
            logger.info(
                "rotation facility=%s rotation_timestamp %s -> %s",
                facility_id,
                state.saved_timestamp,
                written,
            )

        if state.query_count == 0:
            logger.debug("facility %s committed without any variant query", facility_id)

    def query_outside_regeneration(self, facility: Facility, now: int) -> Variant:
        state = self._states.get(facility.facility_id)
        if state is not None:
            # The field is mid-mutation; answer with the span's own tick.
            return self._select(facility, self._effective_tick(state, now))
        return self._select(facility, self.scheduler.preview_tick(facility, now))

    def regenerate(self, facility: Facility, now: int, operation: RegenerateOperation) -> Variant:
        with self.span(facility, now):
            operation(facility)
        return self.query_outside_regeneration(facility, now)

    @contextmanager
    def span(self, facility: Facility, now: int) -> Iterator[CoordinationPhase]:
        phase = self.begin(facility, now)
        try:
            yield phase
        finally:
            self.commit(facility)

    def _effective_tick(self, state: CoordinationState, now: int) -> int:
        if state.phase is CoordinationPhase.ROTATING:
            # commit clamps a regressed write back to saved_timestamp.
            return max(now, state.saved_timestamp)
        return state.saved_timestamp

    def _context_for(self, facility: Facility) -> SelectionContext:
        if self._context_provider is None:
            return DEFAULT_SELECTION_CONTEXT
        return self._context_provider(facility)

    def _select(self, facility: Facility, effective_tick: int) -> Variant:
        context = self._context_for(facility)
        cached = self._variant_cache.get(facility.facility_id)
        if cached is not None and cached[0] == effective_tick and cached[1] == context:
            return cached[2]
        variant = select_for_tick(facility.facility_id, effective_tick, self._variants, context)
        self._variant_cache[facility.facility_id] = (effective_tick, context, variant)
        return variant
