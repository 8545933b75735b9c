from __future__ import annotations

import argparse
import logging
from collections import defaultdict
from typing import Sequence

from facility_rotation.cli.logging_config import DEFAULT_LOG_LEVEL, LOG_LEVELS, setup_logging
from facility_rotation.content.catalogs import DEFAULT_CATALOG_PATH, SelectionContext, load_catalog_json
from facility_rotation.content.io import load_roster_json, load_rotation_settings_json, save_roster_json
from facility_rotation.sim.clock import TickClock
from facility_rotation.sim.config import DEFAULT_INTERVAL_DAYS, RotationConfig
from facility_rotation.sim.coordinator import RegenerationCoordinator
from facility_rotation.sim.facility import Facility, FacilityRegistry
from facility_rotation.sim.hash import registry_hash
from facility_rotation.sim.host import RotationHost
from facility_rotation.sim.scheduler import RotationScheduler

logger = logging.getLogger(__name__)

DEFAULT_FACILITY_COUNT = 3
DEFAULT_STEP_TICKS = 60_000


def _non_negative_int(value: str) -> int:
    parsed = int(value)
    if parsed < 0:
        raise argparse.ArgumentTypeError("value must be >= 0")
    return parsed


def _positive_int(value: str) -> int:
    parsed = int(value)
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be > 0")
    return parsed


def _visit_spec(value: str) -> tuple[int, int]:
    facility_text, separator, tick_text = value.partition(":")
    if not separator:
        raise argparse.ArgumentTypeError("visit must look like FACILITY_ID:TICK")
    try:
        return int(facility_text), int(tick_text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("visit must look like FACILITY_ID:TICK") from exc


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="facility-rotation",
        description=(
            "Deterministic facility rotation inspector. Previews each facility's docked variant, "
            "then steps the clock forward applying first visits and due rotations."
        ),
    )
    parser.add_argument("--catalog", default=DEFAULT_CATALOG_PATH, help="Path to variant catalog JSON")
    parser.add_argument("--settings", help="Path to rotation settings JSON (overrides --interval-days)")
    parser.add_argument(
        "--interval-days",
        type=int,
        default=DEFAULT_INTERVAL_DAYS,
        help="Rotation interval in days when no settings file is given",
    )
    parser.add_argument("--roster", help="Path to roster JSON to load facilities and tick from")
    parser.add_argument(
        "--facilities",
        type=_positive_int,
        default=DEFAULT_FACILITY_COUNT,
        help="Facilities to create when no roster is given",
    )
    parser.add_argument("--start-tick", type=_non_negative_int, default=0, help="Start tick when no roster is given")
    parser.add_argument("--ticks", type=_non_negative_int, default=0, help="Ticks to advance")
    parser.add_argument("--step", type=_positive_int, default=DEFAULT_STEP_TICKS, help="Rotation check cadence in ticks")
    parser.add_argument(
        "--visit",
        type=_visit_spec,
        action="append",
        default=[],
        help="Visit FACILITY_ID at TICK (repeatable)",
    )
    parser.add_argument("--population", type=float, default=1.0, help="Population factor for variant weights")
    parser.add_argument("--dump-roster", help="Optional path to write the roster after advancing")
    parser.add_argument("--log-level", choices=LOG_LEVELS, default=DEFAULT_LOG_LEVEL)
    return parser


def _load_config(args: argparse.Namespace) -> RotationConfig:
    if args.settings:
        return load_rotation_settings_json(args.settings)
    return RotationConfig.from_days(args.interval_days)


def _load_registry(args: argparse.Namespace) -> tuple[FacilityRegistry, int]:
    if args.roster:
        return load_roster_json(args.roster)
    registry = FacilityRegistry()
    for index in range(args.facilities):
        registry.create(label=f"station-{index + 1}")
    return registry, args.start_tick


def _print_facility(kind: str, host: RotationHost, facility: Facility) -> None:
    now = host.clock.now()
    variant = host.preview(facility)
    print(
        f"{kind} "
        f"tick={now} "
        f"facility={facility.facility_id} "
        f"variant={variant.variant_id} "
        f"rotation_timestamp={facility.rotation_timestamp} "
        f"preview_tick={host.scheduler.preview_tick(facility, now)} "
        f"next_rotation={host.scheduler.next_rotation_tick(facility, now)}"
    )


def _checkpoints(start_tick: int, end_tick: int, step: int, visits: dict[int, list[int]]) -> list[int]:
    ticks = set(range(start_tick + step, end_tick + 1, step))
    ticks.update(tick for tick in visits if start_tick <= tick <= end_tick)
    return sorted(ticks)


def _advance(host: RotationHost, registry: FacilityRegistry, *, end_tick: int, step: int, visits: dict[int, list[int]]) -> None:
    clock = host.clock
    for visit_tick in sorted(visits):
        if not clock.now() <= visit_tick <= end_tick:
            raise ValueError(f"visit tick {visit_tick} outside run [{clock.now()}, {end_tick}]")
    for tick in _checkpoints(clock.now(), end_tick, step, visits):
        clock.advance_to(tick)
        for facility_id in sorted(visits.get(tick, [])):
            facility = registry.get(facility_id)
            if facility is None:
                raise ValueError(f"visit references unknown facility_id: {facility_id}")
            host.visit(facility)
            _print_facility("visit", host, facility)
            host.leave(facility)
        for facility, _ in host.rotate_due(registry.ordered()):
            _print_facility("rotation", host, facility)
    clock.advance_to(end_tick)


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    try:
        catalog = load_catalog_json(args.catalog)
        config = _load_config(args)
        registry, start_tick = _load_registry(args)

        context = SelectionContext(population=args.population)
        clock = TickClock(start_tick)
        scheduler = RotationScheduler(config)
        coordinator = RegenerationCoordinator(scheduler, catalog.variants, context_provider=lambda _facility: context)
        host = RotationHost(clock=clock, coordinator=coordinator)

        print(
            "header "
            f"catalog_id={catalog.catalog_id} "
            f"variants={len(catalog.variants)} "
            f"interval_ticks={config.interval_ticks} "
            f"facilities={len(registry.facilities)} "
            f"tick={start_tick}"
        )
        print(f"start_hash={registry_hash(registry)}")
        for facility in registry.ordered():
            _print_facility("preview", host, facility)

        visits: dict[int, list[int]] = defaultdict(list)
        for facility_id, tick in args.visit:
            visits[tick].append(facility_id)
        _advance(host, registry, end_tick=start_tick + args.ticks, step=args.step, visits=visits)

        for facility in registry.ordered():
            print(f"status facility={facility.facility_id} text={host.describe(facility)!r}")
        print(f"end_hash={registry_hash(registry)}")

        if args.dump_roster:
            save_roster_json(args.dump_roster, registry, clock.now())
            print(f"dumped_roster={args.dump_roster}")

    except Exception as exc:
        logger.debug("rotation tool failed", exc_info=True)
        print(f"error: {exc}")
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
