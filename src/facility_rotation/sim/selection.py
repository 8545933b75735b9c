from __future__ import annotations

from collections.abc import Sequence

from facility_rotation.content.catalogs import SelectionContext, Variant
from facility_rotation.sim.errors import EmptyCatalogError
from facility_rotation.sim.rng import combine_seed

# Float draws stay exact while the seed fits in the float mantissa.
_DRAW_MASK = (1 << 53) - 1


def select_variant(seed: int, variants: Sequence[Variant], context: SelectionContext) -> Variant:
    weighted = [(variant, variant.weight(context)) for variant in variants]
    for variant, weight in weighted:
        if weight < 0:
            raise ValueError(f"variant {variant.variant_id!r} produced negative weight {weight}")
    total_weight = sum(weight for _, weight in weighted)
    if total_weight <= 0:
        raise EmptyCatalogError(
            f"no selectable variant among {len(weighted)} candidates (population={context.population})"
        )

    draw = float(seed & _DRAW_MASK) % total_weight
    cumulative = 0.0
    for variant, weight in weighted:
        if weight <= 0:
            continue
        cumulative += weight
        if draw < cumulative:
            return variant
    # Rounding in the running sum can leave draw just past the last bound.
    return next(variant for variant, weight in reversed(weighted) if weight > 0)


def select_for_tick(
    facility_id: int,
    effective_tick: int,
    variants: Sequence[Variant],
    context: SelectionContext,
) -> Variant:
    return select_variant(combine_seed(facility_id, effective_tick), variants, context)
