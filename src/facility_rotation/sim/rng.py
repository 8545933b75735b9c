from __future__ import annotations

MASK_64 = (1 << 64) - 1
_GOLDEN_GAMMA = 0x9E3779B97F4A7C15


def _mix64(value: int) -> int:
    # splitmix64 finalizer
    value &= MASK_64
    value = ((value ^ (value >> 30)) * 0xBF58476D1CE4E5B9) & MASK_64
    value = ((value ^ (value >> 27)) * 0x94D049BB133111EB) & MASK_64
    return value ^ (value >> 31)


def combine_seed(facility_id: int, effective_tick: int) -> int:
    """Stable 64-bit selection seed for ``(facility_id, effective_tick)``.

    Not cryptographic; only reproducible across processes and platforms.
    """
    seed = _mix64(facility_id)
    seed ^= (_mix64(effective_tick) + _GOLDEN_GAMMA + ((seed << 6) & MASK_64) + (seed >> 2)) & MASK_64
    return seed & MASK_64
