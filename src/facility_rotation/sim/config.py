from __future__ import annotations

from dataclasses import dataclass
from typing import Any

TICKS_PER_DAY = 60_000
MIN_INTERVAL_DAYS = 5
MAX_INTERVAL_DAYS = 30
INTERVAL_DAYS_STEP = 5
DEFAULT_INTERVAL_DAYS = 15


@dataclass(frozen=True)
class RotationConfig:
    interval_ticks: int = DEFAULT_INTERVAL_DAYS * TICKS_PER_DAY
    ticks_per_day: int = TICKS_PER_DAY

    def __post_init__(self) -> None:
        if isinstance(self.interval_ticks, bool) or not isinstance(self.interval_ticks, int) or self.interval_ticks <= 0:
            raise ValueError("rotation.interval_ticks must be an integer > 0")
        if isinstance(self.ticks_per_day, bool) or not isinstance(self.ticks_per_day, int) or self.ticks_per_day <= 0:
            raise ValueError("rotation.ticks_per_day must be an integer > 0")

    @property
    def interval_days(self) -> float:
        return self.interval_ticks / self.ticks_per_day

    @classmethod
    def from_days(cls, days: int, *, ticks_per_day: int = TICKS_PER_DAY) -> "RotationConfig":
        if isinstance(days, bool) or not isinstance(days, int):
            raise ValueError("rotation interval days must be an integer")
        if days < MIN_INTERVAL_DAYS or days > MAX_INTERVAL_DAYS:
            raise ValueError(
                f"rotation interval days must be within [{MIN_INTERVAL_DAYS}, {MAX_INTERVAL_DAYS}]; got {days}"
            )
        if days % INTERVAL_DAYS_STEP != 0:
            raise ValueError(f"rotation interval days must be a multiple of {INTERVAL_DAYS_STEP}; got {days}")
        return cls(interval_ticks=days * ticks_per_day, ticks_per_day=ticks_per_day)

    def to_dict(self) -> dict[str, int]:
        return {
            "interval_ticks": self.interval_ticks,
            "ticks_per_day": self.ticks_per_day,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any] | None) -> "RotationConfig":
        if payload is None:
            return cls()
        if not isinstance(payload, dict):
            raise ValueError("rotation settings must be an object")
        ticks_per_day = _require_positive_int(payload.get("ticks_per_day", TICKS_PER_DAY), field_name="ticks_per_day")
        if "interval_days" in payload:
            if "interval_ticks" in payload:
                raise ValueError("rotation settings must not contain both interval_days and interval_ticks")
            return cls.from_days(payload["interval_days"], ticks_per_day=ticks_per_day)
        return cls(
            interval_ticks=_require_positive_int(
                payload.get("interval_ticks", DEFAULT_INTERVAL_DAYS * ticks_per_day),
                field_name="interval_ticks",
            ),
            ticks_per_day=ticks_per_day,
        )


def _require_positive_int(value: Any, *, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError(f"rotation.{field_name} must be an integer > 0")
    return value
