from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

NEVER_GENERATED = -1
FIRST_FACILITY_ID = 1


def _require_facility_id(value: Any, *, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{field_name} must be an integer")
    if value < 0:
        raise ValueError(f"{field_name} must be >= 0")
    return value


def _require_timestamp(value: Any, *, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{field_name} must be an integer")
    if value < NEVER_GENERATED:
        raise ValueError(f"{field_name} must be >= 0 or the never-generated sentinel ({NEVER_GENERATED})")
    return value


@dataclass
class Facility:
    """A long-lived site owning one rotating variant assignment.

    ``rotation_timestamp`` is the only field the rotation core reads or writes.
    ``visiting`` mirrors whether the host currently has the facility's map
    loaded; rotations are held back while it is set.
    """

    facility_id: int
    label: str = ""
    rotation_timestamp: int = NEVER_GENERATED
    visiting: bool = False

    def __post_init__(self) -> None:
        _require_facility_id(self.facility_id, field_name="facility.facility_id")
        _require_timestamp(self.rotation_timestamp, field_name="facility.rotation_timestamp")
        if not isinstance(self.label, str):
            raise ValueError("facility.label must be a string")

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "facility_id" and "facility_id" in self.__dict__:
            raise AttributeError("facility_id is immutable once assigned")
        super().__setattr__(name, value)

    @property
    def never_generated(self) -> bool:
        return self.rotation_timestamp == NEVER_GENERATED

    def to_dict(self) -> dict[str, Any]:
        return {
            "facility_id": self.facility_id,
            "label": self.label,
            "rotation_timestamp": self.rotation_timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Facility":
        if not isinstance(data, dict):
            raise ValueError("facility must be an object")
        if "facility_id" not in data:
            raise ValueError("facility missing required field: facility_id")
        return cls(
            facility_id=data["facility_id"],
            label=str(data.get("label", "")),
            rotation_timestamp=data.get("rotation_timestamp", NEVER_GENERATED),
        )


@dataclass
class FacilityRegistry:
    next_facility_id: int = FIRST_FACILITY_ID
    facilities: dict[int, Facility] = field(default_factory=dict)

    def __post_init__(self) -> None:
        _require_facility_id(self.next_facility_id, field_name="registry.next_facility_id")
        for facility_id, facility in self.facilities.items():
            if facility_id != facility.facility_id:
                raise ValueError(f"registry key {facility_id} does not match facility_id {facility.facility_id}")
            if facility_id >= self.next_facility_id:
                raise ValueError(
                    f"facility_id {facility_id} must be lower than registry.next_facility_id {self.next_facility_id}"
                )

    def create(self, label: str = "") -> Facility:
        facility = Facility(facility_id=self.next_facility_id, label=label)
        self.next_facility_id += 1
        self.facilities[facility.facility_id] = facility
        return facility

    def get(self, facility_id: int) -> Facility | None:
        return self.facilities.get(facility_id)

    def remove(self, facility_id: int) -> Facility | None:
        # The id counter never rewinds, so removed ids stay retired.
        return self.facilities.pop(facility_id, None)

    def ordered(self) -> list[Facility]:
        return [self.facilities[facility_id] for facility_id in sorted(self.facilities)]

    def to_dict(self) -> dict[str, Any]:
        return {
            "next_facility_id": self.next_facility_id,
            "facilities": [facility.to_dict() for facility in self.ordered()],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FacilityRegistry":
        if not isinstance(data, dict):
            raise ValueError("facility registry must be an object")
        rows = data.get("facilities", [])
        if not isinstance(rows, list):
            raise ValueError("facility registry field facilities must be a list")
        facilities: dict[int, Facility] = {}
        for index, row in enumerate(rows):
            if not isinstance(row, dict):
                raise ValueError(f"facilities[{index}] must be an object")
            facility = Facility.from_dict(row)
            if facility.facility_id in facilities:
                raise ValueError(f"duplicate facility_id: {facility.facility_id}")
            facilities[facility.facility_id] = facility
        default_next = max(facilities, default=FIRST_FACILITY_ID - 1) + 1
        return cls(
            next_facility_id=data.get("next_facility_id", default_next),
            facilities=facilities,
        )
