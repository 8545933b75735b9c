import pytest

from facility_rotation.sim.config import (
    DEFAULT_INTERVAL_DAYS,
    TICKS_PER_DAY,
    RotationConfig,
)
from facility_rotation.sim.facility import NEVER_GENERATED, Facility, FacilityRegistry


def test_default_config_is_mid_range() -> None:
    config = RotationConfig()

    assert config.interval_ticks == DEFAULT_INTERVAL_DAYS * TICKS_PER_DAY == 900_000
    assert config.interval_days == 15


def test_from_days_enforces_operator_range() -> None:
    assert RotationConfig.from_days(5).interval_ticks == 300_000
    assert RotationConfig.from_days(30).interval_ticks == 1_800_000

    with pytest.raises(ValueError, match="within"):
        RotationConfig.from_days(0)
    with pytest.raises(ValueError, match="within"):
        RotationConfig.from_days(35)
    with pytest.raises(ValueError, match="multiple of 5"):
        RotationConfig.from_days(12)


def test_config_rejects_non_positive_interval() -> None:
    with pytest.raises(ValueError, match="interval_ticks"):
        RotationConfig(interval_ticks=0)
    with pytest.raises(ValueError, match="ticks_per_day"):
        RotationConfig(interval_ticks=10, ticks_per_day=0)


def test_config_from_dict_accepts_days_or_ticks() -> None:
    assert RotationConfig.from_dict(None) == RotationConfig()
    assert RotationConfig.from_dict({"interval_days": 10}).interval_ticks == 600_000
    assert RotationConfig.from_dict({"interval_ticks": 1000, "ticks_per_day": 100}) == RotationConfig(
        interval_ticks=1000, ticks_per_day=100
    )

    with pytest.raises(ValueError, match="both interval_days and interval_ticks"):
        RotationConfig.from_dict({"interval_days": 10, "interval_ticks": 1000})


def test_config_from_dict_rejects_non_integer_fields() -> None:
    with pytest.raises(ValueError, match="rotation.ticks_per_day must be an integer > 0"):
        RotationConfig.from_dict({"ticks_per_day": "60000"})
    with pytest.raises(ValueError, match="rotation.interval_ticks must be an integer > 0"):
        RotationConfig.from_dict({"interval_ticks": 1.5})
    with pytest.raises(ValueError, match="rotation.interval_ticks must be an integer > 0"):
        RotationConfig.from_dict({"interval_ticks": True})
    with pytest.raises(ValueError, match="days must be an integer"):
        RotationConfig.from_dict({"interval_days": "10"})


def test_facility_defaults_to_never_generated() -> None:
    facility = Facility(facility_id=4, label="outpost")

    assert facility.rotation_timestamp == NEVER_GENERATED
    assert facility.never_generated
    assert not facility.visiting


def test_facility_id_is_immutable() -> None:
    facility = Facility(facility_id=4)

    with pytest.raises(AttributeError, match="immutable"):
        facility.facility_id = 5

    facility.rotation_timestamp = 100
    assert facility.rotation_timestamp == 100


def test_facility_rejects_invalid_timestamp() -> None:
    with pytest.raises(ValueError, match="rotation_timestamp"):
        Facility(facility_id=1, rotation_timestamp=-2)


def test_registry_never_reuses_ids() -> None:
    registry = FacilityRegistry()
    first = registry.create("one")
    second = registry.create("two")

    registry.remove(second.facility_id)
    third = registry.create("three")

    assert [first.facility_id, second.facility_id, third.facility_id] == [1, 2, 3]
    assert [facility.facility_id for facility in registry.ordered()] == [1, 3]


def test_registry_round_trips_through_dict() -> None:
    registry = FacilityRegistry()
    registry.create("one").rotation_timestamp = 1801
    registry.create("two")
    registry.remove(1)

    restored = FacilityRegistry.from_dict(registry.to_dict())

    assert restored.next_facility_id == 3
    assert restored.to_dict() == registry.to_dict()
    assert restored.create("three").facility_id == 3


def test_registry_rejects_duplicate_ids() -> None:
    with pytest.raises(ValueError, match="duplicate facility_id: 1"):
        FacilityRegistry.from_dict(
            {
                "facilities": [
                    {"facility_id": 1, "rotation_timestamp": -1},
                    {"facility_id": 1, "rotation_timestamp": 5},
                ]
            }
        )
