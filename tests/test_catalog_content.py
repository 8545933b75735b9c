from __future__ import annotations

import json
from pathlib import Path

import pytest

from facility_rotation.content.catalogs import (
    DEFAULT_CATALOG_PATH,
    SelectionContext,
    load_catalog_json,
    validate_catalog_payload,
)


def _payload(**overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "schema_version": 1,
        "catalog_id": "test_catalog",
        "variants": [
            {"variant_id": "alpha", "commonality": 1},
            {"variant_id": "beta", "label": "Beta", "commonality": 2.5, "tags": ["z", "a", "z"]},
        ],
    }
    payload.update(overrides)
    return payload


def test_load_default_catalog() -> None:
    catalog = load_catalog_json(DEFAULT_CATALOG_PATH)

    assert catalog.catalog_id == "orbital_traders"
    assert [variant.variant_id for variant in catalog.variants] == [
        "bulk_goods",
        "combat_supplier",
        "exotic_goods",
        "pirate_merchant",
    ]
    combat = catalog.by_id()["combat_supplier"]
    assert combat.label == "Combat supplier"
    assert combat.tags == ("weapons",)
    assert combat.weight(SelectionContext(population=1.0)) == pytest.approx(2.0)
    assert combat.weight(SelectionContext(population=0.5)) == pytest.approx(1.5)
    assert catalog.by_id()["bulk_goods"].tags == ("common", "goods")


def test_catalog_defaults_label_and_normalizes_tags(tmp_path: Path) -> None:
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps(_payload()), encoding="utf-8")

    catalog = load_catalog_json(path)
    by_id = catalog.by_id()

    assert by_id["alpha"].label == "alpha"
    assert by_id["alpha"].payload == {}
    assert by_id["beta"].tags == ("a", "z")
    assert by_id["beta"].commonality == 2.5


def test_catalog_rejects_negative_commonality() -> None:
    with pytest.raises(ValueError, match="commonality >= 0"):
        validate_catalog_payload(_payload(variants=[{"variant_id": "bad", "commonality": -1}]))


def test_catalog_rejects_boolean_commonality() -> None:
    with pytest.raises(ValueError, match="commonality >= 0"):
        validate_catalog_payload(_payload(variants=[{"variant_id": "bad", "commonality": True}]))


def test_catalog_rejects_duplicate_variant_ids() -> None:
    with pytest.raises(ValueError, match="duplicate variant_id: twin"):
        validate_catalog_payload(
            _payload(
                variants=[
                    {"variant_id": "twin", "commonality": 1},
                    {"variant_id": "twin", "commonality": 2},
                ]
            )
        )


def test_catalog_rejects_malformed_population_curve() -> None:
    with pytest.raises(ValueError, match="population_curve"):
        validate_catalog_payload(
            _payload(variants=[{"variant_id": "curved", "commonality": 1, "population_curve": [[0.0]]}])
        )
    with pytest.raises(ValueError, match="duplicate x"):
        validate_catalog_payload(
            _payload(
                variants=[
                    {"variant_id": "curved", "commonality": 1, "population_curve": [[1.0, 1.0], [1.0, 2.0]]}
                ]
            )
        )


def test_catalog_rejects_unknown_schema_version() -> None:
    with pytest.raises(ValueError, match="unsupported variant catalog schema_version: 2"):
        validate_catalog_payload(_payload(schema_version=2))


def test_catalog_requires_variants() -> None:
    with pytest.raises(ValueError, match="non-empty list field: variants"):
        validate_catalog_payload(_payload(variants=[]))
