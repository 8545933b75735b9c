from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

CATALOG_SCHEMA_VERSION = 1
DEFAULT_CATALOG_PATH = "content/examples/catalogs/orbital_traders.json"


def _is_json_primitive(value: Any) -> bool:
    return value is None or isinstance(value, (bool, int, float, str))


def _normalize_json_value(value: Any, *, field_name: str) -> Any:
    if _is_json_primitive(value):
        return value
    if isinstance(value, list):
        return [_normalize_json_value(item, field_name=field_name) for item in value]
    if isinstance(value, dict):
        normalized: dict[str, Any] = {}
        for key in sorted(value):
            if not isinstance(key, str):
                raise ValueError(f"{field_name} keys must be strings")
            normalized[key] = _normalize_json_value(value[key], field_name=field_name)
        return normalized
    raise ValueError(f"{field_name} must contain only JSON-serializable values")


def _is_number(value: Any) -> bool:
    return not isinstance(value, bool) and isinstance(value, (int, float))


@dataclass(frozen=True)
class SelectionContext:
    population: float = 1.0


@dataclass(frozen=True)
class WeightCurve:
    points: tuple[tuple[float, float], ...]

    def evaluate(self, x: float) -> float:
        if not self.points:
            return 1.0
        first_x, first_y = self.points[0]
        if x <= first_x:
            return first_y
        for (left_x, left_y), (right_x, right_y) in zip(self.points, self.points[1:]):
            if x <= right_x:
                fraction = (x - left_x) / (right_x - left_x)
                return left_y + (right_y - left_y) * fraction
        return self.points[-1][1]


@dataclass(frozen=True)
class Variant:
    variant_id: str
    label: str
    commonality: float
    population_curve: WeightCurve | None = None
    tags: tuple[str, ...] = ()
    payload: dict[str, Any] | None = None

    def weight(self, context: SelectionContext) -> float:
        if self.population_curve is None:
            return self.commonality
        return self.commonality * self.population_curve.evaluate(context.population)


@dataclass(frozen=True)
class VariantCatalog:
    schema_version: int
    catalog_id: str
    description: str | None
    variants: tuple[Variant, ...]

    def by_id(self) -> dict[str, Variant]:
        return {variant.variant_id: variant for variant in self.variants}

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "VariantCatalog":
        validate_catalog_payload(payload)
        variants: list[Variant] = []
        for index, row in enumerate(payload["variants"]):
            raw_curve = row.get("population_curve")
            curve = None
            if raw_curve is not None:
                curve = WeightCurve(points=tuple(sorted((float(x), float(y)) for x, y in raw_curve)))
            variants.append(
                Variant(
                    variant_id=row["variant_id"],
                    label=row.get("label", row["variant_id"]),
                    commonality=float(row["commonality"]),
                    population_curve=curve,
                    tags=tuple(sorted(dict.fromkeys(row.get("tags", [])))),
                    payload=_normalize_json_value(row.get("payload", {}), field_name=f"variants[{index}].payload"),
                )
            )
        return cls(
            schema_version=int(payload["schema_version"]),
            catalog_id=payload["catalog_id"],
            description=payload.get("description"),
            variants=tuple(variants),
        )


def _validate_curve(raw_curve: Any, *, field_name: str) -> None:
    if not isinstance(raw_curve, list) or not raw_curve:
        raise ValueError(f"{field_name} must be a non-empty list of [x, y] points")
    seen_x: set[float] = set()
    for point_index, point in enumerate(raw_curve):
        if not isinstance(point, list) or len(point) != 2 or not all(_is_number(part) for part in point):
            raise ValueError(f"{field_name}[{point_index}] must be a [x, y] pair of numbers")
        x, y = point
        if y < 0:
            raise ValueError(f"{field_name}[{point_index}] y must be >= 0")
        if float(x) in seen_x:
            raise ValueError(f"{field_name} contains duplicate x: {x}")
        seen_x.add(float(x))


def validate_catalog_payload(payload: dict[str, Any]) -> None:
    if not isinstance(payload, dict):
        raise ValueError("variant catalog payload must be an object")

    schema_version = payload.get("schema_version")
    if not isinstance(schema_version, int):
        raise ValueError("variant catalog must contain integer field: schema_version")
    if schema_version != CATALOG_SCHEMA_VERSION:
        raise ValueError(f"unsupported variant catalog schema_version: {schema_version}")

    catalog_id = payload.get("catalog_id")
    if not isinstance(catalog_id, str) or not catalog_id:
        raise ValueError("variant catalog must contain non-empty string field: catalog_id")

    description = payload.get("description")
    if description is not None and not isinstance(description, str):
        raise ValueError("variant catalog field description must be a string when present")

    variants = payload.get("variants")
    if not isinstance(variants, list) or not variants:
        raise ValueError("variant catalog must contain non-empty list field: variants")

    seen_ids: set[str] = set()
    for index, row in enumerate(variants):
        if not isinstance(row, dict):
            raise ValueError(f"variants[{index}] must be an object")

        variant_id = row.get("variant_id")
        if not isinstance(variant_id, str) or not variant_id:
            raise ValueError(f"variants[{index}] must contain non-empty string field: variant_id")
        if variant_id in seen_ids:
            raise ValueError(f"duplicate variant_id: {variant_id}")
        seen_ids.add(variant_id)

        label = row.get("label")
        if label is not None and (not isinstance(label, str) or not label):
            raise ValueError(f"variants[{index}] field label must be a non-empty string when present")

        commonality = row.get("commonality")
        if not _is_number(commonality) or commonality < 0:
            raise ValueError(f"variants[{index}] must contain numeric commonality >= 0")

        if row.get("population_curve") is not None:
            _validate_curve(row["population_curve"], field_name=f"variants[{index}].population_curve")

        tags = row.get("tags", [])
        if not isinstance(tags, list):
            raise ValueError(f"variants[{index}] field tags must be a list when present")
        for tag_index, tag in enumerate(tags):
            if not isinstance(tag, str) or not tag:
                raise ValueError(f"variants[{index}].tags[{tag_index}] must be a non-empty string")

        payload_value = row.get("payload", {})
        if not isinstance(payload_value, dict):
            raise ValueError(f"variants[{index}] field payload must be an object when present")
        _normalize_json_value(payload_value, field_name=f"variants[{index}].payload")


def load_catalog_json(path: str | Path) -> VariantCatalog:
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    return VariantCatalog.from_payload(payload)
