from __future__ import annotations

import json
import os
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any

from facility_rotation.sim.config import RotationConfig
from facility_rotation.sim.facility import FacilityRegistry
from facility_rotation.sim.hash import roster_hash

SCHEMA_VERSION = 1
CANONICAL_JSON_INDENT = 2
CANONICAL_JSON_SEPARATORS = (",", ": ")


def _canonical_json(payload: dict[str, Any]) -> str:
    return json.dumps(
        payload,
        indent=CANONICAL_JSON_INDENT,
        separators=CANONICAL_JSON_SEPARATORS,
        sort_keys=True,
    )


def _write_atomic_json(path: str | Path, payload: dict[str, Any]) -> None:
    destination = Path(path)
    destination.parent.mkdir(parents=True, exist_ok=True)
    serialized = _canonical_json(payload)

    temp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=destination.parent,
            delete=False,
            suffix=".tmp",
        ) as temp_file:
            temp_file.write(serialized)
            temp_file.flush()
            os.fsync(temp_file.fileno())
            temp_path = Path(temp_file.name)
        os.replace(temp_path, destination)
    except Exception:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)
        raise


def _require_schema_version(payload: Any, *, kind: str) -> None:
    if not isinstance(payload, dict):
        raise ValueError(f"{kind} payload must be an object")
    schema_version = payload.get("schema_version")
    if not isinstance(schema_version, int):
        raise ValueError(f"{kind} must contain integer field: schema_version")
    if schema_version != SCHEMA_VERSION:
        raise ValueError(f"unsupported {kind} schema_version: {schema_version}")


def build_roster_payload(registry: FacilityRegistry, tick: int) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "schema_version": SCHEMA_VERSION,
        "tick": tick,
        "registry": registry.to_dict(),
    }
    payload["roster_hash"] = roster_hash(payload)
    return payload


def validate_roster_payload(payload: dict[str, Any]) -> None:
    _require_schema_version(payload, kind="roster")
    tick = payload.get("tick")
    if isinstance(tick, bool) or not isinstance(tick, int) or tick < 0:
        raise ValueError("roster must contain non-negative integer field: tick")
    if not isinstance(payload.get("registry"), dict):
        raise ValueError("roster must contain object field: registry")
    stored_hash = payload.get("roster_hash")
    if not isinstance(stored_hash, str) or not stored_hash:
        raise ValueError("roster must contain non-empty string field: roster_hash")
    actual_hash = roster_hash(payload)
    if stored_hash != actual_hash:
        raise ValueError(f"roster_hash mismatch while loading roster (stored={stored_hash}, recomputed={actual_hash})")


def save_roster_json(path: str | Path, registry: FacilityRegistry, tick: int) -> None:
    payload = build_roster_payload(registry, tick)
    validate_roster_payload(payload)
    _write_atomic_json(path, payload)


def load_roster_json(path: str | Path) -> tuple[FacilityRegistry, int]:
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    validate_roster_payload(payload)
    return FacilityRegistry.from_dict(payload["registry"]), int(payload["tick"])


def save_rotation_settings_json(path: str | Path, config: RotationConfig) -> None:
    _write_atomic_json(path, {"schema_version": SCHEMA_VERSION, "rotation": config.to_dict()})


def load_rotation_settings_json(path: str | Path) -> RotationConfig:
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    _require_schema_version(payload, kind="rotation settings")
    return RotationConfig.from_dict(payload.get("rotation"))
