from __future__ import annotations

import hashlib
import json
from typing import Any

from facility_rotation.sim.facility import FacilityRegistry


def registry_hash(registry: FacilityRegistry) -> str:
    encoded = json.dumps(registry.to_dict(), sort_keys=True, separators=(",", ":")).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()


def roster_hash(payload: dict[str, Any]) -> str:
    hash_payload = {
        "schema_version": payload["schema_version"],
        "tick": payload["tick"],
        "registry": payload["registry"],
    }
    encoded = json.dumps(hash_payload, sort_keys=True, separators=(",", ":")).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()
