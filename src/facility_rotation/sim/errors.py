from __future__ import annotations


class RotationError(Exception):
    """Base class for rotation core failures."""


class EmptyCatalogError(RotationError):
    """No variant has a positive weight in the requested context."""


class CoordinationError(RotationError):
    """Begin/query/commit were called out of order for a facility."""

    def __init__(self, facility_id: int, message: str) -> None:
        super().__init__(message)
        self.facility_id = facility_id


class AlreadyRegeneratingError(CoordinationError):
    pass


class NotRegeneratingError(CoordinationError):
    pass
