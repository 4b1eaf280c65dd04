"""Service-layer exceptions."""


class EngineError(Exception):
    """Raised when the engine driver is misused."""


class SnapshotError(Exception):
    """Raised when snapshot serialization or restoration fails."""
