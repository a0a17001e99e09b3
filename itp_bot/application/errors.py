"""Application error taxonomy."""


class ItpBotError(Exception):
    """Base class for errors raised by the application layer."""


class InvalidInputError(ItpBotError, ValueError):
    """User or caller input could not be interpreted."""


class VehicleNotFoundError(ItpBotError, LookupError):
    """A referenced vehicle id does not exist in the catalog."""

    def __init__(self, vehicle_id: str) -> None:
        super().__init__(f"Vehicle not found: {vehicle_id}")
        self.vehicle_id = vehicle_id


class UpstreamFailureError(ItpBotError):
    """A catalog or calculation call failed during a conversation turn."""

    def __init__(self, operation: str, cause: Exception) -> None:
        super().__init__(f"{operation} failed: {cause}")
        self.operation = operation
        self.cause = cause
