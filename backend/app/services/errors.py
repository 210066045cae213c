"""
Engine error kinds.

Every error carries a stable `kind` string so batch results and API
payloads can classify failures without inspecting exception types.
"""


class DeadlineEngineError(Exception):
    """Base class for deadline engine failures."""
    kind = "engine_error"


class InvalidInputError(DeadlineEngineError):
    """Raised when a date is unparsable or outside the accepted range."""
    kind = "invalid_input"


class NotFoundError(DeadlineEngineError):
    """Raised when an application id is unknown."""
    kind = "not_found"


class DeliveryError(DeadlineEngineError):
    """Raised when the notifier could not deliver a message."""
    kind = "delivery_error"


class StoreError(DeadlineEngineError):
    """Raised when the application store cannot be read or written."""
    kind = "store_error"
