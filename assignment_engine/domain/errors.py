"""Typed failures raised by the assignment engine.

Callers map these to transport-level responses; nothing in the domain or
application layers knows about HTTP.
"""


class EngineError(Exception):
    """Base class for every failure the engine reports to its callers."""


class PermissionDenied(EngineError):
    """The acting user is unknown, inactive, or lacks the required role."""


class InvalidAssignee(EngineError):
    """The target assignee is missing, inactive, or has the wrong role."""


class NotFound(EngineError):
    """The entity does not exist, or is not visible to the caller."""


class TargetUserInactive(EngineError):
    """A notification recipient is unknown or inactive."""


class ValidationFailed(EngineError):
    """Input does not satisfy the engine's structural constraints."""


class StorageFailure(EngineError):
    """A storage collaborator failed; the original error is chained."""
