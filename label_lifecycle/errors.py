"""
Error taxonomy for the lifecycle engine.

Every error carries the HTTP status the routers translate it to. Services
raise these; routers turn them into HTTPException, batch jobs record them
per video.
"""


class LifecycleError(Exception):
    """Base class for all lifecycle engine errors."""

    status_code = 500


class ConfigurationError(LifecycleError):
    """An external service (oracle, storage) is missing credentials or config."""

    status_code = 500


class NotFoundError(LifecycleError):
    """Video or label does not exist."""

    status_code = 404


class ValidationError(LifecycleError):
    """Bad label name or otherwise malformed input."""

    status_code = 400


class DuplicateError(LifecycleError):
    """Unique constraint conflict (label name already used in the organization)."""

    status_code = 409


class PermissionDenied(LifecycleError):
    """Caller may not modify the target video."""

    status_code = 403


class UpstreamError(LifecycleError):
    """Oracle, storage, or transcript service failed."""

    status_code = 502


class ParseError(LifecycleError):
    """Oracle response is not valid for the expected schema."""

    status_code = 502
