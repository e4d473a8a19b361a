"""Error taxonomy for regulation operations.

Validation and transition errors are raised before any store call, so a
failed operation never leaves a partial write behind.
"""


class RegulationError(Exception):
    status_code = 400

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class ValidationError(RegulationError):
    """Missing justification, duplicate specialty or missing required field."""

    status_code = 422


class InvalidTransition(RegulationError):
    """Requested status change (or signal) is not allowed from the current status."""

    status_code = 409


class NotFound(RegulationError):
    status_code = 404


class PermissionDenied(RegulationError):
    status_code = 403


class StoreError(RegulationError):
    """The remote store could not complete the call. Safe to retry by hand."""

    status_code = 503
