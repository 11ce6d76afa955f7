"""Failure outcomes of batch operations and the primary file resolver."""


class BatchError(Exception):
    """Base class; `reason` is a stable code the request layer maps to a response."""
    reason = "error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.reason)
        self.message = message or self.reason


class Unauthorized(BatchError):
    reason = "unauthorized"


class BadRequest(BatchError):
    reason = "bad-request"


class NotFound(BatchError):
    reason = "not-found"


class SaveFailed(BatchError):
    reason = "save-failed"


class FeatureDisabled(BatchError):
    reason = "feature-disabled"


class NoEligibleFile(Exception):
    """The photo has no present file that may become its primary file."""
