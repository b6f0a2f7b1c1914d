"""
Domain exceptions raised by services.

Routes translate these into HTTP errors; services never import FastAPI.
"""


class NotFoundError(LookupError):
    """A requested document does not exist."""


class PermissionDeniedError(Exception):
    """The signed-in user's role or ownership does not allow the action."""


class InvalidTransitionError(ValueError):
    """A status change that the workflow does not allow."""


class VersionConflictError(Exception):
    """The report changed since the client last read it."""

    def __init__(self, report_id: str, expected_version: int, current_version: int):
        self.report_id = report_id
        self.expected_version = expected_version
        self.current_version = current_version
        super().__init__(
            f"Report {report_id} is at version {current_version}, "
            f"expected {expected_version}. Reload and try again."
        )


class MediaUploadError(Exception):
    """The image host rejected or failed the upload."""


class AuthenticationError(Exception):
    """Credentials or ID token could not be verified."""
