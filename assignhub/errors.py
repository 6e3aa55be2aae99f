"""
Error taxonomy for AssignHub.

Every service raises one of these; route handlers turn them into a JSON
error body with the matching status code.
"""


class AssignHubError(Exception):
    """Base class for errors that are shown to the user."""

    status_code = 500
    default_message = "Something went wrong. Please try again."

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def to_dict(self):
        return {"error": self.message, "type": self.__class__.__name__}


class ValidationError(AssignHubError):
    """Bad input caught before anything is sent to Supabase."""

    status_code = 400
    default_message = "Invalid input."


class AuthorizationError(AssignHubError):
    """Ownership or role precondition failed. Never retried."""

    status_code = 403
    default_message = "You do not have permission to perform this action."


class NotFoundError(AssignHubError):
    status_code = 404
    default_message = "Not found."


class UploadError(AssignHubError):
    status_code = 502
    default_message = "Upload failed. Please try submitting again."


class DownloadError(AssignHubError):
    status_code = 502
    default_message = "Failed to download file. Please try again or contact support."


class PersistenceError(AssignHubError):
    status_code = 502
    default_message = "Could not save your changes. Please try again."


class ConfigurationError(AssignHubError):
    """Missing bucket, policy or credentials. Retrying will not help."""

    status_code = 500
    default_message = "The service is not properly configured. Please contact support."
