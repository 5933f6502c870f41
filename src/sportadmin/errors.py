"""Error taxonomy shared by the store, the services and the API layer."""

from __future__ import annotations


class SportAdminError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code = 500
    public_message = "Unexpected server error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message


class ValidationError(SportAdminError):
    """Missing or malformed input the caller can correct."""

    status_code = 400
    public_message = "Invalid request"


class NotFoundError(SportAdminError):
    """A referenced record does not exist."""

    status_code = 404
    public_message = "Record not found"


class UpstreamError(SportAdminError):
    """The media host rejected or failed an upload."""

    status_code = 500
    public_message = "Image upload failed. Please try again."


class UnexpectedError(SportAdminError):
    """Any failure the other classes do not describe."""

    status_code = 500
    public_message = "Server error"
