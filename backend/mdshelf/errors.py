"""Typed failures raised by the services and mapped to HTTP responses."""


class MdShelfError(Exception):
    """Base class for expected, caller-facing failures."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(MdShelfError):
    """A referenced file or folder does not exist."""

    status_code = 404


class ValidationFailedError(MdShelfError):
    """A required field is missing, empty or malformed."""

    status_code = 400
