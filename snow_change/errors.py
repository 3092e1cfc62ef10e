"""Exceptions raised by the change request workflow."""


class ChangeError(Exception):
    """Base exception for change request errors."""
    pass


class ValidationError(ChangeError):
    """A required value for the selected action is missing."""
    pass


class APICallError(ChangeError):
    """The HTTP call to the change API could not be completed."""
    pass


class ParseError(ChangeError):
    """An expected field is absent from an API response."""
    pass


class ChangeRejectedError(ChangeError):
    """The change request was rejected."""
    pass


class ApprovalTimeoutError(ChangeError):
    """Approval did not arrive within the configured timeout."""
    pass
