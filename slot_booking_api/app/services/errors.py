"""
Domain-level errors raised by the services.

Both are ``ValueError`` subclasses so callers that only care about
"the request could not be honoured" can keep catching ``ValueError``;
the HTTP layer uses the subclass to choose between 404 and 409.
Authorization failures use the built-in ``PermissionError``.
"""


class RecordNotFound(ValueError):
    """The referenced user, service or booking does not exist."""


class Conflict(ValueError):
    """The request clashes with existing data (duplicate email, booked slot, ...)."""
