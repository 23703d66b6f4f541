"""Typed service errors, mapped to HTTP responses in app.main."""


class ServiceError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ServiceError):
    """Referenced session, profile, ticket or user does not exist."""

    status_code = 404


class ForbiddenError(ServiceError):
    """Actor is not allowed to perform the action on this resource."""

    status_code = 403


class BadRequestError(ServiceError):
    """A guard was violated (window, conflict, wrong status, duplicate...)."""

    status_code = 400
