"""Domain errors raised by services and CRUD helpers.

Each carries the HTTP status the API answers with; ``main`` registers one
handler that turns them into ``{"detail": ...}`` responses.
"""


class SocialHubError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(SocialHubError):
    status_code = 404


class ForbiddenError(SocialHubError):
    status_code = 403


class ConflictError(SocialHubError):
    status_code = 409


class InvalidStateError(SocialHubError):
    status_code = 400
