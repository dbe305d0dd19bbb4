class UpdateCenterError(Exception):
    """Base class for domain errors raised by the services"""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(UpdateCenterError):
    status_code = 422


class NotFoundError(UpdateCenterError):
    status_code = 404


class ConflictError(UpdateCenterError):
    status_code = 409


class InvalidStateError(UpdateCenterError):
    """Illegal lifecycle transition or edit of a frozen field"""

    status_code = 400
