"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ValidationError(DomainException):
    """Input is malformed: non-positive billing interval, bad date, non-finite amount"""

    pass


class NotFoundError(DomainException):
    """Referenced agreement or entity does not exist"""

    pass


class ComputationError(DomainException):
    """A report invariant did not hold after aggregation"""

    pass


class AuthorizationError(DomainException):
    """Caller is unauthenticated or lacks the required role"""

    def __init__(self, message: str, status_code: int = 403):
        super().__init__(message)
        self.status_code = status_code


class ConflictError(DomainException):
    """Entity cannot be removed while other records still reference it"""

    pass
