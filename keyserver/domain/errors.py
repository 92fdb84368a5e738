class DomainError(Exception):
    """Base class for all domain-level errors."""

    pass


class InvalidEmail(DomainError):
    """The email address is not syntactically valid."""

    pass


class NotFound(DomainError):
    """Challenge or token is unknown, already consumed, or expired."""

    pass


class VerifyFailed(DomainError):
    """The signature does not match the public key over the challenge."""

    pass


class DeliveryFailed(DomainError):
    """The challenge or token could not be handed to the email relay."""

    pass


class InternalError(DomainError):
    """A backend or encoding failure. Details are logged, never returned."""

    def __init__(self, message: str = "internal error") -> None:
        super().__init__(message)
