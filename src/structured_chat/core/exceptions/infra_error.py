from structured_chat.core.exceptions.domain_error import DomainError


class InfraError(DomainError):
    """
    Base class for infrastructure failures (transport, serialization).
    """
    pass
