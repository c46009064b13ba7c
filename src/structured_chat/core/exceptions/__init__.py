from structured_chat.core.exceptions.domain_error import DomainError
from structured_chat.core.exceptions.infra_error import InfraError
from structured_chat.core.exceptions.invalid_argument_error import InvalidArgumentError
from structured_chat.core.exceptions.transport_error import TransportError

__all__ = ["DomainError", "InfraError", "InvalidArgumentError", "TransportError"]
