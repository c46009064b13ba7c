from __future__ import annotations

from structured_chat.core.exceptions.domain_error import DomainError


class InvalidArgumentError(DomainError, ValueError):
    """Raised when a caller passes an argument that violates a precondition.

    Always raised before any request is dispatched.
    """

    def __init__(self, argument: str, message: str) -> None:
        super().__init__(message)
        self.argument = argument
        self.message = message

    def __str__(self) -> str:
        return f"{self.message} (argument: {self.argument})"
