from __future__ import annotations

from dataclasses import dataclass

from structured_chat.core.exceptions.infra_error import InfraError


@dataclass(frozen=False)
class TransportError(InfraError):
    provider: str
    message: str
    status_code: int | None = None

    def __str__(self) -> str:
        code = f" status={self.status_code}" if self.status_code is not None else ""
        return f"{self.provider}: {self.message}{code}"
