from structured_chat.infrastructure.observability.logging.log_schema_processor import (
    log_schema_processor,
)

__all__ = ["log_schema_processor"]
