from structured_chat.infrastructure.observability.logger_factory_service import (
    configure_logging,
    get_logger,
)
from structured_chat.infrastructure.observability.tracing_setup import (
    configure_tracing,
    get_tracer,
    trace_operation,
)

__all__ = ["configure_logging", "configure_tracing", "get_logger", "get_tracer", "trace_operation"]
