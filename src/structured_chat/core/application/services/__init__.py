from structured_chat.core.application.services.response_decoder import decode
from structured_chat.core.application.services.schema_builder import build_schema
from structured_chat.core.application.services.stream_aggregator import aggregate

__all__ = ["aggregate", "build_schema", "decode"]
