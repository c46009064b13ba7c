from structured_chat.core.application.ports.chat_transport_port import ChatTransportPort

__all__ = ["ChatTransportPort"]
