"""Channel hub adapters."""

from infrastructure.channel.websocket_hub import DEFAULT_QUEUE_SIZE, WebSocketChannelHub

__all__ = ["DEFAULT_QUEUE_SIZE", "WebSocketChannelHub"]
