"""
Outbound channel clients.

Usage::

    from backend.channel import ChannelClient

    client = ChannelClient("ws://localhost:3001/ws")
    await client.run()
"""

from .client import ChannelClient
from .reconnect import create_reconnect_policy, is_reconnectable_error

__all__ = [
    "ChannelClient",
    "create_reconnect_policy",
    "is_reconnectable_error",
]
