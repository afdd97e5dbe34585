"""
Streaming Module
===============

Single-connection subscription client for the MEXC streaming endpoint:
- Topic construction for every public feed
- Durable subscription registry replayed on reconnect
- Connection lifecycle with keepalive and fixed-delay reconnection
- Frame parsing and per-topic dispatch
"""

from . import channels
from .client import MexcStreamClient
from .connection import ConnectionManager, ConnectionState, StreamNotConnectedError
from .dispatcher import MessageDispatcher
from .protocol import StreamMessage
from .registry import Subscription, SubscriptionRegistry

__all__ = [
    'channels',
    'MexcStreamClient',
    'ConnectionManager',
    'ConnectionState',
    'StreamNotConnectedError',
    'MessageDispatcher',
    'StreamMessage',
    'Subscription',
    'SubscriptionRegistry'
]
