"""
MEXC Stream Client
=================

Streaming market-data client for the MEXC spot venue: one persistent
WebSocket connection multiplexing any number of topic subscriptions, with
transparent reconnection and per-topic dispatch.

Project Structure:
- mexc_stream/streaming: topics, registry, connection manager, dispatcher and public client
- mexc_stream/utils: configuration and logging
"""

__version__ = "1.0.0"

from mexc_stream.streaming.client import MexcStreamClient
from mexc_stream.streaming.connection import ConnectionState, StreamNotConnectedError
from mexc_stream.streaming.protocol import StreamMessage

__all__ = [
    "MexcStreamClient",
    "ConnectionState",
    "StreamNotConnectedError",
    "StreamMessage"
]
