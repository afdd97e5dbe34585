"""
MEXC Stream Client
=================

Subscribe-style entry points over one shared streaming connection.

Example::

    async with MexcStreamClient() as client:
        client.deals("ETHUSDT", on_deal)
        client.kline("BTCUSDT", 15, on_kline)
        await asyncio.sleep(60)
"""

from typing import Any, Callable, Dict, List, Optional, Union

from . import channels
from .connection import ConnectionManager, Connector
from .dispatcher import MessageDispatcher
from .protocol import StreamMessage
from .registry import MessageHandler, SubscriptionRegistry
from ..utils.config import StreamSettings, config
from ..utils.logger import get_logger


def _require_callback(callback: Optional[Callable]) -> Callable:
    if callback is None:
        raise ValueError("Callback is needed")
    if not callable(callback):
        raise TypeError(f"Callback must be callable, got {type(callback).__name__}")
    return callback


class MexcStreamClient:
    """
    Public streaming API.

    Subscriptions can be made before or after start(); they are sent as soon
    as the connection is open and replayed after every reconnect.
    """

    def __init__(self,
                 settings: Optional[StreamSettings] = None,
                 connector: Optional[Connector] = None):
        self.settings = settings or config.stream
        self.logger = get_logger('stream_client')

        self.registry = SubscriptionRegistry()
        self.dispatcher = MessageDispatcher(self.registry)
        self.connection = ConnectionManager(
            self.registry,
            self.dispatcher,
            settings=self.settings,
            connector=connector
        )

    # Lifecycle

    def start(self) -> None:
        self.connection.start()

    async def wait_until_open(self, timeout: Optional[float] = None) -> None:
        await self.connection.wait_until_open(timeout)

    async def close(self, on_closed: Optional[Callable[[], None]] = None) -> None:
        """Shut the connection down and forget every subscription"""
        await self.connection.shutdown(on_closed)
        self.registry.clear()

    async def __aenter__(self) -> "MexcStreamClient":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # Subscriptions

    def subscribe(self, topic: str, callback: MessageHandler = None) -> str:
        """Register callback for any topic, e.g. one built with channels.private_topic"""
        self.registry.add(topic, _require_callback(callback))
        self.logger.info(f"Subscribed to {topic}")
        return topic

    def deals(self, symbol: str = channels.DEFAULT_SYMBOL, callback: MessageHandler = None) -> str:
        _require_callback(callback)
        return self.subscribe(channels.deals(symbol, prefix=self.settings.channel_prefix), callback)

    def kline(self, symbol: str, interval: Union[int, str], callback: MessageHandler = None) -> str:
        _require_callback(callback)
        return self.subscribe(channels.kline(symbol, interval, prefix=self.settings.channel_prefix), callback)

    def increase_depth(self, symbol: str, callback: MessageHandler = None) -> str:
        _require_callback(callback)
        return self.subscribe(channels.increase_depth(symbol, prefix=self.settings.channel_prefix), callback)

    def limit_depth(self, symbol: str, depth: Union[int, str], callback: MessageHandler = None) -> str:
        _require_callback(callback)
        return self.subscribe(channels.limit_depth(symbol, depth, prefix=self.settings.channel_prefix), callback)

    def mini_ticker(self, symbol: str = channels.DEFAULT_SYMBOL, tz: str = channels.DEFAULT_TIMEZONE,
                    callback: MessageHandler = None) -> str:
        _require_callback(callback)
        return self.subscribe(channels.mini_ticker(symbol, tz, prefix=self.settings.channel_prefix), callback)

    def mini_tickers(self, tz: str = channels.DEFAULT_TIMEZONE, callback: MessageHandler = None) -> str:
        _require_callback(callback)
        return self.subscribe(channels.mini_tickers(tz, prefix=self.settings.channel_prefix), callback)

    def book_ticker(self, symbol: str = channels.DEFAULT_SYMBOL, callback: MessageHandler = None) -> str:
        _require_callback(callback)
        return self.subscribe(channels.book_ticker(symbol, prefix=self.settings.channel_prefix), callback)

    def price_ticker(self, symbol: str = channels.DEFAULT_SYMBOL, tz: str = channels.DEFAULT_TIMEZONE,
                     callback: Callable[[Dict[str, Any]], None] = None) -> str:
        """Mini ticker reduced to ``{"price": ..., "symbol": ...}``"""
        listener = _require_callback(callback)

        def on_mini_ticker(message: StreamMessage) -> None:
            listener({"price": message.data.get("p"), "symbol": message.symbol})

        return self.mini_ticker(symbol, tz, on_mini_ticker)

    def price_tickers(self, tz: str = channels.DEFAULT_TIMEZONE,
                      callback: Callable[[List[Dict[str, Any]]], None] = None) -> str:
        """All mini tickers reduced to a list of ``{"price": ..., "symbol": ...}``"""
        listener = _require_callback(callback)

        def on_mini_tickers(message: StreamMessage) -> None:
            listener([{"price": item.get("p"), "symbol": item.get("s")} for item in message.data])

        return self.mini_tickers(tz, on_mini_tickers)

    def get_statistics(self) -> Dict:
        return {
            **self.connection.get_statistics(),
            'dispatcher': self.dispatcher.get_statistics(),
            'topics': self.registry.replay()
        }
