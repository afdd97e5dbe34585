"""
Connection Manager
=================

Owns the single streaming transport: connect, keepalive, reconnect on
failure, subscription replay and shutdown.

Features:
- One supervisor task per client driving the connection state machine
- Fixed-delay, unbounded retry of failed handshakes
- Transparent reconnect with full replay of the subscription registry
- Keepalive ticker (transport ping or JSON PING frame)
- Shutdown that wins over any in-flight handshake
"""

import asyncio
import time
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Set

import websockets
from websockets.exceptions import ConnectionClosed

from .dispatcher import MessageDispatcher
from .protocol import NORMAL_CLOSE_CODE, ping_frame, subscription_frame
from .registry import SubscriptionRegistry
from ..utils.config import StreamSettings, config
from ..utils.logger import get_logger

Connector = Callable[[str], Awaitable[Any]]


class ConnectionState(str, Enum):
    IDLE = "IDLE"
    CONNECTING = "CONNECTING"
    OPEN = "OPEN"
    RECONNECTING = "RECONNECTING"
    CLOSING = "CLOSING"
    CLOSED = "CLOSED"


class StreamNotConnectedError(RuntimeError):
    """A frame was sent while the connection was not open"""


def websocket_connector(settings: StreamSettings) -> Connector:
    """Connector opening a websockets client connection with our timeouts"""

    async def connect(url: str):
        # keepalive is driven by ConnectionManager, not by the library
        return await websockets.connect(
            url,
            ping_interval=None,
            open_timeout=settings.open_timeout,
            close_timeout=settings.close_timeout
        )

    return connect


class ConnectionManager:
    """
    Manages the streaming connection lifecycle.

    All methods must be called from the event loop that runs the client.
    """

    def __init__(self,
                 registry: SubscriptionRegistry,
                 dispatcher: MessageDispatcher,
                 settings: Optional[StreamSettings] = None,
                 connector: Optional[Connector] = None):
        self.settings = settings or config.stream
        self.registry = registry
        self.dispatcher = dispatcher
        self.logger = get_logger('connection_manager')
        self._connector = connector or websocket_connector(self.settings)

        # Connection state
        self.state = ConnectionState.IDLE
        self.should_reconnect = True
        self._transport: Optional[Any] = None
        self._supervisor: Optional[asyncio.Task] = None
        self._keepalive: Optional[asyncio.Task] = None
        self._pending_sends: Set[asyncio.Task] = set()
        self._last_frame_at = 0.0
        self._opened = asyncio.Event()
        self._stopping = asyncio.Event()

        self.stats = {
            'connect_attempts': 0,
            'failed_handshakes': 0,
            'reconnections': 0,
            'frames_sent': 0,
            'pings_sent': 0,
            'keepalive_timeouts': 0,
            'supervisor_errors': 0,
            'last_open_time': 0.0,
            'last_frame_time': 0.0
        }

        registry.attach(self)

    @property
    def is_open(self) -> bool:
        return self.state == ConnectionState.OPEN and self._transport is not None

    @property
    def url(self) -> str:
        return self.settings.endpoint()

    def start(self) -> None:
        """Start connecting; no-op if already connecting/open or after shutdown"""
        if not self.should_reconnect:
            self.logger.debug("start() ignored after shutdown")
            return
        if self._supervisor is not None and not self._supervisor.done():
            return

        self._supervisor = asyncio.get_running_loop().create_task(
            self._run(), name="mexc-stream-supervisor"
        )

    async def wait_until_open(self, timeout: Optional[float] = None) -> None:
        """Wait for the connection to reach OPEN"""
        await asyncio.wait_for(self._opened.wait(), timeout)

    async def _run(self):
        """Supervisor: connect, serve, and reconnect until shutdown"""
        try:
            while self.should_reconnect:
                transport = await self._handshake()

                if transport is None:
                    await self._wait_before_retry()
                    continue

                if not self.should_reconnect:
                    self.logger.info("Shutdown requested during handshake, closing new connection")
                    await self._close_transport(transport)
                    break

                failed = False
                try:
                    await self._adopt(transport)
                    await self._serve(transport)
                except Exception:
                    failed = True
                    self.stats['supervisor_errors'] += 1
                    self.logger.exception("Unexpected error on stream connection, dropping it")
                    await self._close_transport(transport)
                finally:
                    self._release()

                if self.should_reconnect:
                    self.state = ConnectionState.RECONNECTING
                    self.stats['reconnections'] += 1
                    self.logger.warning("Connection lost, reconnecting")
                    if failed:
                        await self._wait_before_retry()
        finally:
            if not self.should_reconnect:
                self.state = ConnectionState.CLOSED

    async def _handshake(self) -> Optional[Any]:
        if self.state != ConnectionState.RECONNECTING:
            self.state = ConnectionState.CONNECTING
        self.stats['connect_attempts'] += 1

        try:
            self.logger.info(f"Connecting to {self.settings.ws_url}")
            return await self._connector(self.url)
        except Exception as e:
            self.stats['failed_handshakes'] += 1
            self.logger.warning(f"Handshake failed: {e!r}; retrying in {self.settings.reconnect_delay}s")
            return None

    async def _wait_before_retry(self):
        """Fixed delay, cut short by shutdown"""
        try:
            await asyncio.wait_for(self._stopping.wait(), self.settings.reconnect_delay)
        except asyncio.TimeoutError:
            pass

    async def _adopt(self, transport):
        self._transport = transport
        self.state = ConnectionState.OPEN
        self.stats['last_open_time'] = time.time()
        self._opened.set()
        self._mark_inbound()
        self._keepalive =asyncio.get_running_loop().create_task(
            self._keepalive_loop(transport), name="mexc-stream-keepalive"
        )

        topics = self.registry.replay()
        self.logger.success(f"Stream connected, replaying {len(topics)} subscription(s)")
        for topic in topics:
            if not await self._transmit(transport, subscription_frame(topic)):
                break

    async def _serve(self, transport):
        """Feed inbound frames to the dispatcher until the transport closes"""
        try:
            async for frame in transport:
                self._mark_inbound()
                self.dispatcher.dispatch(frame)
        except ConnectionClosed as e:
            self.logger.warning(f"Stream closed: code={e.rcvd.code if e.rcvd else None}")
        except OSError as e:
            self.logger.warning(f"Stream transport error: {e}")

    def _release(self):
        self._stop_keepalive()
        self._transport = None
        self._opened.clear()

    def _mark_inbound(self):
        self._last_frame_at = asyncio.get_running_loop().time()
        self.stats['last_frame_time'] = time.time()

    async def _keepalive_loop(self, transport):
        """
        Ping every ping_interval and drop a connection that stopped answering.

        Native mode waits ping_timeout for the pong; json mode expects some
        inbound frame (the server answers PING with PONG) within
        ping_interval + ping_timeout.
        """
        loop = asyncio.get_running_loop()
        while True:
            await asyncio.sleep(self.settings.ping_interval)
            try:
                if self.settings.ping_mode == "json":
                    silence = loop.time() - self._last_frame_at
                    if silence > self.settings.ping_interval + self.settings.ping_timeout:
                        await self._drop_stale(transport, f"no inbound frame for {silence:.1f}s")
                        return
                    await transport.send(ping_frame())
                    self.stats['pings_sent'] += 1
                else:
                    pong = await transport.ping()
                    self.stats['pings_sent'] += 1
                    await asyncio.wait_for(pong, self.settings.ping_timeout)
            except asyncio.TimeoutError:
                await self._drop_stale(transport, f"no pong within {self.settings.ping_timeout}s")
                return
            except (ConnectionClosed, OSError) as e:
                self.logger.warning(f"Keepalive failed: {e}")
                return

    async def _drop_stale(self, transport, reason: str):
        """Close a silent transport so the receive loop ends and the reconnect path runs"""
        self.stats['keepalive_timeouts'] += 1
        self.logger.warning(f"Stream connection stale ({reason}), closing it")
        # _release cancels this task once the receive loop ends; the close must still finish
        await asyncio.shield(self._close_transport(transport))

    def _stop_keepalive(self):
        if self._keepalive is not None:
            self._keepalive.cancel()
            self._keepalive = None

    async def _transmit(self, transport, frame: str) -> bool:
        try:
            await transport.send(frame)
        except (ConnectionClosed, OSError) as e:
            # the close that follows triggers a full replay
            self.logger.warning(f"Send failed: {e}")
            return False
        self.stats['frames_sent'] += 1
        return True

    async def send(self, topic: str) -> None:
        """Send a subscribe frame for topic on the open connection"""
        if not self.is_open:
            raise StreamNotConnectedError(f"Cannot subscribe to {topic}: connection is {self.state.value}")
        self.logger.debug(f"Subscribing to {topic}")
        await self._transmit(self._transport, subscription_frame(topic))

    def send_nowait(self, topic: str) -> None:
        """Schedule send(topic) from synchronous code"""
        task = asyncio.get_running_loop().create_task(self._send_if_open(topic))
        self._pending_sends.add(task)
        task.add_done_callback(self._pending_sends.discard)

    async def _send_if_open(self, topic: str):
        if self.is_open:
            await self.send(topic)
        else:
            self.logger.debug(f"Connection not open, {topic} left for replay")

    async def _close_transport(self, transport):
        try:
            await transport.close(code=NORMAL_CLOSE_CODE)
        except (ConnectionClosed, OSError) as e:
            self.logger.debug(f"Error while closing transport: {e}")

    async def shutdown(self, on_closed: Optional[Callable[[], None]] = None) -> None:
        """
        Close the connection for good

        Waits for the supervisor, including a handshake still in flight, so
        no transport is left open when on_closed runs.

        Args:
            on_closed: Called once the close completes
        """
        self.should_reconnect = False
        self._stopping.set()
        self._stop_keepalive()
        self.state = ConnectionState.CLOSING

        transport = self._transport
        if transport is not None:
            self.logger.info("Closing stream connection")
            await self._close_transport(transport)

        # an in-flight handshake resolves within open_timeout and its transport is closed by the supervisor
        supervisor = self._supervisor
        if supervisor is not None and not supervisor.done() and supervisor is not asyncio.current_task():
            try:
                await supervisor
            except Exception:
                self.logger.exception("Stream supervisor ended with an error")

        if self._pending_sends:
            await asyncio.gather(*self._pending_sends, return_exceptions=True)

        self._transport = None
        self._opened.clear()
        self.state = ConnectionState.CLOSED
        self.logger.info("Stream connection closed")

        if on_closed is not None:
            on_closed()

    def get_statistics(self) -> Dict:
        return {
            **self.stats,
            'state': self.state.value,
            'is_open': self.is_open,
            'subscriptions': len(self.registry),
            'url': self.settings.ws_url
        }
