"""
Pytest configuration and shared fixtures for the stream client tests.

Provides an in-memory transport and connector so the connection state
machine can be driven without network access.
"""

import asyncio
import json
from typing import List, Optional

import pytest
import pytest_asyncio

from mexc_stream.streaming import MessageDispatcher, SubscriptionRegistry
from mexc_stream.streaming.client import MexcStreamClient
from mexc_stream.streaming.connection import ConnectionManager
from mexc_stream.utils.config import StreamSettings
from mexc_stream.utils.logger import setup_silent_logging

setup_silent_logging()


class FakeTransport:
    """Stands in for a websockets client connection"""

    def __init__(self):
        self.sent: List[str] = []
        self.pings = 0
        self.closed = False
        self.close_code: Optional[int] = None
        self.answer_pings = True
        self._inbox: asyncio.Queue = asyncio.Queue()

    async def send(self, frame: str) -> None:
        if self.closed:
            raise OSError("transport closed")
        self.sent.append(frame)

    async def ping(self) -> asyncio.Future:
        """Returns the pong waiter; left pending when answer_pings is False"""
        if self.closed:
            raise OSError("transport closed")
        self.pings += 1
        pong = asyncio.get_running_loop().create_future()
        if self.answer_pings:
            pong.set_result(0.001)
        return pong

    async def close(self, code: int = 1000) -> None:
        if self.closed:
            return
        self.closed = True
        self.close_code = code
        self._inbox.put_nowait(None)

    def feed(self, frame) -> None:
        """Deliver an inbound frame"""
        if isinstance(frame, dict):
            frame = json.dumps(frame)
        self._inbox.put_nowait(frame)

    def drop(self) -> None:
        """Simulate an unsolicited close from the server"""
        self.closed = True
        self._inbox.put_nowait(None)

    def __aiter__(self):
        return self

    async def __anext__(self):
        frame = await self._inbox.get()
        if frame is None:
            raise StopAsyncIteration
        return frame

    @property
    def frames(self) -> List[dict]:
        return [json.loads(frame) for frame in self.sent]

    @property
    def subscribed_topics(self) -> List[str]:
        return [frame["params"][0] for frame in self.frames if frame.get("method") == "SUBSCRIPTION"]


class FakeConnector:
    """Connector returning a fresh FakeTransport per successful handshake"""

    def __init__(self):
        self.calls = 0
        self.urls: List[str] = []
        self.failures = 0
        self.gate: Optional[asyncio.Future] = None
        self.silent = False
        self.transports: List[FakeTransport] = []

    async def __call__(self, url: str) -> FakeTransport:
        self.calls += 1
        self.urls.append(url)
        if self.failures > 0:
            self.failures -= 1
            raise OSError("connection refused")
        if self.gate is not None:
            gate, self.gate = self.gate, None
            await gate
        transport = FakeTransport()
        if self.silent:
            # half-open: the next transport never answers pings
            transport.answer_pings = False
            self.silent = False
        self.transports.append(transport)
        return transport

    @property
    def latest(self) -> FakeTransport:
        return self.transports[-1]


async def settle(seconds: float = 0.02) -> None:
    """Let scheduled tasks run"""
    await asyncio.sleep(seconds)


async def wait_for(predicate, timeout: float = 1.0) -> None:
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.005)


@pytest.fixture
def settings():
    return StreamSettings(ws_url="wss://stream.test/ws", ping_interval=0.05, reconnect_delay=0.01)


@pytest.fixture
def connector():
    return FakeConnector()


@pytest.fixture
def registry():
    return SubscriptionRegistry()


@pytest_asyncio.fixture
async def manager(registry, settings, connector):
    manager = ConnectionManager(registry, MessageDispatcher(registry), settings=settings, connector=connector)
    yield manager
    await manager.shutdown()


@pytest_asyncio.fixture
async def client(settings, connector):
    client = MexcStreamClient(settings=settings, connector=connector)
    yield client
    await client.close()
