"""
MEXC Stream Client Example
=========================

Demonstration of the streaming subscription client.
This example shows how to:
1. Subscribe to several public feeds before the connection opens
2. Receive transformed price ticks
3. Shut the client down cleanly
"""

import asyncio

from mexc_stream import MexcStreamClient, StreamMessage
from mexc_stream.utils.logger import setup_production_logging


def on_deals(message: StreamMessage):
    for deal in message.data.get("deals", []):
        print(f"💱 {message.symbol} deal: {deal.get('v')} @ {deal.get('p')}")


def on_book_ticker(message: StreamMessage):
    book = message.data
    print(f"📗 {message.symbol} bid {book.get('b')} / ask {book.get('a')}")


def on_price(tick: dict):
    print(f"💲 {tick['symbol']}: {tick['price']}")


async def run_stream(duration: float = 30.0):
    """Stream a few feeds for ``duration`` seconds"""
    print("🔌 Starting MEXC stream client...")

    client = MexcStreamClient()
    client.deals("BTCUSDT", on_deals)
    client.book_ticker("ETHUSDT", on_book_ticker)
    client.price_ticker("BTCUSDT", "UTC+3", on_price)

    client.start()
    try:
        await client.wait_until_open(timeout=15)
        print("✅ Connected")
        await asyncio.sleep(duration)
    finally:
        await client.close(lambda: print("👋 Stream closed"))

    stats = client.get_statistics()
    print(f"\n📊 Frames received: {stats['dispatcher']['frames_received']}, "
          f"delivered: {stats['dispatcher']['frames_delivered']}, "
          f"reconnections: {stats['reconnections']}")


if __name__ == "__main__":
    setup_production_logging()
    asyncio.run(run_stream())
