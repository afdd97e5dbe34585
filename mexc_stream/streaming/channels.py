"""
Channel Key Builder
==================

Pure functions mapping a subscription request to its canonical topic string.

Topic grammar::

    <visibility>.<feed-name>.<version>.api@<SYMBOL>[@<extra-qualifier>]

e.g. ``public.kline.v4.api@BTCUSDT@Min15``.
"""

from typing import Union

PUBLIC = "public"
PRIVATE = "private"

DEFAULT_SYMBOL = "BTCUSDT"
DEFAULT_TIMEZONE = "UTC+3"

PRIVATE_FEEDS = ("account", "deals", "orders")


def topic(feed: str, version: str, *qualifiers: Union[str, int],
          visibility: str = PUBLIC, prefix: str = "") -> str:
    """
    Build a topic from its parts

    Args:
        feed: Feed name, e.g. ``deals`` or ``increase.depth``
        version: Feed version, e.g. ``v3``
        qualifiers: Symbol and extra qualifiers, joined with ``@``
        visibility: ``public`` or ``private``
        prefix: Venue prefix prepended verbatim (``spot@`` on the live venue)
    """
    if visibility not in (PUBLIC, PRIVATE):
        raise ValueError(f"Unknown channel visibility: {visibility!r}")
    if not feed or not version:
        raise ValueError("Feed name and version are required")

    key = f"{visibility}.{feed}.{version}.api"
    for qualifier in qualifiers:
        text = str(qualifier).strip()
        if not text:
            raise ValueError(f"Empty qualifier in topic for feed {feed!r}")
        key = f"{key}@{text}"
    return f"{prefix}{key}"


def _symbol(symbol: str) -> str:
    # used verbatim, the venue matches channel tags case-sensitively
    if not symbol or not symbol.strip():
        raise ValueError("Symbol is required")
    return symbol


def deals(symbol: str = DEFAULT_SYMBOL, prefix: str = "") -> str:
    return topic("deals", "v3", _symbol(symbol), prefix=prefix)


def kline(symbol: str, interval: Union[int, str], prefix: str = "") -> str:
    """Kline topic; ``interval`` is the minute count, rendered as ``Min<interval>``"""
    return topic("kline", "v4", _symbol(symbol), f"Min{interval}", prefix=prefix)


def increase_depth(symbol: str, prefix: str = "") -> str:
    return topic("increase.depth", "v3", _symbol(symbol), prefix=prefix)


def limit_depth(symbol: str, depth: Union[int, str], prefix: str = "") -> str:
    return topic("limit.depth", "v3", _symbol(symbol), depth, prefix=prefix)


def mini_ticker(symbol: str = DEFAULT_SYMBOL, tz: str = DEFAULT_TIMEZONE, prefix: str = "") -> str:
    return topic("miniTicker", "v3", _symbol(symbol), tz, prefix=prefix)


def mini_tickers(tz: str = DEFAULT_TIMEZONE, prefix: str = "") -> str:
    return topic("miniTickers", "v3", tz, prefix=prefix)


def book_ticker(symbol: str = DEFAULT_SYMBOL, prefix: str = "") -> str:
    return topic("bookTicker", "v3", _symbol(symbol), prefix=prefix)


def private_topic(feed: str, prefix: str = "") -> str:
    """
    Private user-data topic (``account``, ``deals`` or ``orders``).

    Only delivered on a connection opened with a listen key.
    """
    if feed not in PRIVATE_FEEDS:
        raise ValueError(f"Unknown private feed {feed!r}, expected one of {PRIVATE_FEEDS}")
    return topic(feed, "v3", visibility=PRIVATE, prefix=prefix)


def feed_of(channel: str) -> str:
    """
    Feed name of a topic or inbound channel tag, e.g. ``miniTickers``.

    Returns an empty string when the tag does not follow the topic grammar.
    """
    # venue prefix such as "spot@" comes before the feed part
    for part in channel.split("@"):
        if part.startswith((f"{PUBLIC}.", f"{PRIVATE}.")) and part.endswith(".api"):
            segments = part[:-len(".api")].split(".")
            # drop visibility and version
            return ".".join(segments[1:-1])
    return ""
