import pytest

from mexc_stream.streaming import channels


@pytest.mark.parametrize("built, expected", [
    (channels.deals("ETHUSDT"), "public.deals.v3.api@ETHUSDT"),
    (channels.kline("BTCUSDT", 15), "public.kline.v4.api@BTCUSDT@Min15"),
    (channels.increase_depth("BTCUSDT"), "public.increase.depth.v3.api@BTCUSDT"),
    (channels.limit_depth("BTCUSDT", 5), "public.limit.depth.v3.api@BTCUSDT@5"),
    (channels.mini_ticker("BTCUSDT", "UTC+8"), "public.miniTicker.v3.api@BTCUSDT@UTC+8"),
    (channels.mini_tickers("UTC+8"), "public.miniTickers.v3.api@UTC+8"),
    (channels.book_ticker("BTCUSDT"), "public.bookTicker.v3.api@BTCUSDT"),
])
def test_public_topic_grammar(built, expected):
    assert built == expected


def test_defaults_match_venue_examples():
    assert channels.deals() == "public.deals.v3.api@BTCUSDT"
    assert channels.mini_tickers() == "public.miniTickers.v3.api@UTC+3"


def test_symbol_is_used_verbatim():
    assert channels.deals("ethusdt") == "public.deals.v3.api@ethusdt"
    assert channels.book_ticker("EthUsdt") == "public.bookTicker.v3.api@EthUsdt"


def test_prefix_is_prepended():
    assert channels.deals("BTCUSDT", prefix="spot@") == "spot@public.deals.v3.api@BTCUSDT"


def test_private_topics():
    assert channels.private_topic("account") == "private.account.v3.api"
    assert channels.private_topic("orders", prefix="spot@") == "spot@private.orders.v3.api"
    with pytest.raises(ValueError):
        channels.private_topic("balances")


def test_empty_symbol_rejected():
    with pytest.raises(ValueError):
        channels.deals("")


def test_unknown_visibility_rejected():
    with pytest.raises(ValueError):
        channels.topic("deals", "v3", "BTCUSDT", visibility="internal")


@pytest.mark.parametrize("channel, feed", [
    ("public.deals.v3.api@BTCUSDT", "deals"),
    ("spot@public.increase.depth.v3.api@BTCUSDT", "increase.depth"),
    ("public.miniTickers.v3.api@UTC+3", "miniTickers"),
    ("spot@private.orders.v3.api", "orders"),
    ("PONG", ""),
])
def test_feed_of(channel, feed):
    assert channels.feed_of(channel) == feed
