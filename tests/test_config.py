import pytest
from pydantic import ValidationError

from mexc_stream.utils.config import Config, StreamSettings


def test_defaults():
    settings = StreamSettings()
    assert settings.ws_url == "wss://wbs.mexc.com/ws"
    assert settings.ping_interval == 20.0
    assert settings.reconnect_delay == 5.0
    assert settings.ping_mode == "native"
    assert settings.ping_timeout == 10.0
    assert settings.endpoint() == "wss://wbs.mexc.com/ws"


def test_listen_key_appended_to_endpoint():
    assert StreamSettings(listen_key="k1").endpoint() == "wss://wbs.mexc.com/ws?listenKey=k1"
    assert StreamSettings(ws_url="wss://x/ws?a=1", listen_key="k1").endpoint() == "wss://x/ws?a=1&listenKey=k1"


@pytest.mark.parametrize("overrides", [
    {"ping_interval": 0},
    {"reconnect_delay": -1},
    {"ping_mode": "frames"},
    {"ping_timeout": 0},
])
def test_invalid_settings_rejected(overrides):
    with pytest.raises(ValidationError):
        StreamSettings(**overrides)


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("MEXC_WS_URL", "wss://env.test/ws")
    monkeypatch.setenv("MEXC_PING_INTERVAL", "7.5")
    monkeypatch.setenv("MEXC_PING_MODE", "json")
    monkeypatch.setenv("MEXC_PING_TIMEOUT", "3")

    config = Config()

    assert config.stream.ws_url == "wss://env.test/ws"
    assert config.stream.ping_interval == 7.5
    assert config.stream.ping_mode == "json"
    assert config.stream.ping_timeout == 3.0
    assert config.to_dict()["stream"]["ws_url"] == "wss://env.test/ws"
