"""
MEXC Stream Client Configuration
"""

import os
import logging
from typing import Dict, Any, Literal
from urllib.parse import urlencode
from pydantic import BaseModel, Field
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Setup logger
logger = logging.getLogger(__name__)


class StreamSettings(BaseModel):
    """Streaming endpoint and connection policy"""
    ws_url: str = Field(default="wss://wbs.mexc.com/ws", description="WebSocket endpoint")
    listen_key: str = Field(default="", description="Opaque listen key for private channels")
    channel_prefix: str = Field(default="", description="Prefix prepended to every topic, e.g. 'spot@'")

    # Keepalive frame every 20s, either a transport ping or {"method":"PING"}
    ping_interval: float = Field(default=20.0, gt=0, description="Keepalive interval in seconds")
    ping_mode: Literal["native", "json"] = Field(default="native", description="Keepalive frame type")
    # No pong (native) or no inbound frame (json) within this window drops the connection
    ping_timeout: float = Field(default=10.0, gt=0, description="Keepalive answer timeout in seconds")

    # Fixed delay between failed handshakes, never exponential
    reconnect_delay: float = Field(default=5.0, gt=0, description="Delay before retrying a failed handshake")

    open_timeout: float = Field(default=10.0, gt=0, description="Handshake timeout in seconds")
    close_timeout: float = Field(default=10.0, gt=0, description="Closing handshake timeout in seconds")

    def endpoint(self) -> str:
        """Streaming URL, with the listen key appended when one is set"""
        if not self.listen_key:
            return self.ws_url
        separator = "&" if "?" in self.ws_url else "?"
        return f"{self.ws_url}{separator}{urlencode({'listenKey': self.listen_key})}"


def _env_overrides() -> Dict[str, Any]:
    """Collect StreamSettings overrides from MEXC_* environment variables"""
    names = {
        "ws_url": "MEXC_WS_URL",
        "listen_key": "MEXC_LISTEN_KEY",
        "channel_prefix": "MEXC_CHANNEL_PREFIX",
        "ping_interval": "MEXC_PING_INTERVAL",
        "ping_mode": "MEXC_PING_MODE",
        "ping_timeout": "MEXC_PING_TIMEOUT",
        "reconnect_delay": "MEXC_RECONNECT_DELAY",
    }
    overrides = {}
    for field_name, env_name in names.items():
        value = os.getenv(env_name)
        if value:
            overrides[field_name] = value
    if overrides:
        logger.debug(f"Stream settings overridden from environment: {sorted(overrides)}")
    return overrides


class Config:
    """Main configuration class"""

    def __init__(self):
        self.stream = StreamSettings(**_env_overrides())

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary"""
        return {
            "stream": self.stream.model_dump(),
        }


# Global configuration instance
config = Config()
