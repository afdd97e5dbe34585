"""
Wire protocol for the MEXC streaming endpoint.

Outbound control frames are compact JSON objects; inbound data frames are
envelopes of the form ``{"c": <channel>, "d": <payload>, "s": <symbol>}``.
"""

import json
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .channels import feed_of

SUBSCRIBE_METHOD = "SUBSCRIPTION"
PING_METHOD = "PING"

# https://www.rfc-editor.org/rfc/rfc6455.html#section-7.4.1
NORMAL_CLOSE_CODE = 1000

# Feed families whose payload is a list, every other feed carries an object
LIST_PAYLOAD_FEEDS = frozenset({"miniTickers"})


def _encode(frame: Dict[str, Any]) -> str:
    return json.dumps(frame, separators=(",", ":"))


def subscription_frame(topic: str) -> str:
    """``{"method":"SUBSCRIPTION","params":["<topic>"]}``"""
    return _encode({"method": SUBSCRIBE_METHOD, "params": [topic]})


def ping_frame() -> str:
    return _encode({"method": PING_METHOD})


class StreamMessage(BaseModel):
    """Inbound data envelope"""
    model_config = ConfigDict(populate_by_name=True, extra="allow", frozen=True)

    channel: Optional[str] = Field(default=None, alias="c")
    data: Any = Field(default=None, alias="d")
    symbol: Optional[str] = Field(default=None, alias="s")
    timestamp: Optional[int] = Field(default=None, alias="t")

    @property
    def feed(self) -> str:
        return feed_of(self.channel) if self.channel else ""

    def has_expected_payload(self) -> bool:
        """True when ``data`` has the shape the feed family delivers"""
        if self.feed in LIST_PAYLOAD_FEEDS:
            return isinstance(self.data, list)
        return isinstance(self.data, dict)


class FrameError(ValueError):
    """Raised by parse_frame for frames that are not a valid envelope"""


def parse_frame(frame: Union[str, bytes]) -> StreamMessage:
    """
    Parse one raw text frame into a StreamMessage

    Raises:
        FrameError: frame is not UTF-8 JSON, not an object, or fails validation
    """
    try:
        text = frame.decode("utf-8") if isinstance(frame, (bytes, bytearray)) else frame
        payload = json.loads(text)
    except (ValueError, RecursionError) as exc:
        # ValueError covers UnicodeDecodeError, JSONDecodeError and the int digit limit
        raise FrameError(f"Undecodable frame: {type(exc).__name__}") from exc

    if not isinstance(payload, dict):
        raise FrameError(f"Expected a JSON object, got {type(payload).__name__}")

    try:
        return StreamMessage.model_validate(payload)
    except ValidationError as exc:
        raise FrameError(f"Invalid envelope: {exc.error_count()} error(s)") from exc
