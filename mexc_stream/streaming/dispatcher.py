"""
Message Dispatcher
=================

Routes inbound frames to the callback registered for their channel tag.
Malformed, untagged and unmatched frames are dropped without disturbing the
connection.
"""

from typing import Dict, Union

from .protocol import FrameError, parse_frame
from .registry import SubscriptionRegistry
from ..utils.logger import get_logger


class MessageDispatcher:
    """Parses one frame at a time, in transport delivery order"""

    def __init__(self, registry: SubscriptionRegistry):
        self.registry = registry
        self.logger = get_logger('message_dispatcher')

        self.stats = {
            'frames_received': 0,
            'frames_delivered': 0,
            'frames_malformed': 0,
            'frames_unmatched': 0,
            'callback_errors': 0
        }

    def dispatch(self, frame: Union[str, bytes]) -> bool:
        """
        Deliver a raw frame to its subscriber

        Returns:
            True if a callback was invoked
        """
        self.stats['frames_received'] += 1

        try:
            message = parse_frame(frame)
        except FrameError as e:
            self.stats['frames_malformed'] += 1
            self.logger.debug(f"Discarding malformed frame: {e}")
            return False

        if not message.channel:
            # acks, PONG and other control frames carry no channel tag
            self.stats['frames_unmatched'] += 1
            self.logger.debug(f"Control frame: {message.model_dump(exclude_none=True)}")
            return False

        subscription = self.registry.match(message.channel)
        if subscription is None:
            self.stats['frames_unmatched'] += 1
            self.logger.debug(f"No subscriber for channel {message.channel}")
            return False

        if not message.has_expected_payload():
            self.stats['frames_malformed'] += 1
            self.logger.debug(f"Unexpected payload shape on {message.channel}: {type(message.data).__name__}")
            return False

        try:
            subscription.callback(message)
        except Exception:
            self.stats['callback_errors'] += 1
            self.logger.exception(f"Subscriber for {subscription.topic} raised")
        else:
            self.stats['frames_delivered'] += 1
        return True

    def get_statistics(self) -> Dict[str, int]:
        return dict(self.stats)
