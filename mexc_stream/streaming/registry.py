"""
Subscription Registry
====================

Durable record of what the caller wants subscribed, independent of the
connection state. Entries survive reconnects and are replayed, in the order
they were first added, after every successful open.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Protocol

from ..utils.logger import get_logger

MessageHandler = Callable[[Any], None]


class SubscriptionSender(Protocol):
    """What the registry needs from the connection owner"""

    @property
    def is_open(self) -> bool: ...

    def send_nowait(self, topic: str) -> None: ...


@dataclass
class Subscription:
    """One logical subscription: a topic and the handler for its frames"""
    topic: str
    callback: MessageHandler


class SubscriptionRegistry:
    """
    Mapping topic -> Subscription with insertion order preserved.

    Re-adding a topic replaces its callback (last writer wins) and keeps the
    topic's original replay position.
    """

    def __init__(self):
        self.logger = get_logger('subscription_registry')
        self._subscriptions: Dict[str, Subscription] = {}
        self._sender: Optional[SubscriptionSender] = None

    def attach(self, sender: SubscriptionSender) -> None:
        """Bind the connection that transmits subscribe frames"""
        self._sender = sender

    def add(self, topic: str, callback: MessageHandler) -> Subscription:
        """Store the subscription and send it right away if the connection is open"""
        if topic in self._subscriptions:
            self.logger.debug(f"Replacing callback for {topic}")
        subscription = Subscription(topic=topic, callback=callback)
        self._subscriptions[topic] = subscription

        if self._sender is not None and self._sender.is_open:
            self._sender.send_nowait(topic)
        else:
            self.logger.debug(f"Queued {topic} for replay on next open")
        return subscription

    def replay(self) -> List[str]:
        """Topics to resend after a (re)connect, in first-added order"""
        return list(self._subscriptions)

    def lookup(self, topic: str) -> Optional[MessageHandler]:
        subscription = self._subscriptions.get(topic)
        return subscription.callback if subscription else None

    def match(self, channel: str) -> Optional[Subscription]:
        """
        Find the subscription for an inbound channel tag.

        Exact match first; otherwise the longest registered topic that the tag
        extends with ``@<qualifier>``.
        """
        subscription = self._subscriptions.get(channel)
        if subscription is not None:
            return subscription

        best: Optional[Subscription] = None
        for topic, candidate in self._subscriptions.items():
            if channel.startswith(f"{topic}@") and (best is None or len(topic) > len(best.topic)):
                best = candidate
        return best

    def clear(self) -> None:
        self._subscriptions.clear()

    def __len__(self) -> int:
        return len(self._subscriptions)

    def __contains__(self, topic: object) -> bool:
        return topic in self._subscriptions
