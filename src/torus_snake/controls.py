"""Directional input signals and their subscriptions."""

from __future__ import annotations

import logging
from collections.abc import Callable

from torus_snake.snake import Heading

logger = logging.getLogger(__name__)

_KEY_CODES: dict[str, Heading] = {
    "ArrowUp": Heading.UP,
    "ArrowDown": Heading.DOWN,
    "ArrowLeft": Heading.LEFT,
    "ArrowRight": Heading.RIGHT,
}


def parse_signal(signal: object) -> Heading | None:
    """Map an input signal to a heading, or ``None`` if it is not one.

    Accepts :class:`Heading` members, heading names (``"up"``) and arrow
    key codes (``"ArrowUp"``).
    """
    if isinstance(signal, Heading):
        return signal
    if not isinstance(signal, str):
        return None
    if signal in _KEY_CODES:
        return _KEY_CODES[signal]
    try:
        return Heading(signal.lower())
    except ValueError:
        return None


class Subscription:
    """A cancellable registration of a listener on an :class:`InputChannel`."""

    def __init__(self, channel: InputChannel, listener: Callable[[Heading], None]) -> None:
        self._channel = channel
        self.listener = listener
        self.active = True

    def cancel(self) -> None:
        if self.active:
            self.active = False
            self._channel._remove(self)


class InputChannel:
    """Fans heading signals out to the currently subscribed listeners."""

    def __init__(self) -> None:
        self._subscriptions: list[Subscription] = []

    @property
    def listener_count(self) -> int:
        return len(self._subscriptions)

    def subscribe(self, listener: Callable[[Heading], None]) -> Subscription:
        sub = Subscription(self, listener)
        self._subscriptions.append(sub)
        return sub

    def _remove(self, sub: Subscription) -> None:
        if sub in self._subscriptions:
            self._subscriptions.remove(sub)

    def send(self, signal: object) -> bool:
        """Deliver *signal* to every listener.

        Returns ``False`` if the signal is not a heading or nobody listens.
        """
        heading = parse_signal(signal)
        if heading is None:
            logger.debug("Ignoring input signal %r.", signal)
            return False
        if not self._subscriptions:
            return False
        for sub in list(self._subscriptions):
            sub.listener(heading)
        return True
