"""
Push-style sink for connector objects.

A sync driver hands objects to the handler one at a time together with the
sync timestamp; the handler answers whether the driver should keep going.
"""

import logging
from typing import Callable

from .objects import ConnectorObject

logger = logging.getLogger(__name__)

HandlerCallback = Callable[[ConnectorObject, int], bool]


class HandlerWrapper:
    """
    Wraps a handler callback and tracks delivery.

    Usage:
        handler = HandlerWrapper(lambda obj, ts: store.write(obj, ts))
        definition.sync(since, handler, OperationOptions())
        print(handler.handled)
    """

    def __init__(self, callback: HandlerCallback):
        self.callback = callback
        self.handled = 0
        self.stopped = False

    def handle(self, obj: ConnectorObject, timestamp_ms: int) -> bool:
        """
        Deliver one object.

        Args:
            obj: Connector object to deliver
            timestamp_ms: Sync timestamp in epoch milliseconds

        Returns:
            False when the consumer wants the sync to stop
        """
        self.handled += 1
        keep_going = bool(self.callback(obj, timestamp_ms))
        if not keep_going:
            self.stopped = True
            logger.info(f"Handler requested stop after {self.handled} objects")
        return keep_going
