"""
Change feed subscriptions.

Each subscription owns one realtime channel. The transport invokes its
callback synchronously, so events are queued and drained by one consumer
task per subscription; that keeps per-subscription delivery order without
blocking the transport.
"""
import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional

from resolve.logging_config import logger
from resolve.realtime.events import ChangeEvent, ChangeKind, FeedTable

EventCallback = Callable[[ChangeEvent], Awaitable[None]]


@dataclass(frozen=True)
class FeedFilter:
    table: FeedTable
    event: ChangeKind = ChangeKind.ALL
    column: Optional[str] = None
    value: Optional[str] = None

    def as_filter_string(self) -> Optional[str]:
        if self.column is None or self.value is None:
            return None
        return f"{self.column}=eq.{self.value}"


class Subscription:
    """One live subscription: a channel, its queue and its consumer task"""

    def __init__(self, topic: str, feed_filter: FeedFilter, callback: EventCallback):
        self.topic = topic
        self.filter = feed_filter
        self.callback = callback
        self.channel = None
        self.queue: "asyncio.Queue[Dict[str, Any]]" = asyncio.Queue()
        self._task: Optional[asyncio.Task] = None
        self.closed = False

    def enqueue(self, payload: Dict[str, Any]) -> None:
        if not self.closed:
            self.queue.put_nowait(payload)

    def start(self) -> None:
        self._task = asyncio.create_task(self._consume(), name=f"feed:{self.topic}")

    async def _consume(self) -> None:
        while True:
            payload = await self.queue.get()
            try:
                await self._dispatch(payload)
            finally:
                self.queue.task_done()

    async def _dispatch(self, payload: Dict[str, Any]) -> None:
        try:
            event = ChangeEvent.from_payload(payload)
        except ValueError as e:
            logger.warning(f"Dropping malformed change on {self.topic}: {str(e)}")
            return

        try:
            await self.callback(event)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            # One bad event must not end the feed
            logger.error(f"Change handler failed on {self.topic}: {str(e)}")

    async def drain(self) -> None:
        """Wait until every queued event has been handled"""
        await self.queue.join()

    async def stop(self) -> None:
        self.closed = True
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None


class ChangeFeedSubscriber:
    """Opens and releases change feed subscriptions for one view.

    Use as an async context manager so every channel is released when the
    owning view goes away.
    """

    def __init__(self, store, prefix: str):
        self.store = store
        self.prefix = prefix
        self.subscriptions: List[Subscription] = []

    async def subscribe(self, feed_filter: FeedFilter, callback: EventCallback) -> Subscription:
        topic = f"{self.prefix}:{feed_filter.table.value}:{len(self.subscriptions)}"
        subscription = Subscription(topic, feed_filter, callback)
        subscription.start()

        try:
            subscription.channel = await self.store.open_channel(
                topic,
                feed_filter.table.value,
                feed_filter.event.value,
                feed_filter.as_filter_string(),
                subscription.enqueue,
            )
        except Exception:
            await subscription.stop()
            raise

        self.subscriptions.append(subscription)
        logger.info(f"Subscribed to {feed_filter.table.value} changes on {topic}")
        return subscription

    async def unsubscribe(self, subscription: Subscription) -> None:
        await subscription.stop()
        if subscription.channel is not None:
            try:
                await self.store.close_channel(subscription.channel)
            except Exception as e:
                logger.warning(f"Failed to release channel {subscription.topic}: {str(e)}")
            subscription.channel = None
        if subscription in self.subscriptions:
            self.subscriptions.remove(subscription)

    async def drain(self) -> None:
        for subscription in list(self.subscriptions):
            await subscription.drain()

    async def close(self) -> None:
        for subscription in list(self.subscriptions):
            await self.unsubscribe(subscription)

    async def __aenter__(self) -> "ChangeFeedSubscriber":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
