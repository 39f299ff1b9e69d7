"""
mirrorcache.services.partitions — Per-Partition Ordered Application
====================================================================

The synchronizer must see the events of one partition (a guild, or the
user-global stream) strictly in arrival order, while different partitions
are independent.  :class:`PartitionRouter` gives each partition its own
FIFO queue drained by its own worker task.

A failed event is logged and skipped; the worker moves on to the next one.
A partition whose guild was deleted is retired once its queue is empty;
a later event for that guild starts a fresh one.
Partial state left behind is repaired by the next GUILD_CREATE snapshot.

Usage::

    router = PartitionRouter(EventSynchronizer(backend))
    router.submit(event)          # non-blocking, call in arrival order
    await router.join()           # wait until every queue is drained
    await router.close()          # cancel the workers
"""

from __future__ import annotations

import asyncio
import logging

from mirrorcache.engine.events import EventType, GatewayEvent
from mirrorcache.services.synchronizer import EventSynchronizer

logger = logging.getLogger(__name__)


def _ends_partition(event: GatewayEvent) -> bool:
    """A real GUILD_DELETE: nothing more will arrive for that guild."""
    return event.type is EventType.GUILD_DELETE and not event.payload.unavailable


class PartitionRouter:
    def __init__(self, synchronizer: EventSynchronizer) -> None:
        self.synchronizer = synchronizer
        self._queues: dict[int | None, asyncio.Queue[GatewayEvent]] = {}
        self._workers: dict[int | None, asyncio.Task] = {}
        self.applied = 0
        self.failed = 0

    @property
    def partitions(self) -> list[int | None]:
        return list(self._queues)

    def submit(self, event: GatewayEvent) -> None:
        """Queue *event* behind earlier events of the same partition.

        Must be called from inside the running event loop.
        """
        key = event.partition
        queue = self._queues.get(key)
        if queue is None:
            queue = asyncio.Queue()
            self._queues[key] = queue
            self._workers[key] = asyncio.get_running_loop().create_task(
                self._drain(key, queue), name=f"mirrorcache-partition-{key}"
            )
        queue.put_nowait(event)

    async def _drain(self, key: int | None, queue: asyncio.Queue[GatewayEvent]) -> None:
        while True:
            event = await queue.get()
            try:
                await self.synchronizer.apply(event)
                self.applied += 1
            except Exception:
                self.failed += 1
                logger.exception("Failed to apply %s (partition %s)", event.type, key)
            finally:
                queue.task_done()

            if _ends_partition(event) and queue.empty():
                self._forget(key)
                return

    def _forget(self, key: int | None) -> None:
        self._queues.pop(key, None)
        self._workers.pop(key, None)
        logger.debug("Partition %s retired", key)

    async def join(self) -> None:
        """Wait until every event submitted so far has been applied or skipped."""
        for queue in list(self._queues.values()):
            await queue.join()

    async def close(self) -> None:
        workers = list(self._workers.values())
        for task in workers:
            task.cancel()
        await asyncio.gather(*workers, return_exceptions=True)
        self._workers.clear()
        self._queues.clear()
        logger.info(
            "Partition router closed (%d applied, %d failed)", self.applied, self.failed
        )
