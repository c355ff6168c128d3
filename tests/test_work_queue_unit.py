"""
Unit tests: Work queue close-then-drain semantics (WorkQueue).
"""

import asyncio

import pytest

from url_status.constants import STOP_FETCH
from url_status.errors import WorkQueueClosed
from url_status.work_queue import WorkQueue


class TestWorkQueue:
    """url_status.work_queue.WorkQueue"""

    def test_items_come_out_in_fifo_order_then_one_stop_per_consumer(self):
        async def scenario():
            q = WorkQueue(consumers=2)
            for url in ("https://a.example/", "https://b.example/", "https://c.example/"):
                await q.put(url)
            await q.close()
            return [await q.get() for _ in range(5)]

        items = asyncio.run(scenario())
        assert items[:3] == ["https://a.example/", "https://b.example/", "https://c.example/"]
        assert items[3] is STOP_FETCH and items[4] is STOP_FETCH

    def test_put_after_close_raises(self):
        async def scenario():
            q = WorkQueue(consumers=1)
            await q.close()
            await q.put("https://late.example/")

        with pytest.raises(WorkQueueClosed):
            asyncio.run(scenario())

    def test_double_close_raises(self):
        async def scenario():
            q = WorkQueue(consumers=1)
            await q.close()
            await q.close()

        with pytest.raises(WorkQueueClosed):
            asyncio.run(scenario())

    def test_get_blocks_until_item_arrives(self):
        async def scenario():
            q = WorkQueue(consumers=1)
            getter = asyncio.create_task(q.get())
            await asyncio.sleep(0)
            assert not getter.done()
            await q.put("https://x.example/")
            return await asyncio.wait_for(getter, 1.0)

        assert asyncio.run(scenario()) == "https://x.example/"

    def test_counters_and_join(self):
        async def scenario():
            q = WorkQueue(consumers=1)
            await q.put("https://x.example/")
            await q.close()
            assert q.closed
            assert q.enqueued == 1
            for _ in range(2):
                await q.get()
                q.task_done()
            await asyncio.wait_for(q.join(), 1.0)

        asyncio.run(scenario())

    def test_requires_a_consumer(self):
        with pytest.raises(ValueError):
            WorkQueue(consumers=0)
