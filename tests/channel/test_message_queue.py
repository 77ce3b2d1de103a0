"""
Test suite for MessageQueue and the message types.
"""

import asyncio
import threading

import pytest

from stdout_channel.channel._message_queue import CLOSE, Close, Mesg, MessageQueue

pytestmark = pytest.mark.unit


class TestMessages:

    def test_close_is_singleton(self):
        assert Close() is CLOSE
        assert repr(CLOSE) == "CLOSE"

    def test_mesg_compares_by_value(self):
        assert Mesg("a") == Mesg("a")
        assert Mesg("a") != Mesg("b")


class TestMessageQueue:

    def test_requires_running_loop(self):
        with pytest.raises(RuntimeError):
            MessageQueue()

    @pytest.mark.asyncio
    async def test_fifo_order(self):
        queue = MessageQueue()
        for i in range(5):
            queue.push(Mesg(i))
        queue.push(CLOSE)
        assert len(queue) == 6
        popped = [await queue.pop() for _ in range(6)]
        assert popped == [Mesg(0), Mesg(1), Mesg(2), Mesg(3), Mesg(4), CLOSE]
        assert len(queue) == 0

    @pytest.mark.asyncio
    async def test_pop_waits_for_push(self):
        queue = MessageQueue()
        getter = asyncio.create_task(queue.pop())
        await asyncio.sleep(0)
        assert not getter.done()
        queue.push(Mesg("late"))
        assert await asyncio.wait_for(getter, timeout=1) == Mesg("late")

    @pytest.mark.asyncio
    async def test_push_from_other_threads(self):
        queue = MessageQueue()

        def produce(tag):
            for i in range(50):
                queue.push(Mesg((tag, i)))

        threads = [threading.Thread(target=produce, args=(t,)) for t in "ab"]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        received = [(await asyncio.wait_for(queue.pop(), timeout=1)).item for _ in range(100)]
        for tag in "ab":
            assert [i for t, i in received if t == tag] == list(range(50))
