import asyncio

import pytest

from newscache.channel import StateChannel


def test_value_requires_a_publish():
    channel = StateChannel()
    assert not channel.has_value
    with pytest.raises(LookupError):
        channel.value
    channel.publish(1)
    assert channel.value == 1


def test_distinct_channel_drops_equal_values():
    channel = StateChannel(1)
    assert not channel.publish(1)
    assert channel.publish(2)
    assert StateChannel(1, distinct=False).publish(1)


def test_subscriber_sees_current_then_latest():
    async def scenario():
        channel = StateChannel("a")
        received = []

        async def consume():
            async for value in channel.subscribe():
                received.append(value)

        task = asyncio.create_task(consume())
        await asyncio.sleep(0)
        channel.publish("b")
        channel.publish("c")
        await asyncio.sleep(0.01)
        channel.close()
        await asyncio.wait_for(task, 1)
        return received

    received = asyncio.run(scenario())
    assert received[0] == "a"
    assert received[-1] == "c"
    assert "b" not in received or received == ["a", "b", "c"]


def test_closed_channel_delivers_nothing_more():
    async def scenario():
        channel = StateChannel(1)
        channel.close()
        assert not channel.publish(2)
        return [value async for value in channel.subscribe()]

    assert asyncio.run(scenario()) == []
