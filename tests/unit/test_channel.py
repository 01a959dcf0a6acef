import asyncio

import pytest

from xmlgraph.shared.channel import Channel
from xmlgraph.shared.errors import ChannelClosed


def test_capacity_must_be_positive():
    with pytest.raises(ValueError):
        Channel(0)


@pytest.mark.asyncio
async def test_items_arrive_in_order_and_stop_at_close():
    channel: Channel[int] = Channel(capacity=5, name="numbers")
    for i in range(3):
        await channel.send(i)
    await channel.close()

    received = [item async for item in channel]
    assert received == [0, 1, 2]
    assert channel.closed


@pytest.mark.asyncio
async def test_none_is_an_ordinary_payload():
    channel: Channel = Channel(capacity=3)
    await channel.send(None)
    await channel.send("x")
    await channel.close()

    assert [item async for item in channel] == [None, "x"]


@pytest.mark.asyncio
async def test_send_after_close_raises():
    channel: Channel[int] = Channel(capacity=2)
    await channel.close()
    with pytest.raises(ChannelClosed):
        await channel.send(1)


@pytest.mark.asyncio
async def test_close_is_idempotent():
    channel: Channel[int] = Channel(capacity=2)
    await channel.send(1)
    await channel.close()
    await channel.close()

    assert [item async for item in channel] == [1]
    # Exhausted channels stay exhausted
    assert [item async for item in channel] == []


@pytest.mark.asyncio
async def test_send_suspends_while_full():
    channel: Channel[int] = Channel(capacity=1)
    await channel.send(1)
    assert channel.qsize() == 1

    blocked = asyncio.create_task(channel.send(2))
    await asyncio.sleep(0)
    assert not blocked.done()

    assert await channel.__anext__() == 1
    await asyncio.wait_for(blocked, timeout=1)
    assert await channel.__anext__() == 2
