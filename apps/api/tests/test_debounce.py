import asyncio

import pytest

from smartatm.services.debounce import Debouncer


@pytest.mark.asyncio
async def test_burst_of_triggers_fires_once() -> None:
    calls: list[int] = []

    async def callback() -> None:
        calls.append(1)

    debouncer = Debouncer(0.2, callback)
    for _ in range(5):
        debouncer.trigger()
        await asyncio.sleep(0.005)

    await debouncer.flush()

    assert calls == [1]
    assert not debouncer.pending


@pytest.mark.asyncio
async def test_triggers_spaced_beyond_delay_fire_each_time() -> None:
    calls: list[int] = []

    async def callback() -> None:
        calls.append(1)

    debouncer = Debouncer(0.01, callback)
    debouncer.trigger()
    await debouncer.flush()
    debouncer.trigger()
    await debouncer.flush()

    assert calls == [1, 1]


@pytest.mark.asyncio
async def test_cancel_drops_pending_call() -> None:
    calls: list[int] = []

    async def callback() -> None:
        calls.append(1)

    debouncer = Debouncer(0.01, callback)
    debouncer.trigger()
    debouncer.cancel()
    await asyncio.sleep(0.03)

    assert calls == []


@pytest.mark.asyncio
async def test_cancel_stops_callback_already_running() -> None:
    started = asyncio.Event()
    outcome: list[str] = []

    async def slow_search() -> None:
        started.set()
        try:
            await asyncio.sleep(10)
            outcome.append("finished")
        except asyncio.CancelledError:
            outcome.append("cancelled")
            raise

    debouncer = Debouncer(0.01, slow_search)
    debouncer.trigger()
    await asyncio.wait_for(started.wait(), timeout=1)
    assert debouncer.running == 1

    debouncer.cancel()
    await asyncio.sleep(0.01)

    assert outcome == ["cancelled"]
    assert debouncer.running == 0


@pytest.mark.asyncio
async def test_flush_waits_for_every_started_callback() -> None:
    finished: list[int] = []

    async def callback() -> None:
        await asyncio.sleep(0.05)
        finished.append(1)

    debouncer = Debouncer(0.01, callback)
    debouncer.trigger()
    await asyncio.sleep(0.03)
    debouncer.trigger()
    await debouncer.flush()

    assert finished == [1, 1]
    assert debouncer.running == 0
