import asyncio

from src.blinko_ics.scheduler import start_scheduler, stop_scheduler, sync_forever
from src.blinko_ics.settings import get_settings


async def wait_for_calls(calls, count):
    while len(calls) < count:
        await asyncio.sleep(0.005)


class TestSyncForever:
    def test_runs_until_stopped_and_survives_failures(self):
        calls = []

        def run_once():
            calls.append(len(calls))
            if len(calls) == 1:
                raise RuntimeError("note API down")

        async def scenario():
            stop = asyncio.Event()
            task = asyncio.create_task(sync_forever(0.01, run_once, stop=stop))
            await asyncio.wait_for(wait_for_calls(calls, 3), timeout=5)
            stop.set()
            await asyncio.wait_for(task, timeout=5)
            return task

        task = asyncio.run(scenario())
        assert task.done() and not task.cancelled()
        assert calls[:3] == [0, 1, 2]


class TestStopScheduler:
    def test_cancels_and_awaits_loop(self):
        calls = []

        async def scenario():
            task = asyncio.create_task(sync_forever(3600, lambda: calls.append(1)))
            await asyncio.wait_for(wait_for_calls(calls, 1), timeout=5)
            await stop_scheduler(task)
            return task

        task = asyncio.run(scenario())
        assert task.cancelled()
        assert calls == [1]

    def test_nothing_to_stop(self):
        asyncio.run(stop_scheduler(None))


class TestStartScheduler:
    def test_disabled_by_zero_interval(self, monkeypatch):
        monkeypatch.setenv("SYNC_INTERVAL_MINUTES", "0")
        monkeypatch.setenv("BLINKO_API_BASE", "https://blinko.example.com/api/v1")
        monkeypatch.setenv("BLINKO_TOKEN", "header.payload.signature")
        assert start_scheduler(get_settings()) is None

    def test_disabled_without_note_api(self, monkeypatch):
        monkeypatch.setenv("SYNC_INTERVAL_MINUTES", "60")
        monkeypatch.delenv("BLINKO_API_BASE", raising=False)
        monkeypatch.delenv("BLINKO_TOKEN", raising=False)
        assert start_scheduler(get_settings()) is None
