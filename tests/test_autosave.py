import asyncio
import threading

from herald.builder.autosave import AutoSaver
from herald.builder.client import ApiError
from herald.builder.wizard import WizardController


class CountingClient:
    def __init__(self, error=None):
        self.saves = []
        self.error = error

    def save_draft(self, content, tier, slug=None, *, auto_save=False):
        self.saves.append(auto_save)
        if self.error:
            raise self.error
        return {"profile": {"id": "p1", "slug": slug}}


def _ticking_sleep(ticks: int):
    """Returns (sleep, done): sleep returns at once ``ticks`` times, then blocks."""
    done = asyncio.Event()
    calls = []

    async def sleep(seconds):
        calls.append(seconds)
        if len(calls) > ticks:
            done.set()
            await asyncio.Event().wait()

    return sleep, done, calls


def _run(controller, ticks, interval=30):
    async def scenario():
        sleep, done, calls = _ticking_sleep(ticks)
        saver = AutoSaver(controller, interval, sleep=sleep)
        saver.start()
        assert saver.running
        await asyncio.wait_for(done.wait(), timeout=5)
        await saver.stop()
        return saver, calls

    return asyncio.run(scenario())


class TestAutoSaver:
    def test_saves_every_tick(self):
        client = CountingClient()
        w = WizardController(client)
        w.select_tier("elite")
        w.update(name="Jane Doe")
        saver, calls = _run(w, ticks=3)
        assert saver.ticks == 3
        assert client.saves == [True, True, True]
        assert calls[:3] == [30, 30, 30]
        assert saver.running is False

    def test_short_name_ticks_without_requests(self):
        client = CountingClient()
        w = WizardController(client)
        w.update(name="J")
        saver, _ = _run(w, ticks=2)
        assert saver.ticks == 2
        assert client.saves == []

    def test_failures_keep_the_timer_alive(self):
        client = CountingClient(error=ApiError(500, "Internal server error"))
        w = WizardController(client)
        w.select_tier("rising")
        w.update(name="Jane Doe")
        saver, _ = _run(w, ticks=2)
        assert len(client.saves) == 2
        assert w.notifications.items == []

    def test_stop_without_start(self):
        saver = AutoSaver(WizardController(CountingClient()))
        asyncio.run(saver.stop())
        assert saver.running is False

    def test_start_is_idempotent(self):
        async def scenario():
            sleep, _, _ = _ticking_sleep(0)
            saver = AutoSaver(WizardController(CountingClient()), sleep=sleep)
            saver.start()
            first = saver._task
            saver.start()
            assert saver._task is first
            await saver.stop()

        asyncio.run(scenario())


class BlockingClient:
    """save_draft parks in its worker thread until ``release`` is set."""

    def __init__(self):
        self.started = threading.Event()
        self.release = threading.Event()
        self.finished = threading.Event()

    def save_draft(self, content, tier, slug=None, *, auto_save=False):
        self.started.set()
        self.release.wait(5)
        self.finished.set()
        return {"profile": {"id": "p1", "slug": slug}}


class TestStopDuringSave:
    def test_in_flight_save_completes_after_stop(self):
        client = BlockingClient()
        w = WizardController(client)
        w.select_tier("elite")
        w.update(name="Jane Doe")

        async def scenario():
            sleep, _, _ = _ticking_sleep(1)
            saver = AutoSaver(w, sleep=sleep)
            saver.start()
            assert await asyncio.to_thread(client.started.wait, 5)
            await saver.stop()
            assert saver.running is False
            assert not client.finished.is_set()
            client.release.set()
            assert await asyncio.to_thread(client.finished.wait, 5)

        asyncio.run(scenario())
        assert client.finished.is_set()
        assert w.state.slug.startswith("jane-doe-")
