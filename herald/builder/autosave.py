import asyncio
from typing import Awaitable, Callable, Optional

from herald.shared.config import AUTO_SAVE_INTERVAL_SEC
from herald.shared.logging import get_logger
from .wizard import WizardController

logger = get_logger("builder.autosave")


class AutoSaver:
    """
    Fixed-interval auto-save for one wizard.

    Each tick runs ``controller.auto_save`` in a worker thread. ``stop()``
    ends the timer but a save already in flight runs to completion.
    Manual saves are not excluded; the last response wins.
    """

    def __init__(
        self,
        controller: WizardController,
        interval: float = AUTO_SAVE_INTERVAL_SEC,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.controller = controller
        self.interval = interval
        self._sleep = sleep
        self._task: Optional[asyncio.Task] = None
        self.ticks = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def _run(self) -> None:
        while True:
            await self._sleep(self.interval)
            self.ticks += 1
            issued = await asyncio.shield(asyncio.to_thread(self.controller.auto_save))
            if not issued:
                logger.debug("auto-save skipped: name too short")

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
