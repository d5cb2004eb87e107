"""Signage rotation: the viewer state machine and the scheduler that drives it.

A viewer starts in ``loading``. The first fetch moves it to ``showing`` index 0
(or ``empty`` with a placeholder). Every rotation interval the current text
fades out, the index advances modulo the number of active messages and the
new text fades in. The active list is re-fetched on its own, slower job
without interrupting a fade in progress.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import asdict, dataclass

from apscheduler.schedulers.asyncio import AsyncIOScheduler

logger = logging.getLogger("voice_signage")

PLACEHOLDER_TEXT = "No messages to display"

STATE_LOADING = "loading"
STATE_EMPTY = "empty"
STATE_SHOWING = "showing"


@dataclass(frozen=True)
class DisplayFrame:
    """What a viewer should render right now."""

    state: str
    text: str
    visible: bool
    index: int
    count: int

    def to_dict(self) -> dict:
        return asdict(self)


class DisplayRotation:
    """Pure rotation state. All timing lives in RotationScheduler."""

    def __init__(self, placeholder: str = PLACEHOLDER_TEXT) -> None:
        self.placeholder = placeholder
        self.messages: list[str] = []
        self.index = 0
        self.visible = False
        self.loaded = False

    @property
    def state(self) -> str:
        if not self.loaded:
            return STATE_LOADING
        if not self.messages:
            return STATE_EMPTY
        return STATE_SHOWING

    @property
    def current_text(self) -> str:
        if not self.messages:
            return self.placeholder
        return self.messages[self.index]

    def load(self, messages: list[str]) -> None:
        """Replace the active list. Keeps the current index when it is still valid."""
        first_load = not self.loaded
        self.messages = list(messages)
        self.loaded = True
        if first_load or self.index >= len(self.messages):
            self.index = 0
        if first_load:
            self.visible = True

    def can_rotate(self) -> bool:
        return len(self.messages) > 1

    def fade_out(self) -> bool:
        """Start a transition. Returns False when there is nothing to rotate to."""
        if not self.can_rotate():
            return False
        self.visible = False
        return True

    def advance(self) -> None:
        self.index = (self.index + 1) % len(self.messages) if self.messages else 0

    def fade_in(self) -> None:
        self.visible = True

    def frame(self) -> DisplayFrame:
        return DisplayFrame(
            state=self.state,
            text=self.current_text,
            visible=self.visible,
            index=self.index,
            count=len(self.messages),
        )


class RotationScheduler:
    """Runs one viewer's rotation and refresh jobs on an AsyncIOScheduler.

    Rotation ticks are fixed-period: each fade starts on the interval tick, so
    the fade duration does not stretch the period.
    """

    def __init__(
        self,
        fetch: Callable[[], Awaitable[list[str]]],
        interval: float = 5.0,
        refresh_interval: float = 30.0,
        fade_out_seconds: float = 0.5,
        fade_in_seconds: float = 0.05,
        rotation: DisplayRotation | None = None,
    ) -> None:
        self.fetch = fetch
        self.interval = interval
        self.refresh_interval = refresh_interval
        self.fade_out_seconds = fade_out_seconds
        self.fade_in_seconds = fade_in_seconds
        self.rotation = rotation or DisplayRotation()
        self._queue: asyncio.Queue[DisplayFrame] = asyncio.Queue()
        self._scheduler: AsyncIOScheduler | None = None
        self._last_frame: DisplayFrame | None = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def _emit(self) -> None:
        frame = self.rotation.frame()
        if frame != self._last_frame:
            self._last_frame = frame
            self._queue.put_nowait(frame)

    async def refresh(self) -> None:
        try:
            messages = await self.fetch()
        except Exception:
            logger.exception("Failed to load display messages")
            if self.rotation.loaded:
                return
            messages = []
        self.rotation.load(messages)
        self._emit()

    async def rotate(self) -> None:
        """One rotation tick: fade out, swap to the next message, fade in."""
        if not self.rotation.fade_out():
            return
        self._emit()
        await asyncio.sleep(self.fade_out_seconds)
        self.rotation.advance()
        self._emit()
        await asyncio.sleep(self.fade_in_seconds)
        self.rotation.fade_in()
        self._emit()

    async def start(self) -> None:
        if self.running:
            return
        await self.refresh()

        scheduler = AsyncIOScheduler()
        scheduler.add_job(
            self.rotate,
            "interval",
            seconds=self.interval,
            id="rotate",
            max_instances=1,
            coalesce=True,
            misfire_grace_time=None,
        )
        scheduler.add_job(
            self.refresh,
            "interval",
            seconds=self.refresh_interval,
            id="refresh",
            max_instances=1,
            coalesce=True,
            misfire_grace_time=None,
        )
        scheduler.start()
        self._scheduler = scheduler

    async def stop(self) -> None:
        """Shut the jobs down. A fade in progress is cancelled."""
        scheduler, self._scheduler = self._scheduler, None
        if scheduler is not None and scheduler.running:
            scheduler.shutdown(wait=False)

    async def frames(self) -> AsyncIterator[DisplayFrame]:
        """Yield frames until the consumer stops iterating; the jobs stop with it."""
        await self.start()
        try:
            while True:
                yield await self._queue.get()
        finally:
            await self.stop()
