"""Real-time driver for the orchestrator.

The frame loop runs as a background asyncio task that calls
``Orchestrator.advance(dt)`` once per frame, measuring ``dt`` from the event
loop clock. All orchestrator mutation therefore stays on the event loop
thread.
"""

import asyncio
from collections.abc import Callable

from pulpit.core.orchestrator import FrameReport, Orchestrator
from pulpit.utils.errors import InvalidConfiguration, NotRunningError
from pulpit.utils.telemetry import get_logger

FrameCallback = Callable[[FrameReport], None]


class FrameLoop:
    """Background task advancing an orchestrator at a fixed frame rate."""

    def __init__(
        self,
        orchestrator: Orchestrator,
        frame_rate: float = 60.0,
        max_frame_dt: float = 0.1,
        on_frame: FrameCallback | None = None,
    ):
        """Initialize frame loop.

        Args:
            orchestrator: Running orchestrator to drive
            frame_rate: Target frames per second
            max_frame_dt: Upper bound on dt for a single frame, so a stalled
                event loop does not collapse seconds of countdown into one step
            on_frame: Called with each frame's report
        """
        if not frame_rate > 0:
            raise InvalidConfiguration("frame_rate", frame_rate, "must be positive")
        if not max_frame_dt > 0:
            raise InvalidConfiguration(
                "max_frame_dt", max_frame_dt, "must be positive"
            )

        self.orchestrator = orchestrator
        self.frame_interval = 1.0 / frame_rate
        self.max_frame_dt = max_frame_dt
        self.on_frame = on_frame
        self.frames: int = 0

        self._task: asyncio.Task[None] | None = None
        self._shutdown_event = asyncio.Event()
        self._logger = get_logger("pulpit.frame_loop")

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the background task. Must be called from a running loop."""
        if not self.orchestrator.is_running:
            raise NotRunningError("start the frame loop")
        if self.running:
            return

        self._shutdown_event.clear()
        self._task = asyncio.create_task(self._run())
        self._logger.info(
            "frame_loop_started", frame_interval=round(self.frame_interval, 6)
        )

    async def stop(self) -> None:
        """Signal the task to stop and wait for it to finish.

        Re-raises any exception that ended the loop.
        """
        if self._task is None:
            return
        self._shutdown_event.set()
        task, self._task = self._task, None
        await task
        self._logger.info("frame_loop_stopped", frames=self.frames)

    async def run_for(self, seconds: float) -> int:
        """Run frames for ``seconds`` of event loop time and return the count."""
        start_frames = self.frames
        self.start()
        try:
            await asyncio.sleep(seconds)
        finally:
            await self.stop()
        return self.frames - start_frames

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        last = loop.time()

        while not self._shutdown_event.is_set():
            try:
                await asyncio.wait_for(
                    self._shutdown_event.wait(), timeout=self.frame_interval
                )
                break
            except asyncio.TimeoutError:
                pass

            now = loop.time()
            dt = min(now - last, self.max_frame_dt)
            last = now

            try:
                report = self.orchestrator.advance(dt)
            except Exception as e:
                self._logger.error("frame_advance_failed", error=str(e))
                raise

            self.frames += 1
            if self.on_frame is not None:
                self.on_frame(report)
