"""
Cancellable per-frame pump: wait for the next tick, await one pose, drive the session.
"""
import asyncio
import logging

from rep_errors import PoseSourceClosed
from pushup_settings import FRAME_INTERVAL_SECONDS

logger = logging.getLogger(__name__)


class FrameLoop:
    """
    Repeating task feeding poses to a PushupSession in arrival order.

    Each tick has exactly two suspension points (the tick wait and the pose
    estimate); the session update after them runs synchronously, so frames
    never overlap. stop() lets the current tick finish and schedules no more.
    """

    def __init__(self, source, session, interval=FRAME_INTERVAL_SECONDS, on_frame=None):
        """
        Args:
            source: object with `async estimate() -> Pose | None`
            session: PushupSession receiving each pose
            interval: seconds to wait before each tick
            on_frame: optional callable(pose, event) run after each tick
        """
        self.source = source
        self.session = session
        self.interval = interval
        self.on_frame = on_frame
        self.ticks = 0
        self._stopped = asyncio.Event()

    @property
    def stopped(self):
        return self._stopped.is_set()

    def stop(self):
        self._stopped.set()

    async def _wait_tick(self):
        # Returns early when stop() is called while waiting
        try:
            await asyncio.wait_for(self._stopped.wait(), timeout=self.interval)
        except asyncio.TimeoutError:
            pass

    async def run(self):
        while not self.stopped:
            await self._wait_tick()
            if self.stopped:
                break
            try:
                pose = await self.source.estimate()
                event = self.session.handle_pose(pose)
                if self.on_frame is not None:
                    self.on_frame(pose, event)
            except PoseSourceClosed as exc:
                logger.info("Pose source closed: %s", exc)
                self.stop()
            except Exception:
                logger.exception("Frame %d failed, continuing", self.ticks)
            self.ticks += 1
        logger.info("Frame loop stopped after %d ticks", self.ticks)
