"""
Push-up repetition counter: two-state hysteresis machine over arm angles.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from rep_errors import MissingKeypoints
from geometry import arm_angles
from pushup_settings import ANGLE_DOWN_THRESHOLD, ANGLE_UP_THRESHOLD

logger = logging.getLogger(__name__)


class RepState(str, Enum):
    UP = "UP"
    DOWN = "DOWN"


@dataclass(frozen=True)
class RepCompleted:
    """One finished push-up (DOWN -> UP)."""

    timestamp: datetime


def local_now():
    return datetime.now().astimezone()


class RepStateMachine:
    """
    State machine for counting push-ups from the shoulder->elbow angle of both arms.

    A rep is counted when:
    1. Both angles drop below down_threshold (UP -> DOWN)
    2. Both angles rise above up_threshold (DOWN -> UP, emits RepCompleted)

    Angles between the two thresholds never change the state, so a single
    noisy angle near one threshold cannot count twice.
    """

    def __init__(self, down_threshold=ANGLE_DOWN_THRESHOLD, up_threshold=ANGLE_UP_THRESHOLD,
                 count=0, clock=local_now):
        """
        Args:
            down_threshold: both angles below this (degrees) -> DOWN
            up_threshold: both angles above this (degrees) -> UP
            count: repetitions already recorded when the session starts
            clock: callable returning the timestamp of a new RepCompleted
        """
        if down_threshold >= up_threshold:
            raise ValueError(
                f"down_threshold ({down_threshold}) must be below up_threshold ({up_threshold})"
            )
        self.down_threshold = down_threshold
        self.up_threshold = up_threshold
        self.clock = clock
        self.state = RepState.UP
        self.count = count

    def is_down(self, left_angle, right_angle):
        return left_angle < self.down_threshold and right_angle < self.down_threshold

    def is_up(self, left_angle, right_angle):
        return left_angle > self.up_threshold and right_angle > self.up_threshold

    def process_frame(self, pose) -> RepCompleted | None:
        """
        Feed one frame.

        Returns:
            RepCompleted if this frame finished a repetition, None otherwise.
            Frames missing a shoulder or elbow leave the state untouched.
        """
        try:
            left, right = arm_angles(pose)
        except MissingKeypoints as exc:
            logger.debug("Frame skipped: %s", exc)
            return None

        if self.state is RepState.UP:
            if self.is_down(left, right):
                self.state = RepState.DOWN
            return None

        if self.is_up(left, right):
            self.state = RepState.UP
            self.count += 1
            event = RepCompleted(timestamp=self.clock())
            logger.info("Push-up %d completed", self.count)
            return event
        return None

    def reset_count(self, count=0):
        self.count = count
