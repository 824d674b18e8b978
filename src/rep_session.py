"""
One counting session: state machine + counter + history, no module globals.
"""
import logging

from rep_errors import PersistenceUnavailable
from rep_counter import RepCompleted, RepStateMachine
from rep_history import RepHistory

logger = logging.getLogger(__name__)


class PushupSession:
    """
    Owns the RepStateMachine and its counter for one session and forwards
    completed push-ups to the history.

    The counter starts at the number of push-ups already in the history.
    Storage failures while counting are logged and kept in last_error; the
    counter has already moved, so the session keeps going.
    """

    def __init__(self, history: RepHistory, machine: RepStateMachine | None = None):
        self.history = history
        self.machine = machine or RepStateMachine()
        self.last_error: PersistenceUnavailable | None = None
        try:
            self.machine.reset_count(len(history))
        except PersistenceUnavailable as exc:
            logger.error("History unavailable, counter starts at 0: %s", exc)
            self.last_error = exc
            self.machine.reset_count(0)

    @property
    def count(self) -> int:
        return self.machine.count

    @property
    def state(self):
        return self.machine.state

    def handle_pose(self, pose) -> RepCompleted | None:
        if not pose:
            return None
        event = self.machine.process_frame(pose)
        if event is None:
            return None
        try:
            self.history.append(event)
        except PersistenceUnavailable as exc:
            logger.error("Could not save push-up %d: %s", self.count, exc)
            self.last_error = exc
        return event

    def entries(self) -> list[RepCompleted]:
        return self.history.list()

    def clear_history(self):
        self.history.clear()
        self.machine.reset_count(0)

    def export_csv(self) -> str:
        return self.history.export_csv()
