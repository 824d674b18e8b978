"""Errors raised by the push-up counter."""


class PushupCounterError(Exception):
    """Base class for every error raised by this project."""


class MissingKeypoints(PushupCounterError):
    """One or more joints needed for the arm angles are absent from a pose."""

    def __init__(self, missing):
        self.missing = tuple(missing)
        names = ", ".join(joint.value for joint in self.missing)
        super().__init__(f"Missing keypoints: {names}")


class EmptyHistory(PushupCounterError):
    """Export was requested but no repetition has been recorded."""

    def __init__(self):
        super().__init__("No push-ups recorded yet, nothing to export.")


class PersistenceUnavailable(PushupCounterError):
    """The history backend could not be read or written."""


class InvalidStoredData(PushupCounterError):
    """The persisted history cannot be decoded."""


class PoseSourceClosed(PushupCounterError):
    """The camera or stream feeding the pose source has ended."""
