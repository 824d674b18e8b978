"""
Joint vocabulary and per-frame pose model.
"""
from dataclasses import dataclass
from enum import Enum


class Joint(str, Enum):
    """MoveNet / COCO keypoint names."""

    NOSE = "nose"
    LEFT_EYE = "left_eye"
    RIGHT_EYE = "right_eye"
    LEFT_EAR = "left_ear"
    RIGHT_EAR = "right_ear"
    LEFT_SHOULDER = "left_shoulder"
    RIGHT_SHOULDER = "right_shoulder"
    LEFT_ELBOW = "left_elbow"
    RIGHT_ELBOW = "right_elbow"
    LEFT_WRIST = "left_wrist"
    RIGHT_WRIST = "right_wrist"
    LEFT_HIP = "left_hip"
    RIGHT_HIP = "right_hip"
    LEFT_KNEE = "left_knee"
    RIGHT_KNEE = "right_knee"
    LEFT_ANKLE = "left_ankle"
    RIGHT_ANKLE = "right_ankle"


# MoveNet adjacent pairs, used to draw the skeleton
SKELETON_EDGES = [
    (Joint.NOSE, Joint.LEFT_EYE), (Joint.NOSE, Joint.RIGHT_EYE),
    (Joint.LEFT_EYE, Joint.LEFT_EAR), (Joint.RIGHT_EYE, Joint.RIGHT_EAR),
    (Joint.LEFT_SHOULDER, Joint.RIGHT_SHOULDER),
    (Joint.LEFT_SHOULDER, Joint.LEFT_ELBOW), (Joint.LEFT_SHOULDER, Joint.LEFT_HIP),
    (Joint.RIGHT_SHOULDER, Joint.RIGHT_ELBOW), (Joint.RIGHT_SHOULDER, Joint.RIGHT_HIP),
    (Joint.LEFT_ELBOW, Joint.LEFT_WRIST), (Joint.RIGHT_ELBOW, Joint.RIGHT_WRIST),
    (Joint.LEFT_HIP, Joint.RIGHT_HIP),
    (Joint.LEFT_HIP, Joint.LEFT_KNEE), (Joint.RIGHT_HIP, Joint.RIGHT_KNEE),
    (Joint.LEFT_KNEE, Joint.LEFT_ANKLE), (Joint.RIGHT_KNEE, Joint.RIGHT_ANKLE),
]


@dataclass(frozen=True)
class Keypoint:
    """Single detected landmark in image coordinates with a confidence score."""

    name: Joint
    x: float
    y: float
    score: float = 1.0


class Pose:
    """
    Keypoints detected for one person in one frame.

    At most one keypoint is kept per joint; when the source reports a joint
    twice the first occurrence wins.
    """

    def __init__(self, keypoints=()):
        self._by_joint = {}
        for kp in keypoints:
            self._by_joint.setdefault(Joint(kp.name), kp)

    def get(self, joint):
        return self._by_joint.get(joint)

    def __contains__(self, joint):
        return joint in self._by_joint

    def __iter__(self):
        return iter(self._by_joint.values())

    def __len__(self):
        return len(self._by_joint)

    def __repr__(self):
        return f"Pose({list(self._by_joint.values())!r})"
