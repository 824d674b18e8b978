"""
Planar angle helpers for the push-up arm pattern.
"""
import numpy as np

from rep_errors import MissingKeypoints
from keypoints import Joint

ARM_JOINTS = (
    Joint.LEFT_SHOULDER, Joint.LEFT_ELBOW,
    Joint.RIGHT_SHOULDER, Joint.RIGHT_ELBOW,
)


def angle_degrees(origin, ray):
    """
    Direction of the ray origin -> ray, in degrees.

    Args:
        origin: Keypoint the ray starts from (e.g. shoulder)
        ray: Keypoint the ray points to (e.g. elbow)

    Returns:
        Angle in (-180, 180]. NaN coordinates give NaN.
    """
    deg = float(np.degrees(np.arctan2(ray.y - origin.y, ray.x - origin.x)))
    if deg == -180.0:
        return 180.0
    return deg


def arm_angles(pose):
    """
    Shoulder->elbow angle of both arms.

    Returns:
        Tuple (left_angle, right_angle) in degrees

    Raises:
        MissingKeypoints: if any shoulder or elbow is absent. Scores are not checked.
    """
    missing = [joint for joint in ARM_JOINTS if pose.get(joint) is None]
    if missing:
        raise MissingKeypoints(missing)

    left = angle_degrees(pose.get(Joint.LEFT_SHOULDER), pose.get(Joint.LEFT_ELBOW))
    right = angle_degrees(pose.get(Joint.RIGHT_SHOULDER), pose.get(Joint.RIGHT_ELBOW))
    return left, right
