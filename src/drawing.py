"""
OpenCV overlays: keypoints, skeleton and the counter banner.
"""
import cv2

from keypoints import SKELETON_EDGES
from pushup_settings import MIN_KEYPOINT_SCORE


def to_px(kp):
    return int(round(kp.x)), int(round(kp.y))


def draw_pose(image, pose, min_score=MIN_KEYPOINT_SCORE):
    """
    Draw keypoints (red) and skeleton edges (green) on image, in place.

    Only keypoints scoring above min_score are drawn. This cutoff affects
    rendering only, never counting.
    """
    for kp in pose:
        if kp.score > min_score:
            cv2.circle(image, to_px(kp), 5, (0, 0, 255), -1)

    for a, b in SKELETON_EDGES:
        kp_a, kp_b = pose.get(a), pose.get(b)
        if kp_a and kp_b and kp_a.score > min_score and kp_b.score > min_score:
            cv2.line(image, to_px(kp_a), to_px(kp_b), (0, 255, 0), 2)
    return image


def draw_header(image, count, state, notice=None):
    w = image.shape[1]
    cv2.rectangle(image, (0, 0), (w, 50), (0, 0, 0), -1)
    cv2.putText(image, f"Push-ups: {count}   State: {state.value}",
                (10, 35), cv2.FONT_HERSHEY_SIMPLEX, 0.9, (0, 255, 0), 2)
    if notice:
        cv2.putText(image, notice, (10, 80), cv2.FONT_HERSHEY_SIMPLEX, 0.7, (0, 255, 255), 2)
    return image
