"""
Pose source: OpenCV webcam capture + MediaPipe Pose, converted to the Joint vocabulary.
"""
import asyncio
import logging

import cv2

from rep_errors import PoseSourceClosed
from keypoints import Joint, Keypoint, Pose
from pushup_settings import (
    CAM_INDEX, MODEL_COMPLEXITY,
    MIN_DETECTION_CONFIDENCE, MIN_TRACKING_CONFIDENCE,
)

logger = logging.getLogger(__name__)

# MediaPipe Pose landmark index for each joint (mp.solutions.pose.PoseLandmark)
MEDIAPIPE_LANDMARKS = {
    Joint.NOSE: 0,
    Joint.LEFT_EYE: 2,
    Joint.RIGHT_EYE: 5,
    Joint.LEFT_EAR: 7,
    Joint.RIGHT_EAR: 8,
    Joint.LEFT_SHOULDER: 11,
    Joint.RIGHT_SHOULDER: 12,
    Joint.LEFT_ELBOW: 13,
    Joint.RIGHT_ELBOW: 14,
    Joint.LEFT_WRIST: 15,
    Joint.RIGHT_WRIST: 16,
    Joint.LEFT_HIP: 23,
    Joint.RIGHT_HIP: 24,
    Joint.LEFT_KNEE: 25,
    Joint.RIGHT_KNEE: 26,
    Joint.LEFT_ANKLE: 27,
    Joint.RIGHT_ANKLE: 28,
}


def landmarks_to_pose(landmarks, width, height) -> Pose:
    """
    Convert normalized MediaPipe landmarks to a pixel-space Pose.

    Args:
        landmarks: sequence of objects with x, y (0..1) and visibility
        width, height: frame size in pixels

    Returns:
        Pose with one keypoint per joint; score is the landmark visibility.
    """
    keypoints = []
    for joint, idx in MEDIAPIPE_LANDMARKS.items():
        if idx >= len(landmarks):
            continue
        lm = landmarks[idx]
        keypoints.append(Keypoint(
            name=joint,
            x=lm.x * width,
            y=lm.y * height,
            score=float(lm.visibility),
        ))
    return Pose(keypoints)


class MediaPipePoseEstimator:
    """Lazy-init MediaPipe Pose; one BGR image in, one Pose (or None) out."""

    def __init__(self, model_complexity=MODEL_COMPLEXITY,
                 min_detection_confidence=MIN_DETECTION_CONFIDENCE,
                 min_tracking_confidence=MIN_TRACKING_CONFIDENCE):
        self.model_complexity = model_complexity
        self.min_detection_confidence = min_detection_confidence
        self.min_tracking_confidence = min_tracking_confidence
        self._pose = None

    def _processor(self):
        if self._pose is None:
            import mediapipe as mp
            self._pose = mp.solutions.pose.Pose(
                static_image_mode=False,
                model_complexity=self.model_complexity,
                enable_segmentation=False,
                min_detection_confidence=self.min_detection_confidence,
                min_tracking_confidence=self.min_tracking_confidence,
                smooth_landmarks=True,
            )
        return self._pose

    def estimate(self, image_bgr) -> Pose | None:
        h, w = image_bgr.shape[:2]
        rgb = cv2.cvtColor(image_bgr, cv2.COLOR_BGR2RGB)
        res = self._processor().process(rgb)
        if not res.pose_landmarks:
            return None
        return landmarks_to_pose(res.pose_landmarks.landmark, w, h)

    def close(self):
        if self._pose is not None:
            self._pose.close()
            self._pose = None


class CameraPoseSource:
    """
    Webcam frames through MediaPipe, one estimate per call.

    The last (mirrored) frame is kept in `frame` so the caller can draw on it.
    """

    def __init__(self, cam_index=CAM_INDEX, estimator=None):
        self.cam_index = cam_index
        self.estimator = estimator or MediaPipePoseEstimator()
        self.frame = None
        self.cap = cv2.VideoCapture(cam_index)
        if not self.cap.isOpened():
            raise PoseSourceClosed(f"Could not access webcam (index {cam_index}).")

    def _read_and_estimate(self):
        ok, frame = self.cap.read()
        if not ok:
            raise PoseSourceClosed(f"No frame from webcam (index {self.cam_index}).")
        frame = cv2.flip(frame, 1)
        return frame, self.estimator.estimate(frame)

    async def estimate(self) -> Pose | None:
        self.frame, pose = await asyncio.to_thread(self._read_and_estimate)
        return pose

    def close(self):
        self.cap.release()
        self.estimator.close()
