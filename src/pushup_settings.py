# All config in one place

from pathlib import Path

# Angle thresholds (degrees) for the shoulder->elbow ray, both arms
ANGLE_UP_THRESHOLD = 160      # "UP" (arm extended)
ANGLE_DOWN_THRESHOLD = 100    # "DOWN" (arm bent)

# Rendering only: keypoints below this score are not drawn
MIN_KEYPOINT_SCORE = 0.5

# Video
CAM_INDEX = 0                 # webcam index
DRAW_SKELETON = True          # draw keypoints and skeleton
FRAME_INTERVAL_SECONDS = 1 / 60  # ~ one display refresh

# MediaPipe Pose
MODEL_COMPLEXITY = 1
MIN_DETECTION_CONFIDENCE = 0.6
MIN_TRACKING_CONFIDENCE = 0.6

# History (always inside the project folder: data/)
_PROJECT_ROOT = Path(__file__).resolve().parents[1]
DATA_DIR = _PROJECT_ROOT / "data"
HISTORY_FILE = DATA_DIR / "history.json"
EXPORTS_DIR = DATA_DIR / "exports"
HISTORY_KEY = "pushupHistory"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

# Logging
LOG_LEVEL = "INFO"
