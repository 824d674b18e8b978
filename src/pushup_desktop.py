# Push-up Counter (desktop)
# - Count by shoulder->elbow angle of both arms (MediaPipe Pose)
# - Hysteresis: DOWN below 100 deg, UP above 160 deg
# - Every push-up is appended to data/history.json
# - Export history as CSV, clear history

import argparse
import asyncio
import logging
from pathlib import Path

import cv2

from drawing import draw_header, draw_pose
from rep_errors import EmptyHistory, PersistenceUnavailable, PoseSourceClosed
from frame_loop import FrameLoop
from pose_source import CameraPoseSource
from rep_history import JsonFileKeyValueStore, RepHistory
from rep_session import PushupSession
from pushup_settings import CAM_INDEX, DRAW_SKELETON, EXPORTS_DIR, HISTORY_FILE, LOG_LEVEL

logger = logging.getLogger(__name__)

WINDOW = "Push-up Counter"


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Count push-ups from a webcam.")
    parser.add_argument("--camera", type=int, default=CAM_INDEX, help="webcam index")
    parser.add_argument("--history-file", type=Path, default=HISTORY_FILE,
                        help="JSON file holding the push-up history")
    parser.add_argument("--export-dir", type=Path, default=EXPORTS_DIR,
                        help="directory for CSV exports")
    return parser.parse_args(argv)


class DesktopDisplay:
    """on_frame hook: draws the overlay, shows the window and handles keys."""

    def __init__(self, source, session, export_dir):
        self.source = source
        self.session = session
        self.export_dir = export_dir
        self.notice = None
        self.loop = None

    def export(self):
        try:
            path = self.session.history.write_csv(self.export_dir)
            self.notice = f"Exported to {path.name}"
        except EmptyHistory as exc:
            self.notice = str(exc)
        except PersistenceUnavailable as exc:
            logger.error("Export failed: %s", exc)
            self.notice = "Export failed (see log)"

    def clear(self):
        try:
            self.session.clear_history()
            self.notice = "History cleared"
        except PersistenceUnavailable as exc:
            logger.error("Clear failed: %s", exc)
            self.notice = "Clear failed (see log)"

    def __call__(self, pose, event):
        frame = self.source.frame
        if frame is None:
            return
        if pose and DRAW_SKELETON:
            draw_pose(frame, pose)
        if self.session.last_error is not None:
            self.notice = "History not saved (see log)"
            self.session.last_error = None
        draw_header(frame, self.session.count, self.session.state, self.notice)
        cv2.putText(frame, "Controls: [q] quit  [e] export CSV  [c] clear history",
                    (10, frame.shape[0] - 15), cv2.FONT_HERSHEY_SIMPLEX, 0.65, (255, 255, 255), 2)
        cv2.imshow(WINDOW, frame)

        key = cv2.waitKey(1) & 0xFF
        if key == ord('q'):
            self.loop.stop()
        elif key == ord('e'):
            self.export()
        elif key == ord('c'):
            self.clear()


async def run(args):
    history = RepHistory(JsonFileKeyValueStore(args.history_file))
    session = PushupSession(history)
    logger.info("Starting with %d push-ups in history", session.count)

    source = CameraPoseSource(args.camera)
    display = DesktopDisplay(source, session, args.export_dir)
    loop = FrameLoop(source, session, on_frame=display)
    display.loop = loop
    try:
        await loop.run()
    finally:
        source.close()
        cv2.destroyAllWindows()
    return session


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        session = asyncio.run(run(args))
    except PoseSourceClosed as exc:
        raise SystemExit(str(exc))
    print(f"\nPush-ups in history: {session.count}")


if __name__ == "__main__":
    main()
