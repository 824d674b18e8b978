import logging
import threading

import av
import cv2
import streamlit as st
from streamlit_webrtc import webrtc_streamer, WebRtcMode, RTCConfiguration

# reuse your modules (when app lives in src/)
from drawing import draw_header, draw_pose
from rep_errors import EmptyHistory, PersistenceUnavailable
from pose_source import MediaPipePoseEstimator
from rep_history import JsonFileKeyValueStore, RepHistory, format_timestamp
from rep_session import PushupSession
from pushup_settings import DRAW_SKELETON, HISTORY_FILE, LOG_LEVEL

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)


# ------------- Per-browser-session context (video callback runs in another thread) -------------
class LiveContext:
    """Session, estimator and the lock serialising frames against button actions."""

    def __init__(self):
        self.lock = threading.Lock()
        self.session = PushupSession(RepHistory(JsonFileKeyValueStore(HISTORY_FILE)))
        self.estimator = MediaPipePoseEstimator()

    def process(self, img):
        """Process one BGR frame in place; must not use st.session_state (worker thread)."""
        pose = self.estimator.estimate(img)
        with self.lock:
            self.session.handle_pose(pose)
            count, state = self.session.count, self.session.state
        if pose and DRAW_SKELETON:
            draw_pose(img, pose)
        draw_header(img, count, state)
        return img


if "live" not in st.session_state:
    st.session_state.live = LiveContext()
live = st.session_state.live


def video_frame_callback(frame: av.VideoFrame) -> av.VideoFrame:
    img = frame.to_ndarray(format="bgr24")
    img = cv2.flip(img, 1)
    live.process(img)
    return av.VideoFrame.from_ndarray(img, format="bgr24")


def clear_history():
    with live.lock:
        try:
            live.session.clear_history()
            st.session_state.notice = ("success", "History cleared")
        except PersistenceUnavailable as exc:
            logger.error("Clear failed: %s", exc)
            st.session_state.notice = ("error", f"Could not clear history: {exc}")


# ------------- Header -------------
st.title("Push-up Counter")

with live.lock:
    count, state, last_error = live.session.count, live.session.state, live.session.last_error
    live.session.last_error = None

col1, col2 = st.columns(2)
col1.metric("Push-ups", count)
col2.metric("State", state.value)

if last_error is not None:
    st.error(f"Push-up history could not be saved: {last_error}")

# ------------- WebRTC Video -------------
RTC_CONFIGURATION = RTCConfiguration(
    {"iceServers": [{"urls": ["stun:stun.l.google.com:19302"]}]}
)

try:
    webrtc_streamer(
        key="pushup",
        mode=WebRtcMode.SENDRECV,
        rtc_configuration=RTC_CONFIGURATION,
        media_stream_constraints={"video": True, "audio": False},
        video_frame_callback=video_frame_callback,
    )
except Exception as e:
    if "NoSessionError" in type(e).__name__ or "thread context" in str(e).lower():
        st.error(
            "WebRTC needs a proper Streamlit session. **Run the app from a terminal with:**\n\n"
            "`streamlit run src/streamlit_app.py`\n\n"
            "Then open http://localhost:8501 in your browser. Do not run the script with `python` or from an IDE run button."
        )
    else:
        raise

# ------------- History -------------
st.subheader("History")

notice = st.session_state.pop("notice", None)
if notice:
    getattr(st, notice[0])(notice[1])

try:
    entries = live.session.entries()
except PersistenceUnavailable as exc:
    st.error(f"Could not read history: {exc}")
    entries = []

if entries:
    st.dataframe(
        [{"#": i, "Timestamp": format_timestamp(e.timestamp)} for i, e in enumerate(entries, start=1)],
        hide_index=True,
    )
else:
    st.caption("No push-ups recorded yet.")

col_a, col_b = st.columns(2)
try:
    csv_text = live.session.export_csv()
except EmptyHistory as exc:
    col_a.warning(str(exc))
except PersistenceUnavailable as exc:
    col_a.error(f"Could not export history: {exc}")
else:
    col_a.download_button("💾 Export CSV", csv_text, file_name="pushup_history.csv", mime="text/csv")

col_b.button("🗑️ Clear history", on_click=clear_history)
