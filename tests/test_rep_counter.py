import math
import unittest
from datetime import datetime, timezone

from keypoints import Joint, Keypoint, Pose
from rep_counter import RepCompleted, RepState, RepStateMachine

T0 = datetime(2024, 5, 1, 8, 30, 0, tzinfo=timezone.utc)


def arms_pose(left_deg, right_deg, drop=()):
    """Pose whose shoulder->elbow rays point at the given angles."""
    keypoints = []
    for shoulder, elbow, deg, x0 in (
        (Joint.LEFT_SHOULDER, Joint.LEFT_ELBOW, left_deg, 100.0),
        (Joint.RIGHT_SHOULDER, Joint.RIGHT_ELBOW, right_deg, 300.0),
    ):
        rad = math.radians(deg)
        keypoints.append(Keypoint(shoulder, x0, 200.0, 0.9))
        keypoints.append(Keypoint(elbow, x0 + 80 * math.cos(rad), 200.0 + 80 * math.sin(rad), 0.9))
    return Pose(kp for kp in keypoints if kp.name not in drop)


class RepStateMachineTests(unittest.TestCase):
    def setUp(self) -> None:
        self.machine = RepStateMachine(clock=lambda: T0)

    def test_starts_up_with_zero_count(self) -> None:
        self.assertIs(self.machine.state, RepState.UP)
        self.assertEqual(self.machine.count, 0)

    def test_down_from_up_emits_nothing(self) -> None:
        self.assertIsNone(self.machine.process_frame(arms_pose(90, 90)))
        self.assertIs(self.machine.state, RepState.DOWN)

    def test_repeated_down_frames_never_emit(self) -> None:
        for _ in range(5):
            self.assertIsNone(self.machine.process_frame(arms_pose(80, 95)))
        self.assertIs(self.machine.state, RepState.DOWN)
        self.assertEqual(self.machine.count, 0)

    def test_up_from_down_emits_one_event(self) -> None:
        self.machine.process_frame(arms_pose(90, 90))
        event = self.machine.process_frame(arms_pose(170, 170))
        self.assertEqual(event, RepCompleted(timestamp=T0))
        self.assertIs(self.machine.state, RepState.UP)
        self.assertEqual(self.machine.count, 1)
        self.assertIsNone(self.machine.process_frame(arms_pose(170, 170)))

    def test_one_arm_is_not_enough(self) -> None:
        self.machine.process_frame(arms_pose(90, 130))
        self.assertIs(self.machine.state, RepState.UP)
        self.machine.process_frame(arms_pose(90, 90))
        self.assertIsNone(self.machine.process_frame(arms_pose(170, 150)))
        self.assertIs(self.machine.state, RepState.DOWN)

    def test_dead_zone_keeps_state(self) -> None:
        self.machine.process_frame(arms_pose(130, 130))
        self.assertIs(self.machine.state, RepState.UP)
        self.machine.process_frame(arms_pose(90, 90))
        self.machine.process_frame(arms_pose(130, 130))
        self.assertIs(self.machine.state, RepState.DOWN)

    def test_thresholds_are_strict(self) -> None:
        machine = RepStateMachine(down_threshold=0, up_threshold=90, clock=lambda: T0)
        flat = Pose([
            Keypoint(Joint.LEFT_SHOULDER, 0, 0, 0.9), Keypoint(Joint.LEFT_ELBOW, 80, 0, 0.9),
            Keypoint(Joint.RIGHT_SHOULDER, 0, 0, 0.9), Keypoint(Joint.RIGHT_ELBOW, 80, 0, 0.9),
        ])
        machine.process_frame(flat)
        self.assertIs(machine.state, RepState.UP)

    def test_push_up_scenario(self) -> None:
        states, events = [], []
        for deg in (150, 90, 95, 170):
            events.append(self.machine.process_frame(arms_pose(deg, deg)))
            states.append(self.machine.state)

        self.assertEqual(states, [RepState.UP, RepState.DOWN, RepState.DOWN, RepState.UP])
        self.assertEqual(events[:3], [None, None, None])
        self.assertIsInstance(events[3], RepCompleted)
        self.assertEqual(self.machine.count, 1)

    def test_events_match_down_up_transitions(self) -> None:
        sequence = [150, 90, 120, 170, 170, 95, 99, 161, 130, 80, 165, 40]
        emitted = 0
        transitions = 0
        for deg in sequence:
            before = self.machine.state
            if self.machine.process_frame(arms_pose(deg, deg)) is not None:
                emitted += 1
            if before is RepState.DOWN and self.machine.state is RepState.UP:
                transitions += 1
        self.assertEqual(emitted, 3)
        self.assertEqual(emitted, transitions)
        self.assertEqual(self.machine.count, 3)

    def test_missing_right_elbow_is_a_no_op(self) -> None:
        self.assertIsNone(self.machine.process_frame(arms_pose(90, 90, drop={Joint.RIGHT_ELBOW})))
        self.assertIs(self.machine.state, RepState.UP)

        self.machine.process_frame(arms_pose(90, 90))
        self.assertIsNone(self.machine.process_frame(arms_pose(170, 170, drop={Joint.RIGHT_ELBOW})))
        self.assertIs(self.machine.state, RepState.DOWN)
        self.assertEqual(self.machine.count, 0)

    def test_empty_pose_is_a_no_op(self) -> None:
        self.assertIsNone(self.machine.process_frame(Pose()))
        self.assertIs(self.machine.state, RepState.UP)

    def test_low_scores_still_count(self) -> None:
        low = Pose(Keypoint(kp.name, kp.x, kp.y, 0.01) for kp in arms_pose(90, 90))
        self.machine.process_frame(low)
        self.assertIs(self.machine.state, RepState.DOWN)

    def test_nan_coordinates_do_not_transition(self) -> None:
        nan_pose = Pose([
            Keypoint(Joint.LEFT_SHOULDER, float("nan"), 0, 0.9),
            Keypoint(Joint.LEFT_ELBOW, 0, 0, 0.9),
            Keypoint(Joint.RIGHT_SHOULDER, float("nan"), 0, 0.9),
            Keypoint(Joint.RIGHT_ELBOW, 0, 0, 0.9),
        ])
        self.assertIsNone(self.machine.process_frame(nan_pose))
        self.assertIs(self.machine.state, RepState.UP)
        self.machine.process_frame(arms_pose(90, 90))
        self.assertIsNone(self.machine.process_frame(nan_pose))
        self.assertIs(self.machine.state, RepState.DOWN)

    def test_count_starts_from_given_value(self) -> None:
        machine = RepStateMachine(count=7, clock=lambda: T0)
        machine.process_frame(arms_pose(90, 90))
        machine.process_frame(arms_pose(170, 170))
        self.assertEqual(machine.count, 8)

    def test_custom_thresholds(self) -> None:
        machine = RepStateMachine(down_threshold=60, up_threshold=120, clock=lambda: T0)
        machine.process_frame(arms_pose(90, 90))
        self.assertIs(machine.state, RepState.UP)
        machine.process_frame(arms_pose(50, 50))
        self.assertIsNotNone(machine.process_frame(arms_pose(130, 130)))

    def test_empty_hysteresis_band_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            RepStateMachine(down_threshold=160, up_threshold=160)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
