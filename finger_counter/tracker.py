"""
MediaPipe Hands adapter: detects hands in frames and draws the overlay.
"""
import logging
import cv2
import mediapipe as mp
import numpy as np
from typing import List, Optional

from .config import DisplayConfig, MediaPipeConfig
from .gestures import gesture_label
from .landmarks import FINGER_TIPS, label_anchor, to_landmarks
from .types import DetectedHand, FrameResult, HandResult

logger = logging.getLogger(__name__)


class HandsTracker:
    """Hand landmark tracker using MediaPipe Hands."""

    def __init__(self, cfg: Optional[MediaPipeConfig] = None, static_image_mode: bool = False):
        """
        Initialize the hands tracker.

        Args:
            cfg: Detector settings, passed through to MediaPipe unchanged
            static_image_mode: Treat every frame as an unrelated image
        """
        self.cfg = cfg if cfg is not None else MediaPipeConfig()
        self.static_image_mode = static_image_mode
        self.mp_hands = mp.solutions.hands
        self.hands = self._create_hands()

    def _create_hands(self):
        logger.debug(f"Creating MediaPipe Hands with {self.cfg}")
        return self.mp_hands.Hands(
            static_image_mode=self.static_image_mode,
            max_num_hands=self.cfg.max_num_hands,
            model_complexity=self.cfg.model_complexity,
            min_detection_confidence=self.cfg.min_detection_confidence,
            min_tracking_confidence=self.cfg.min_tracking_confidence
        )

    def update_settings(self, **changes) -> None:
        """
        Rebuild the detector with new settings.

        Args:
            changes: MediaPipeConfig fields to override
        """
        for name, value in changes.items():
            if not hasattr(self.cfg, name):
                raise ValueError(f"Unknown detector setting: {name}")
            setattr(self.cfg, name, value)

        self.hands.close()
        self.hands = self._create_hands()
        logger.info(f"Detector settings updated: {changes}")

    def process(self, frame_bgr: np.ndarray) -> List[DetectedHand]:
        """
        Process a frame and return the detected hands.

        Args:
            frame_bgr: Input frame in BGR format

        Returns:
            One DetectedHand per hand found, empty if none
        """
        # Convert BGR to RGB for MediaPipe
        frame_rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
        results = self.hands.process(frame_rgb)

        if not results.multi_hand_landmarks:
            return []

        hands = []
        for hand_landmarks, handedness in zip(results.multi_hand_landmarks, results.multi_handedness):
            hands.append(DetectedHand(
                landmarks=to_landmarks(hand_landmarks.landmark),
                handedness=handedness.classification[0].label
            ))
        return hands

    def draw_landmarks(self, frame: np.ndarray, hand: HandResult) -> np.ndarray:
        """
        Draw hand connections and landmarks on the frame.

        Fingertips are drawn larger and in yellow.
        """
        if not hand.landmarks:
            return frame

        height, width = frame.shape[:2]
        points = [(int(lm.x * width), int(lm.y * height)) for lm in hand.landmarks]

        for start, end in self.mp_hands.HAND_CONNECTIONS:
            cv2.line(frame, points[start], points[end], (0, 255, 0), 3)

        for i, point in enumerate(points):
            if i in FINGER_TIPS:
                cv2.circle(frame, point, 8, (0, 255, 255), -1)
            else:
                cv2.circle(frame, point, 5, (0, 0, 255), -1)

        return frame

    def draw_gesture_label(self, frame: np.ndarray, hand: HandResult) -> np.ndarray:
        """Write the recognized gesture above the hand."""
        text = gesture_label(hand)
        if text is None or not hand.landmarks:
            return frame

        height, width = frame.shape[:2]
        avg_x, min_y = label_anchor(hand.landmarks)
        (text_w, _), _ = cv2.getTextSize(text, cv2.FONT_HERSHEY_SIMPLEX, 0.8, 2)
        origin = (int(avg_x * width - text_w / 2), max(20, int(min_y * height) - 20))

        cv2.putText(frame, text, origin, cv2.FONT_HERSHEY_SIMPLEX, 0.8, (0, 0, 0), 4)
        cv2.putText(frame, text, origin, cv2.FONT_HERSHEY_SIMPLEX, 0.8, (255, 255, 255), 2)
        return frame

    def annotate(self, frame: np.ndarray, result: FrameResult, display: Optional[DisplayConfig] = None,
                 debug: Optional[List[str]] = None) -> np.ndarray:
        """
        Draw the full overlay for one frame.

        Args:
            frame: Frame to draw on, modified in place
            result: Processed frame
            display: Display settings; landmarks are drawn when show_landmarks is set
            debug: Optional lines of debug information for the top left corner

        Returns:
            The annotated frame
        """
        display = display if display is not None else DisplayConfig()
        for hand in result.hands:
            if display.show_landmarks:
                self.draw_landmarks(frame, hand)
            self.draw_gesture_label(frame, hand)

        height = frame.shape[0]
        cv2.putText(frame, f"Fingers: {result.combined_count}", (10, height - 20),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.7, (255, 255, 255), 2)

        for i, line in enumerate(debug or []):
            cv2.putText(frame, line, (10, 20 + 20 * i), cv2.FONT_HERSHEY_SIMPLEX, 0.5, (255, 255, 255), 1)

        return frame

    def close(self) -> None:
        """Release the MediaPipe graph."""
        self.hands.close()
