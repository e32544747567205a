"""
Finger Counter

Counts raised fingers per hand from MediaPipe hand landmarks and recognizes
a small set of static gestures (fist, peace sign, thumbs up, open palm...).
"""

__version__ = "0.1.0"
__author__ = "Finger Counter Team"

from .types import (
    FINGER_NAMES,
    Landmark,
    FingerState,
    GestureDefinition,
    DetectedHand,
    HandResult,
    FrameResult,
    HandSourceProto,
    ResultSinkProto,
    PipelineMetrics,
)
from .config import load_config, Cfg, ClassifierConfig, MediaPipeConfig
from .landmarks import check_raised_fingers, count_raised_fingers, to_landmarks
from .gestures import (
    DEFAULT_GESTURES,
    GestureProcessor,
    GestureTableError,
    recognize_gesture,
    validate_gesture_table,
)
from .renderer_mock import MockRenderer

__all__ = [
    "FINGER_NAMES",
    "Landmark",
    "FingerState",
    "GestureDefinition",
    "DetectedHand",
    "HandResult",
    "FrameResult",
    "HandSourceProto",
    "ResultSinkProto",
    "PipelineMetrics",
    "load_config",
    "Cfg",
    "ClassifierConfig",
    "MediaPipeConfig",
    "check_raised_fingers",
    "count_raised_fingers",
    "to_landmarks",
    "DEFAULT_GESTURES",
    "GestureProcessor",
    "GestureTableError",
    "recognize_gesture",
    "validate_gesture_table",
    "MockRenderer",
]
