"""
Hand landmark helpers and per-finger raised/lowered classification.
"""
import numpy as np
from typing import Optional, List, Sequence, Tuple

from .config import ClassifierConfig
from .types import FINGER_NAMES, FingerState, Landmark


NUM_LANDMARKS = 21

# Thumb, index, middle, ring, pinky
FINGER_TIPS = (4, 8, 12, 16, 20)
FINGER_BASES = (2, 5, 9, 13, 17)


def to_landmarks(points: Sequence) -> List[Landmark]:
    """
    Convert detector output into a list of Landmarks.

    Args:
        points: 21 objects with x/y(/z) attributes (e.g. MediaPipe
            NormalizedLandmark) or (x, y) / (x, y, z) tuples

    Returns:
        List of 21 Landmark objects

    Raises:
        ValueError: if the number of points is not 21 or a point is malformed
    """
    if not hasattr(points, '__len__'):
        raise ValueError(f"Expected a sequence of landmarks, got {points!r}")
    if len(points) != NUM_LANDMARKS:
        raise ValueError(f"Expected {NUM_LANDMARKS} landmarks, got {len(points)}")

    landmarks = []
    for point in points:
        try:
            if isinstance(point, Landmark):
                landmarks.append(point)
            elif hasattr(point, 'x') and hasattr(point, 'y'):
                landmarks.append(Landmark(float(point.x), float(point.y), float(getattr(point, 'z', 0.0))))
            elif isinstance(point, (list, tuple)) and len(point) in (2, 3):
                landmarks.append(Landmark(*(float(v) for v in point)))
            else:
                raise ValueError(f"Malformed landmark: {point!r}")
        except TypeError:
            raise ValueError(f"Malformed landmark: {point!r}") from None

    return landmarks


def landmarks_array(landmarks: Sequence[Landmark]) -> np.ndarray:
    """Return the landmarks as a (21, 3) float array of x, y, z."""
    return np.array([(lm.x, lm.y, lm.z) for lm in landmarks], dtype=np.float64)


def label_anchor(landmarks: Sequence[Landmark]) -> Tuple[float, float]:
    """
    Position for a label drawn above the hand.

    Returns:
        (mean x, topmost y) in [0..1] range
    """
    arr = landmarks_array(landmarks)
    return float(arr[:, 0].mean()), float(arr[:, 1].min())


def check_raised_fingers(landmarks: Sequence[Landmark],
                         cfg: Optional[ClassifierConfig] = None) -> FingerState:
    """
    Decide which fingers are raised.

    The thumb is raised when its tip sits left of its base by more than
    ``thumb_offset``; this ignores hand orientation. The other fingers are
    raised when the tip sits above the base by more than ``finger_offset``
    (image y grows downward).

    Args:
        landmarks: List of 21 hand landmarks
        cfg: Classifier thresholds, defaults when None

    Returns:
        FingerState with one entry per finger
    """
    if cfg is None:
        cfg = ClassifierConfig()

    state = {}
    for i, name in enumerate(FINGER_NAMES):
        tip = landmarks[FINGER_TIPS[i]]
        base = landmarks[FINGER_BASES[i]]
        if i == 0:
            state[name] = tip.x < base.x - cfg.thumb_offset
        else:
            state[name] = tip.y < base.y - cfg.finger_offset

    return FingerState(**state)


def count_raised_fingers(landmarks: Sequence[Landmark],
                         cfg: Optional[ClassifierConfig] = None) -> int:
    """Number of raised fingers (0-5)."""
    return check_raised_fingers(landmarks, cfg).count
