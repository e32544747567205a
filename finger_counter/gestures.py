"""
Static gesture table, gesture matching and per-frame aggregation.
"""
import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .config import Cfg
from .landmarks import check_raised_fingers
from .types import (
    FINGER_NAMES,
    DetectedHand,
    FingerState,
    FrameResult,
    GestureDefinition,
    HandResult,
)

logger = logging.getLogger(__name__)


FINGER_DISPLAY_NAMES = {
    "thumb": "Thumb",
    "index": "Index",
    "middle": "Middle",
    "ring": "Ring",
    "pinky": "Pinky",
}


class GestureTableError(ValueError):
    """Raised when a gesture table is malformed."""


def _gesture(name: str, description: str, *fingers: str) -> GestureDefinition:
    return GestureDefinition(name=name, description=description, required_fingers=frozenset(fingers))


def validate_gesture_table(table: Sequence[GestureDefinition]) -> None:
    """
    Check a gesture table for unknown fingers and duplicate entries.

    Matching returns the first exact match, so two entries with the same
    required set would make the later one unreachable.

    Raises:
        GestureTableError: on unknown finger names, duplicate names or
            duplicate required-finger sets
    """
    seen_names = set()
    seen_sets = {}
    for gesture in table:
        unknown = set(gesture.required_fingers) - set(FINGER_NAMES)
        if unknown:
            raise GestureTableError(
                f"Gesture '{gesture.name}' uses unknown fingers: {sorted(unknown)}")
        if gesture.name in seen_names:
            raise GestureTableError(f"Duplicate gesture name: '{gesture.name}'")
        if gesture.required_fingers in seen_sets:
            raise GestureTableError(
                f"Gestures '{seen_sets[gesture.required_fingers]}' and '{gesture.name}' "
                f"require the same fingers")
        seen_names.add(gesture.name)
        seen_sets[gesture.required_fingers] = gesture.name


DEFAULT_GESTURES: Tuple[GestureDefinition, ...] = (
    _gesture("fist", "Fist/Closed hand"),
    _gesture("pointingUp", "Pointing Up", "index"),
    _gesture("peace", "Peace Sign", "index", "middle"),
    _gesture("thumbsUp", "Thumbs Up", "thumb"),
    _gesture("threeFingers", "Three Fingers", "index", "middle", "ring"),
    _gesture("fourFingers", "Four Fingers", "index", "middle", "ring", "pinky"),
    _gesture("openPalm", "Open Palm", "thumb", "index", "middle", "ring", "pinky"),
)

validate_gesture_table(DEFAULT_GESTURES)


def load_gesture_table(entries: Iterable[Dict[str, Any]]) -> Tuple[GestureDefinition, ...]:
    """
    Build a validated gesture table from config entries.

    Args:
        entries: dicts with 'name', optional 'description' and 'fingers'

    Returns:
        Tuple of GestureDefinition in declared order
    """
    table = []
    for entry in entries:
        try:
            name = entry['name']
        except (KeyError, TypeError):
            raise GestureTableError(f"Gesture entry without a name: {entry!r}")
        fingers = entry.get('fingers') or []
        if not isinstance(fingers, (list, tuple)) or not all(isinstance(f, str) for f in fingers):
            raise GestureTableError(f"Gesture '{name}' fingers must be a list of finger names: {fingers!r}")
        table.append(_gesture(str(name), str(entry.get('description', name)), *fingers))

    table = tuple(table)
    validate_gesture_table(table)
    return table


def recognize_gesture(fingers: FingerState,
                      table: Sequence[GestureDefinition] = DEFAULT_GESTURES) -> Optional[GestureDefinition]:
    """
    Match the raised fingers against the gesture table.

    Args:
        fingers: Current finger state
        table: Gesture definitions, checked in order

    Returns:
        The first definition whose required fingers are exactly the raised
        ones, or None
    """
    raised = frozenset(fingers.raised())
    for gesture in table:
        if gesture.required_fingers == raised:
            return gesture
    return None


class GestureProcessor:
    """
    Classifies every detected hand of a frame and matches its gesture.

    Frames are processed independently; nothing is carried over between
    calls.
    """

    def __init__(self, cfg: Optional[Cfg] = None):
        """Initialize gesture processor with configuration."""
        self.cfg = cfg if cfg is not None else Cfg()
        if self.cfg.gestures:
            self.table = load_gesture_table(self.cfg.gestures)
            logger.info(f"Using custom gesture table with {len(self.table)} gestures")
        else:
            self.table = DEFAULT_GESTURES

    def classify_hand(self, hand: DetectedHand) -> HandResult:
        """Run the classifier and the matcher on one hand."""
        fingers = check_raised_fingers(hand.landmarks, self.cfg.classifier)
        gesture = recognize_gesture(fingers, self.table)
        return HandResult(
            handedness=hand.handedness,
            count=fingers.count,
            fingers=fingers,
            gesture=gesture,
            landmarks=hand.landmarks
        )

    def process_frame(self, hands: Sequence[DetectedHand]) -> FrameResult:
        """
        Process all hands detected in one frame.

        Args:
            hands: Hands reported by the detector (possibly empty)

        Returns:
            FrameResult with per-hand results, viewer-relative left/right
            slots and the combined finger count
        """
        results = [self.classify_hand(hand) for hand in hands]

        left = HandResult()
        right = HandResult()
        for result in results:
            # Model "Right" is the subject's right hand, on the viewer's left
            if result.handedness == "Right":
                left = result
            else:
                right = result

        combined = left.count + right.count
        logger.debug(f"Frame: {len(results)} hands, combined count {combined}")

        return FrameResult(
            hands=results,
            left=left,
            right=right,
            combined_count=combined
        )


def describe_frame(result: FrameResult) -> List[str]:
    """Human-readable description of the raised fingers of both hands."""
    lines = []
    for side, hand in (("Right", result.right), ("Left", result.left)):
        if hand.count > 0:
            names = ", ".join(FINGER_DISPLAY_NAMES[name] for name in hand.fingers.raised())
            lines.append(f"{side} hand: {names}")

    if not lines:
        lines.append("No fingers raised")
    return lines


def gesture_label(result: HandResult) -> Optional[str]:
    """Label shown above a hand, e.g. 'Right Hand: Peace Sign'."""
    if result.gesture is None or result.display_side is None:
        return None
    return f"{result.display_side} Hand: {result.gesture.description}"
