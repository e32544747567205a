"""
Type definitions for finger counting and gesture recognition.
"""
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterator, List, Literal, Optional, Protocol, Tuple, runtime_checkable


FINGER_NAMES: Tuple[str, ...] = ("thumb", "index", "middle", "ring", "pinky")

Handedness = Literal["Left", "Right"]


@dataclass(frozen=True)
class Landmark:
    """A single hand landmark in normalized image coordinates."""
    x: float
    y: float
    z: float = 0.0


@dataclass(frozen=True)
class FingerState:
    """Raised/lowered state for each of the five fingers."""
    thumb: bool = False
    index: bool = False
    middle: bool = False
    ring: bool = False
    pinky: bool = False

    def __getitem__(self, name: str) -> bool:
        if name not in FINGER_NAMES:
            raise KeyError(name)
        return getattr(self, name)

    def __iter__(self) -> Iterator[str]:
        return iter(FINGER_NAMES)

    def __len__(self) -> int:
        return len(FINGER_NAMES)

    def items(self) -> List[Tuple[str, bool]]:
        return [(name, self[name]) for name in FINGER_NAMES]

    def as_dict(self) -> Dict[str, bool]:
        return dict(self.items())

    def raised(self) -> List[str]:
        """Names of raised fingers, in thumb-to-pinky order."""
        return [name for name in FINGER_NAMES if self[name]]

    @property
    def count(self) -> int:
        return len(self.raised())


@dataclass(frozen=True)
class GestureDefinition:
    """A named static combination of raised fingers."""
    name: str
    description: str
    required_fingers: FrozenSet[str]


@dataclass
class DetectedHand:
    """One hand as reported by the landmark detector."""
    landmarks: List[Landmark]
    handedness: Handedness  # anatomical hand, mirrored for a front-facing camera


@dataclass
class HandResult:
    """Classification and gesture match for a single hand in one frame."""
    handedness: Optional[Handedness] = None
    count: int = 0
    fingers: FingerState = field(default_factory=FingerState)
    gesture: Optional[GestureDefinition] = None
    landmarks: Optional[List[Landmark]] = None

    @property
    def display_side(self) -> Optional[str]:
        """Side as seen by the viewer: the model's "Left" shows up on the right."""
        if self.handedness is None:
            return None
        return "Right" if self.handedness == "Left" else "Left"


@dataclass
class FrameResult:
    """All hand results of one frame plus the viewer-relative two-hand summary."""
    hands: List[HandResult]
    left: HandResult  # viewer's left
    right: HandResult  # viewer's right
    combined_count: int


@runtime_checkable
class HandSourceProto(Protocol):
    """Abstract protocol for landmark detectors feeding the pipeline."""

    def process(self, frame) -> List[DetectedHand]:
        """Detect hands in a frame and return their landmarks and handedness."""
        ...


@runtime_checkable
class ResultSinkProto(Protocol):
    """Abstract protocol for collaborators that present frame results."""

    def render(self, result: FrameResult) -> None:
        """Present the result of one processed frame."""
        ...


@dataclass
class PipelineMetrics:
    """Running frame count and processing time of a pipeline run."""
    frame_count: int = 0
    total_processing_s: float = 0.0
    last_processing_s: float = 0.0

    def add(self, elapsed_s: float) -> None:
        self.frame_count += 1
        self.total_processing_s += elapsed_s
        self.last_processing_s = elapsed_s

    @property
    def avg_processing_ms(self) -> float:
        if self.frame_count == 0:
            return 0.0
        return self.total_processing_s * 1000.0 / self.frame_count

    @property
    def frame_rate(self) -> float:
        """Frames per second of processing time alone."""
        if self.total_processing_s <= 0.0:
            return 0.0
        return self.frame_count / self.total_processing_s
