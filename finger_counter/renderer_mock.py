"""
Mock renderer that prints frame results instead of drawing them.
"""
from typing import List

from .gestures import describe_frame, gesture_label
from .types import FrameResult


class MockRenderer:
    """Mock renderer that prints a summary of each frame."""

    def __init__(self, quiet: bool = False):
        """Initialize the mock renderer."""
        self.quiet = quiet
        self.frame_count = 0
        self.results: List[FrameResult] = []

    def render(self, result: FrameResult) -> None:
        """Print the frame summary instead of drawing it."""
        self.frame_count += 1
        self.results.append(result)
        if self.quiet:
            return

        labels = [label for label in (gesture_label(hand) for hand in result.hands) if label]
        print(f"[MockRenderer] Frame #{self.frame_count}: {result.combined_count} fingers "
              f"({'; '.join(describe_frame(result))})")
        for label in labels:
            print(f"[MockRenderer]   {label}")

    def reset_counters(self) -> None:
        """Reset frame counter for testing."""
        self.frame_count = 0
        self.results = []
