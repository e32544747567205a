"""
Command line entry point: runs recorded landmarks or still images through
the finger counter.
"""
import argparse
import json
import logging
import sys
import time
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from .config import load_config, Cfg
from .gestures import GestureProcessor, describe_frame, gesture_label
from .landmarks import to_landmarks
from .types import DetectedHand, FrameResult, HandResult, HandSourceProto, PipelineMetrics, ResultSinkProto

logger = logging.getLogger(__name__)


def run_pipeline(source: HandSourceProto, frames: Iterable[Any],
                 processor: GestureProcessor, sink: Optional[ResultSinkProto] = None,
                 metrics: Optional[PipelineMetrics] = None) -> List[FrameResult]:
    """
    Acquire, classify, match and render every frame in turn.

    Args:
        source: Detector turning a frame into detected hands
        frames: Frames to process, in order
        processor: Gesture processor holding the configuration
        sink: Optional renderer for each frame result
        metrics: Optional metrics updated with the detection and
            classification time of every frame

    Returns:
        The frame results, in frame order
    """
    results = []
    for frame in frames:
        start = time.perf_counter()
        hands = source.process(frame)
        result = processor.process_frame(hands)
        if metrics is not None:
            metrics.add(time.perf_counter() - start)
        if sink is not None:
            sink.render(result)
        results.append(result)
    return results


def debug_lines(metrics: PipelineMetrics, cfg: Cfg) -> List[str]:
    """Frame statistics and detector settings shown in debug mode."""
    mp_cfg = cfg.mediapipe
    return [
        f"FPS: {round(metrics.frame_rate)}",
        f"Processing time: {metrics.avg_processing_ms:.1f} ms",
        f"Frames: {metrics.frame_count}",
        f"Detection confidence: {mp_cfg.min_detection_confidence}",
        f"Tracking confidence: {mp_cfg.min_tracking_confidence}",
        f"Model complexity: {mp_cfg.model_complexity}",
    ]


class RecordedHandSource:
    """Hand source replaying landmark frames recorded as JSON-like data."""

    def process(self, frame: List[Dict[str, Any]]) -> List[DetectedHand]:
        hands = []
        for hand in frame:
            if not isinstance(hand, dict):
                raise ValueError(f"Expected a hand object, got {hand!r}")
            handedness = hand.get('handedness')
            if handedness not in ("Left", "Right"):
                raise ValueError(f"Invalid handedness: {handedness!r}")
            hands.append(DetectedHand(
                landmarks=to_landmarks(hand.get('landmarks') or []),
                handedness=handedness
            ))
        return hands


def load_recorded_frames(path: str) -> List[List[Dict[str, Any]]]:
    """Load a JSON list of frames, each a list of hands."""
    with open(path, 'r') as f:
        frames = json.load(f)

    if not isinstance(frames, list) or not all(isinstance(frame, list) for frame in frames):
        raise ValueError(f"{path}: expected a list of frames, each a list of hands")
    return frames


def hand_to_dict(hand: HandResult) -> Dict[str, Any]:
    """Serialize one hand result to JSON-compatible data."""
    return {
        "handedness": hand.handedness,
        "display_side": hand.display_side,
        "count": hand.count,
        "fingers": hand.fingers.as_dict(),
        "gesture": None if hand.gesture is None else {
            "name": hand.gesture.name,
            "description": hand.gesture.description,
        },
    }


def frame_to_dict(result: FrameResult) -> Dict[str, Any]:
    """Serialize one frame result to JSON-compatible data."""
    return {
        "combined_count": result.combined_count,
        "left": hand_to_dict(result.left),
        "right": hand_to_dict(result.right),
        "hands": [hand_to_dict(hand) for hand in result.hands],
        "description": describe_frame(result),
    }


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Count raised fingers and recognize static hand gestures.")
    parser.add_argument("--config", help="Path to a YAML config file.")
    parser.add_argument("--json", action="store_true", help="Print results as JSON.")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    sub = parser.add_subparsers(dest="command", required=True)

    replay = sub.add_parser("landmarks", help="Replay recorded landmark frames from a JSON file.")
    replay.add_argument("input", help="JSON file with a list of frames.")

    images = sub.add_parser("image", help="Detect hands in still images (needs mediapipe).")
    images.add_argument("inputs", nargs="+", help="Image files.")
    images.add_argument("--output", help="Directory for annotated copies of the images.")
    return parser


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format="%(message)s")


def _load_tracker():
    """Import the MediaPipe adapter on demand; raises ImportError without mediapipe."""
    from .tracker import HandsTracker
    return HandsTracker


def _read_images(paths: List[str]) -> List[Any]:
    import cv2

    frames = []
    for path in paths:
        frame = cv2.imread(path)
        if frame is None:
            raise FileNotFoundError(f"Could not read image: {path}")
        frames.append(frame)
    return frames


def _write_annotated(tracker, frames: List[Any], results: List[FrameResult], paths: List[str],
                     output_dir: str, cfg: Cfg, debug: Optional[List[str]] = None) -> List[Path]:
    """Draw the overlay on copies of the frames and save them as PNG files."""
    import cv2

    out_dir = Path(output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    prefix = cfg.display.window_name.strip().lower().replace(" ", "_") or "annotated"

    written = []
    for frame, result, path in zip(frames, results, paths):
        annotated = tracker.annotate(frame.copy(), result, cfg.display, debug)
        target = out_dir / f"{prefix}_{Path(path).stem}.png"
        if not cv2.imwrite(str(target), annotated):
            raise OSError(f"Could not write image: {target}")
        logger.info(f"🖼️  Wrote {target}")
        written.append(target)
    return written


def _print_results(results: List[FrameResult], labels: List[str], as_json: bool) -> None:
    if as_json:
        payload = [dict(frame_to_dict(result), source=label) for result, label in zip(results, labels)]
        print(json.dumps(payload, indent=2))
        return

    for result, label in zip(results, labels):
        print(f"{label}: {result.combined_count} fingers raised")
        for line in describe_frame(result):
            print(f"  {line}")
        for hand in result.hands:
            text = gesture_label(hand)
            if text:
                print(f"  ✋ {text}")


def run(argv: Optional[List[str]] = None) -> int:
    """Run the CLI and return the exit code."""
    args = _build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    metrics = PipelineMetrics()
    try:
        cfg: Cfg = load_config(args.config)
        processor = GestureProcessor(cfg)

        if args.command == "landmarks":
            frames = load_recorded_frames(args.input)
            results = run_pipeline(RecordedHandSource(), frames, processor, metrics=metrics)
            labels = [f"Frame {i + 1}" for i in range(len(results))]
        else:
            try:
                tracker_cls = _load_tracker()
            except ImportError as e:
                logger.error(f"❌ Hand tracking is not available ({e}). Install with: pip install 'finger-counter[tracking]'")
                return 2

            frames = _read_images(args.inputs)
            tracker = tracker_cls(cfg.mediapipe, static_image_mode=True)
            try:
                results = run_pipeline(tracker, frames, processor, metrics=metrics)
                if args.output:
                    debug = debug_lines(metrics, cfg) if cfg.display.debug_mode else None
                    _write_annotated(tracker, frames, results, args.inputs, args.output, cfg, debug)
            finally:
                tracker.close()
            labels = [Path(path).name for path in args.inputs]
    except (OSError, ValueError) as e:
        logger.error(f"❌ Error: {e}")
        return 1

    if cfg.display.debug_mode:
        for line in debug_lines(metrics, cfg):
            logger.info(f"[debug] {line}")

    _print_results(results, labels, args.json)
    return 0


def main() -> None:
    """Entry point for the application."""
    sys.exit(run())


if __name__ == "__main__":
    main()
