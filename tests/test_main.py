"""
Test cases for the frame pipeline and the command line entry point.
"""
import contextlib
import io
import json
import tempfile
import unittest
import sys
from pathlib import Path
from unittest import mock

import cv2
import numpy as np
import yaml

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent))

from finger_counter import main as cli
from finger_counter.config import Cfg
from finger_counter.gestures import GestureProcessor
from finger_counter.main import RecordedHandSource, debug_lines, run, run_pipeline, load_recorded_frames
from finger_counter.renderer_mock import MockRenderer
from finger_counter.types import DetectedHand, HandSourceProto, PipelineMetrics, ResultSinkProto
from synthetic_hands import as_json_hand, make_landmarks


class TestRunPipeline(unittest.TestCase):
    """Test the acquire -> classify -> match -> render sequence."""

    def test_protocols(self):
        self.assertIsInstance(RecordedHandSource(), HandSourceProto)
        self.assertIsInstance(MockRenderer(), ResultSinkProto)

    def test_frames_rendered_in_order(self):
        frames = [
            [as_json_hand("Left", ["index"])],
            [],
            [as_json_hand("Left", ["index", "middle", "ring"]), as_json_hand("Right", ["index", "middle"])],
        ]
        renderer = MockRenderer(quiet=True)
        results = run_pipeline(RecordedHandSource(), frames, GestureProcessor(), renderer)

        self.assertEqual(renderer.frame_count, 3)
        self.assertEqual([r.combined_count for r in results], [1, 0, 5])
        self.assertIs(renderer.results[2], results[2])
        self.assertEqual(results[0].right.gesture.name, "pointingUp")

    def test_invalid_handedness(self):
        with self.assertRaises(ValueError):
            RecordedHandSource().process([{"handedness": "Up", "landmarks": [[0.5, 0.5]] * 21}])

    def test_wrong_landmark_count(self):
        with self.assertRaises(ValueError):
            RecordedHandSource().process([{"handedness": "Left", "landmarks": [[0.5, 0.5]] * 5}])

    def test_mock_renderer_prints_summary(self):
        renderer = MockRenderer()
        result = GestureProcessor().process_frame(
            RecordedHandSource().process([as_json_hand("Left", ["index", "middle"])]))
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            renderer.render(result)
        self.assertIn("Frame #1: 2 fingers", out.getvalue())
        self.assertIn("Right Hand: Peace Sign", out.getvalue())

        renderer.reset_counters()
        self.assertEqual(renderer.frame_count, 0)


class TestCli(unittest.TestCase):
    """Test the landmarks replay command and CLI error handling."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.tmpdir.cleanup()

    def _write_frames(self, frames) -> str:
        path = Path(self.tmpdir.name) / "frames.json"
        path.write_text(json.dumps(frames))
        return str(path)

    def _run(self, argv):
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            code = run(argv)
        return code, out.getvalue()

    def test_replay_json_output(self):
        path = self._write_frames([[as_json_hand("Right", ["thumb", "index", "middle", "ring", "pinky"])]])
        code, out = self._run(["--json", "landmarks", path])
        self.assertEqual(code, 0)

        payload = json.loads(out)
        self.assertEqual(len(payload), 1)
        self.assertEqual(payload[0]["combined_count"], 5)
        self.assertEqual(payload[0]["left"]["gesture"], {"name": "openPalm", "description": "Open Palm"})
        self.assertEqual(payload[0]["right"]["count"], 0)
        self.assertEqual(payload[0]["source"], "Frame 1")

    def test_replay_text_output(self):
        path = self._write_frames([[as_json_hand("Left", ["index", "ring"])]])
        code, out = self._run(["landmarks", path])
        self.assertEqual(code, 0)
        self.assertIn("Frame 1: 2 fingers raised", out)
        self.assertIn("Right hand: Index, Ring", out)
        self.assertNotIn("Hand:", out)

    def test_missing_file(self):
        code, _ = self._run(["landmarks", str(Path(self.tmpdir.name) / "missing.json")])
        self.assertEqual(code, 1)

    def test_malformed_frames(self):
        path = Path(self.tmpdir.name) / "bad.json"
        path.write_text(json.dumps({"not": "a list"}))
        with self.assertRaises(ValueError):
            load_recorded_frames(str(path))
        code, _ = self._run(["landmarks", str(path)])
        self.assertEqual(code, 1)


    def _write_config(self, data) -> str:
        path = Path(self.tmpdir.name) / "config.yaml"
        with open(path, 'w') as f:
            yaml.safe_dump(data, f)
        return str(path)

    def test_non_numeric_landmarks(self):
        """Malformed landmark points give exit code 1, not a traceback."""
        path = self._write_frames([[{"handedness": "Left", "landmarks": [5] * 21}]])
        code, _ = self._run(["landmarks", path])
        self.assertEqual(code, 1)

        path = self._write_frames([[{"handedness": "Left", "landmarks": 5}]])
        code, _ = self._run(["landmarks", path])
        self.assertEqual(code, 1)

    def test_null_config_setting(self):
        frames = self._write_frames([[]])
        config = self._write_config({"mediapipe": {"max_num_hands": None}})
        code, _ = self._run(["--config", config, "landmarks", frames])
        self.assertEqual(code, 1)

    def test_bad_gesture_fingers_in_config(self):
        frames = self._write_frames([[]])
        config = self._write_config({"gestures": [{"name": "odd", "fingers": 5}]})
        code, _ = self._run(["--config", config, "landmarks", frames])
        self.assertEqual(code, 1)

    def test_debug_mode_logs_metrics(self):
        """Debug mode reports frame count, timing and detector settings."""
        frames = self._write_frames([[as_json_hand("Left", ["index"])], []])
        config = self._write_config({"display": {"debug_mode": True}})
        with self.assertLogs("finger_counter.main", level="INFO") as logs:
            code, _ = self._run(["--config", config, "landmarks", frames])
        self.assertEqual(code, 0)

        output = "\n".join(logs.output)
        self.assertIn("[debug] Frames: 2", output)
        self.assertIn("[debug] Processing time:", output)
        self.assertIn("[debug] Detection confidence: 0.6", output)
        self.assertIn("[debug] Model complexity: 1", output)

    def test_no_debug_output_by_default(self):
        frames = self._write_frames([[]])
        with mock.patch.object(cli.logger, "info") as info:
            code, _ = self._run(["landmarks", frames])
        self.assertEqual(code, 0)
        self.assertFalse(any("[debug]" in str(call) for call in info.call_args_list))


class TestPipelineMetrics(unittest.TestCase):
    """Test per-frame timing."""

    def test_metrics_counted_per_frame(self):
        metrics = PipelineMetrics()
        run_pipeline(RecordedHandSource(), [[], [as_json_hand("Left")], []], GestureProcessor(), metrics=metrics)
        self.assertEqual(metrics.frame_count, 3)
        self.assertGreaterEqual(metrics.total_processing_s, 0.0)
        self.assertGreaterEqual(metrics.avg_processing_ms, 0.0)

    def test_empty_metrics(self):
        metrics = PipelineMetrics()
        self.assertEqual(metrics.avg_processing_ms, 0.0)
        self.assertEqual(metrics.frame_rate, 0.0)

    def test_averages(self):
        metrics = PipelineMetrics()
        metrics.add(0.01)
        metrics.add(0.03)
        self.assertAlmostEqual(metrics.avg_processing_ms, 20.0)
        self.assertAlmostEqual(metrics.frame_rate, 50.0)
        self.assertAlmostEqual(metrics.last_processing_s, 0.03)

    def test_debug_lines(self):
        metrics = PipelineMetrics()
        metrics.add(0.02)
        lines = debug_lines(metrics, Cfg())
        self.assertEqual(lines[0], "FPS: 50")
        self.assertEqual(lines[1], "Processing time: 20.0 ms")
        self.assertEqual(lines[2], "Frames: 1")
        self.assertEqual(lines[3:], [
            "Detection confidence: 0.6",
            "Tracking confidence: 0.5",
            "Model complexity: 1",
        ])


class TestImageCommand(unittest.TestCase):
    """Test the image command with a stubbed detector."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.image_path = str(Path(self.tmpdir.name) / "hand.png")
        cv2.imwrite(self.image_path, np.zeros((48, 64, 3), dtype=np.uint8))

        self.tracker_cls = mock.MagicMock()
        self.tracker = self.tracker_cls.return_value
        self.tracker.process.return_value = [DetectedHand(make_landmarks(["index", "middle"]), "Left")]
        self.tracker.annotate.side_effect = lambda frame, result, display, debug=None: frame

    def tearDown(self):
        self.tmpdir.cleanup()

    def _run(self, argv):
        out = io.StringIO()
        with mock.patch.object(cli, "_load_tracker", return_value=self.tracker_cls), \
                contextlib.redirect_stdout(out):
            code = run(argv)
        return code, out.getvalue()

    def test_tracking_unavailable(self):
        """Without mediapipe the command exits with code 2."""
        with mock.patch.object(cli, "_load_tracker", side_effect=ImportError("No module named 'mediapipe'")):
            code = run(["image", self.image_path])
        self.assertEqual(code, 2)

    def test_image_results(self):
        code, out = self._run(["image", self.image_path])
        self.assertEqual(code, 0)
        self.assertIn("hand.png: 2 fingers raised", out)
        self.assertIn("Right Hand: Peace Sign", out)

        _, kwargs = self.tracker_cls.call_args
        self.assertTrue(kwargs["static_image_mode"])
        self.tracker.close.assert_called_once()
        self.tracker.annotate.assert_not_called()

    def test_missing_image(self):
        code, _ = self._run(["image", str(Path(self.tmpdir.name) / "missing.png")])
        self.assertEqual(code, 1)
        self.tracker_cls.assert_not_called()

    def test_tracker_closed_on_error(self):
        self.tracker.process.side_effect = ValueError("Expected 21 landmarks, got 3")
        code, _ = self._run(["image", self.image_path])
        self.assertEqual(code, 1)
        self.tracker.close.assert_called_once()

    def test_output_writes_annotated_images(self):
        out_dir = Path(self.tmpdir.name) / "annotated"
        code, _ = self._run(["image", self.image_path, "--output", str(out_dir)])
        self.assertEqual(code, 0)

        target = out_dir / "finger_counter_hand.png"
        self.assertTrue(target.exists())
        self.assertIsNotNone(cv2.imread(str(target)))

        args = self.tracker.annotate.call_args[0]
        self.assertEqual(args[1].combined_count, 2)
        self.assertTrue(args[2].show_landmarks)
        self.assertIsNone(args[3])

    def test_output_with_debug_and_window_name(self):
        config = Path(self.tmpdir.name) / "config.yaml"
        with open(config, 'w') as f:
            yaml.safe_dump({"display": {"debug_mode": True, "show_landmarks": False, "window_name": "Demo Run"}}, f)

        out_dir = Path(self.tmpdir.name) / "annotated"
        code, _ = self._run(["--config", str(config), "image", self.image_path, "--output", str(out_dir)])
        self.assertEqual(code, 0)
        self.assertTrue((out_dir / "demo_run_hand.png").exists())

        args = self.tracker.annotate.call_args[0]
        self.assertFalse(args[2].show_landmarks)
        self.assertIn("Frames: 1", args[3])


if __name__ == '__main__':
    unittest.main()
