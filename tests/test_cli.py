"""Tests for the maneframe CLI (mask and capture commands)."""

import cv2
import numpy as np
import pytest

from maneframe.backends import mediapipe_tasks
from maneframe.cli import build_parser, main
from maneframe.cli.commands import capture as capture_cmd
from maneframe.cli.commands import run_capture, run_mask
from maneframe.cli.commands.mask import render_preview
from maneframe.mask import EditMaskSynthesizer
from maneframe.types import BoundingBox


@pytest.fixture
def photo_file(tmp_path, portrait_photo):
    path = tmp_path / "selfie.png"
    assert cv2.imwrite(str(path), portrait_photo)
    return path


def _read_rgba(path):
    return cv2.imread(str(path), cv2.IMREAD_UNCHANGED)


# ── Parser ──

class TestParser:
    def test_mask_defaults(self):
        args = build_parser().parse_args(["mask", "a.png", "-o", "m.png"])
        assert args.command == "mask"
        assert args.canvas_size == 1024
        assert not args.segment
        assert args.image_out is None

    def test_capture_defaults(self):
        args = build_parser().parse_args(["capture", "-o", "out.png"])
        assert args.camera == "0"
        assert args.fps == 10.0
        assert not args.no_mirror

    def test_mask_requires_output(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["mask", "a.png"])

    @pytest.mark.parametrize("value", ["0", "-5", "abc"])
    def test_canvas_size_must_be_positive(self, value, capsys):
        with pytest.raises(SystemExit) as exc:
            build_parser().parse_args(["mask", "a.png", "-o", "m.png", "--canvas-size", value])
        assert exc.value.code == 2
        assert "--canvas-size" in capsys.readouterr().err

    def test_max_frames_must_be_positive(self, capsys):
        with pytest.raises(SystemExit) as exc:
            build_parser().parse_args(["capture", "-o", "out.png", "--max-frames", "0"])
        assert exc.value.code == 2

    def test_main_rejects_zero_canvas_without_traceback(self, photo_file, tmp_path, capsys):
        out = tmp_path / "m.png"
        with pytest.raises(SystemExit) as exc:
            main(["mask", str(photo_file), "-o", str(out), "--canvas-size", "0"])
        assert exc.value.code == 2
        assert "positive integer" in capsys.readouterr().err
        assert not out.exists()

    def test_no_command_exits_1(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main([])
        assert exc.value.code == 1


# ── mask ──

class TestMaskCommand:
    def test_writes_fallback_mask(self, photo_file, tmp_path):
        out = tmp_path / "out" / "mask.png"
        args = build_parser().parse_args(["mask", str(photo_file), "-o", str(out), "--canvas-size", "64"])
        assert run_mask(args) == 0

        rgba = _read_rgba(out)
        assert rgba.shape == (64, 64, 4)
        assert rgba[0, 0, 3] == 0
        assert rgba[-1, 0, 3] == 255

    def test_writes_canvas_and_preview(self, photo_file, tmp_path):
        image_out = tmp_path / "canvas.png"
        preview = tmp_path / "preview.png"
        args = build_parser().parse_args([
            "mask", str(photo_file), "-o", str(tmp_path / "m.png"), "--canvas-size", "64",
            "--image-out", str(image_out), "--preview", str(preview),
        ])
        assert run_mask(args) == 0
        assert cv2.imread(str(image_out)).shape == (64, 64, 3)
        assert cv2.imread(str(preview)).shape == (64, 64, 3)

    def test_main_exit_code(self, photo_file, tmp_path):
        with pytest.raises(SystemExit) as exc:
            main(["mask", str(photo_file), "-o", str(tmp_path / "m.png"), "--canvas-size", "32"])
        assert exc.value.code == 0

    def test_missing_photo(self, tmp_path):
        args = build_parser().parse_args(["mask", str(tmp_path / "nope.png"), "-o", str(tmp_path / "m.png")])
        assert run_mask(args) == 2

    def test_corrupt_photo(self, tmp_path):
        bad = tmp_path / "bad.png"
        bad.write_bytes(b"garbage")
        args = build_parser().parse_args(["mask", str(bad), "-o", str(tmp_path / "m.png")])
        assert run_mask(args) == 1
        assert not (tmp_path / "m.png").exists()

    def test_segment_uses_backend(self, photo_file, tmp_path, monkeypatch, make_segmentation):
        class FakeSegmenter:
            def __init__(self):
                self.cleaned = False

            def initialize(self, device="cpu"):
                pass

            def segment(self, image):
                assert image.shape == (1024, 1024, 3)
                return make_segmentation()

            def cleanup(self):
                self.cleaned = True

        monkeypatch.setattr(mediapipe_tasks, "MediaPipeSegmenterBackend", FakeSegmenter)
        out = tmp_path / "m.png"
        args = build_parser().parse_args(["mask", str(photo_file), "-o", str(out), "--segment"])
        assert run_mask(args) == 0

        rgba = _read_rgba(out)
        assert rgba[120, 500, 3] == 0
        assert rgba[50, 500, 3] == 255

    def test_segment_failure_falls_back(self, photo_file, tmp_path, monkeypatch):
        cleaned = []

        class BrokenSegmenter:
            def initialize(self, device="cpu"):
                raise ImportError("no mediapipe here")

            def segment(self, image):
                raise AssertionError("unreachable")

            def cleanup(self):
                cleaned.append(True)

        monkeypatch.setattr(mediapipe_tasks, "MediaPipeSegmenterBackend", BrokenSegmenter)
        out = tmp_path / "m.png"
        args = build_parser().parse_args(["mask", str(photo_file), "-o", str(out), "--segment", "--canvas-size", "64"])
        assert run_mask(args) == 0
        assert cleaned == [True]
        assert _read_rgba(out)[0, 0, 3] == 0


class TestRenderPreview:
    def test_tints_only_editable_pixels(self, portrait_photo):
        mask = EditMaskSynthesizer().synthesize(portrait_photo, 64)
        preview = render_preview(mask)
        np.testing.assert_array_equal(preview[-1], mask.canvas[-1])
        assert not np.array_equal(preview[0], mask.canvas[0])


# ── capture ──

class FakeVideoCapture:
    """Replays a fixed image as a video file at 10 fps."""

    def __init__(self, source, n_frames=100, opened=True):
        self.source = source
        self._n = n_frames
        self._opened = opened
        self._pos = -1
        self.released = False
        self.image = np.zeros((720, 1280, 3), dtype=np.uint8)
        self.image[:, :640] = 255

    def isOpened(self):
        return self._opened

    def read(self):
        if self._pos + 1 >= self._n:
            return False, None
        self._pos += 1
        return True, self.image

    def get(self, prop):
        assert prop == cv2.CAP_PROP_POS_MSEC
        return self._pos * 100.0

    def release(self):
        self.released = True


class TestCaptureCommand:
    @pytest.fixture
    def fake_stack(self, monkeypatch, mock_detector):
        box = BoundingBox(origin_x=448, origin_y=180, width=384, height=360)
        created = {}

        def _capture(source):
            created["cap"] = FakeVideoCapture(source)
            return created["cap"]

        def _detector(min_detection_confidence=0.5):
            created["detector"] = mock_detector(default=box)
            return created["detector"]

        monkeypatch.setattr(capture_cmd.cv2, "VideoCapture", _capture)
        monkeypatch.setattr(capture_cmd, "MediaPipeFaceBackend", _detector)
        return created

    def test_captures_from_video_file(self, fake_stack, tmp_path):
        out = tmp_path / "shots" / "selfie.png"
        args = build_parser().parse_args(["capture", "--camera", "clip.mp4", "-o", str(out)])
        assert run_capture(args) == 0

        saved = cv2.imread(str(out))
        assert saved.shape == (720, 1280, 3)
        # Mirrored: the white half moved to the right
        assert saved[0, -1, 0] == 255
        assert saved[0, 0, 0] == 0
        assert fake_stack["cap"].released
        assert fake_stack["cap"].source == "clip.mp4"
        assert not fake_stack["detector"].initialized

    def test_no_mirror(self, fake_stack, tmp_path):
        out = tmp_path / "selfie.png"
        args = build_parser().parse_args(["capture", "--camera", "clip.mp4", "-o", str(out), "--no-mirror"])
        assert run_capture(args) == 0
        assert cv2.imread(str(out))[0, 0, 0] == 255

    def test_max_frames_without_capture(self, fake_stack, tmp_path):
        out = tmp_path / "selfie.png"
        args = build_parser().parse_args([
            "capture", "--camera", "clip.mp4", "-o", str(out), "--max-frames", "20",
        ])
        assert run_capture(args) == 1
        assert not out.exists()

    def test_camera_index_is_int(self, fake_stack, tmp_path):
        args = build_parser().parse_args(["capture", "--camera", "1", "-o", str(tmp_path / "s.png"), "--max-frames", "1"])
        run_capture(args)
        assert fake_stack["cap"].source == 1

    def test_unopened_camera(self, monkeypatch, tmp_path):
        monkeypatch.setattr(capture_cmd.cv2, "VideoCapture", lambda s: FakeVideoCapture(s, opened=False))
        args = build_parser().parse_args(["capture", "-o", str(tmp_path / "s.png")])
        assert run_capture(args) == 2


class TestReadFrames:
    def test_file_timestamps_follow_position(self):
        frames = list(capture_cmd.read_frames(FakeVideoCapture("x.mp4", n_frames=3), live=False))
        assert [f.frame_id for f in frames] == [0, 1, 2]
        assert [f.t_ms for f in frames] == [0.0, 100.0, 200.0]

    def test_max_frames(self):
        frames = list(capture_cmd.read_frames(FakeVideoCapture("x.mp4"), live=False, max_frames=4))
        assert len(frames) == 4

    def test_live_timestamps_increase(self):
        frames = list(capture_cmd.read_frames(FakeVideoCapture(0, n_frames=3), live=True))
        stamps = [f.t_src_ns for f in frames]
        assert stamps == sorted(stamps)
