"""
Tests for the command-line front end.
"""
import cv2
import pytest

from enhancer import decode
from enhancer.cli import build_argparser, main, params_from_args


@pytest.fixture
def image_file(photo, tmp_path):
    path = tmp_path / "photo.png"
    cv2.imwrite(str(path), photo.to_bgr())
    return path


class TestArgs:

    def test_defaults_are_identity(self):
        args = build_argparser().parse_args(["--image", "x.png"])
        p = params_from_args(args)
        assert p.is_identity()
        assert p.quality == 90

    def test_requires_an_input(self):
        with pytest.raises(SystemExit):
            main([])


class TestMain:

    def test_single_image(self, image_file, tmp_path):
        out = tmp_path / "result.jpg"
        code = main(["--image", str(image_file), "--out", str(out),
                     "--sharpen", "0.5", "--denoise", "40", "--quality", "85"])
        assert code == 0
        assert decode(out.read_bytes()).shape == (64, 96)

    def test_preview_mode(self, image_file, tmp_path):
        code = main(["--image", str(image_file), "--save_dir", str(tmp_path / "prev"),
                     "--preview", "--preview_max_side", "24"])
        assert code == 0
        written = tmp_path / "prev" / "photo_preview.jpg"
        assert decode(written.read_bytes()).shape == (16, 24)

    def test_preview_clamps_out_of_range_quality(self, image_file, tmp_path):
        out = tmp_path / "prev.jpg"
        code = main(["--image", str(image_file), "--out", str(out),
                     "--preview", "--preview_max_side", "24", "--quality", "150"])
        assert code == 0
        assert decode(out.read_bytes()).shape == (16, 24)

    def test_strict_preview_rejects_out_of_range_quality(self, image_file, tmp_path):
        out = tmp_path / "prev.jpg"
        code = main(["--image", str(image_file), "--out", str(out),
                     "--preview", "--quality", "150", "--strict"])
        assert code == 1
        assert not out.exists()

    def test_directory(self, image_file, tmp_path):
        out_dir = tmp_path / "batch"
        code = main(["--dir", str(image_file.parent), "--save_dir", str(out_dir), "--workers", "2"])
        assert code == 0
        assert (out_dir / "photo_enhanced.jpg").exists()

    def test_strict_out_of_range_fails(self, image_file, tmp_path):
        code = main(["--image", str(image_file), "--out", str(tmp_path / "o.jpg"),
                     "--brightness", "300", "--strict"])
        assert code == 1
        assert not (tmp_path / "o.jpg").exists()

    def test_missing_file(self, tmp_path):
        assert main(["--image", str(tmp_path / "nope.png"), "--out", str(tmp_path / "o.jpg")]) == 2

    def test_bad_runtime_config(self, image_file):
        with pytest.raises(SystemExit):
            main(["--image", str(image_file), "--workers", "0"])
