import pytest
from PIL import Image

from ndsbanner.banner import (
    SIZE_DSI,
    SIZE_KOREAN,
    Banner,
    BannerVersion,
)
from ndsbanner.cli import main


@pytest.fixture
def dsi_path(tmp_path):
    banner = Banner()
    banner.set_version(BannerVersion.DSI)
    path = tmp_path / "banner.bin"
    banner.save(path)
    return path


@pytest.fixture
def normal_path(tmp_path):
    banner = Banner()
    banner.set_version(BannerVersion.NORMAL)
    path = tmp_path / "normal.bin"
    banner.save(path)
    return path


def _title(banner, index):
    return banner.titles[index].decode("utf-16-le").split("\0", 1)[0]


def test_invalid_size_reports_error(tmp_path, capsys):
    path = tmp_path / "bad.bin"
    path.write_bytes(b"\0" * 16)
    assert main(["info", str(path)]) == 1
    assert "Invalid banner size" in capsys.readouterr().err


def test_set_title_round_trip(dsi_path):
    assert main(["set-title", str(dsi_path), "english", "Hello\nWorld"]) == 0
    banner = Banner.load(dsi_path)
    assert _title(banner, 1) == "Hello\nWorld"


def test_set_title_unavailable_language(normal_path):
    assert main(["set-title", str(normal_path), "korean", "x"]) == 1


def test_copy_title(dsi_path):
    main(["set-title", str(dsi_path), "0", "Game"])
    assert main(["copy-title", str(dsi_path), "japanese"]) == 0
    banner = Banner.load(dsi_path)
    assert all(_title(banner, i) == "Game" for i in range(8))


def test_set_version_changes_size(dsi_path, tmp_path):
    out = tmp_path / "korean.bin"
    assert main(["set-version", str(dsi_path), "korean", "-o", str(out)]) == 0
    assert out.stat().st_size == SIZE_KOREAN
    assert Banner.load(out).version == BannerVersion.KOREAN
    assert dsi_path.stat().st_size == SIZE_DSI


def test_info_lists_titles_and_frames(dsi_path, capsys):
    main(["set-title", str(dsi_path), "english", "My Game"])
    main(["add-frame", str(dsi_path), "--duration", "5"])
    main(["add-frame", str(dsi_path)])
    capsys.readouterr()
    assert main(["info", str(dsi_path)]) == 0
    out = capsys.readouterr().out
    assert "'My Game'" in out
    assert "Frames: 2" in out


def test_add_and_remove_frame(dsi_path):
    main(["add-frame", str(dsi_path), "--duration", "4", "--flip-h"])
    main(["add-frame", str(dsi_path), "--duration", "7", "--bitmap", "3"])
    banner = Banner.load(dsi_path)
    assert banner.frame_count == 2
    assert banner.frames[0].flip_h is True
    assert banner.frames[1].bitmap == 2
    assert main(["remove-frame", str(dsi_path), "1"]) == 0
    banner = Banner.load(dsi_path)
    assert banner.frame_count == 1
    assert banner.frames[0].duration == 7


def test_add_frame_needs_dsi(normal_path):
    assert main(["add-frame", str(normal_path)]) == 1


def test_remove_missing_frame(dsi_path):
    assert main(["remove-frame", str(dsi_path), "1"]) == 1


def test_import_export_round_trip(dsi_path, tmp_path):
    img = Image.new("RGB", (32, 32), (0, 0, 0))
    for x in range(0, 32, 2):
        for y in range(32):
            img.putpixel((x, y), (255, 255, 255))
    source = tmp_path / "icon.png"
    img.save(source)
    assert main(["import-icon", str(dsi_path), str(source)]) == 0
    exported = tmp_path / "out.png"
    assert main(["export-icon", str(dsi_path), str(exported)]) == 0
    with Image.open(exported) as result:
        assert result.convert("RGBA").tobytes() == img.convert("RGBA").tobytes()


def test_import_wrong_size(dsi_path, tmp_path):
    source = tmp_path / "small.png"
    Image.new("RGB", (16, 16)).save(source)
    assert main(["import-icon", str(dsi_path), str(source)]) == 1


def test_extra_bitmap_needs_dsi(normal_path, tmp_path):
    out = tmp_path / "x.png"
    assert main(["export-icon", str(normal_path), str(out), "--bitmap", "1"]) == 1


def test_animate_writes_one_png_per_frame(dsi_path, tmp_path):
    main(["add-frame", str(dsi_path), "--duration", "2"])
    main(["add-frame", str(dsi_path), "--duration", "3", "--flip-v"])
    out_dir = tmp_path / "frames"
    assert main(["animate", str(dsi_path), str(out_dir)]) == 0
    files = sorted(p.name for p in out_dir.iterdir())
    assert files == ["frame_01.png", "frame_02.png"]


def test_animate_without_frames(dsi_path, tmp_path):
    assert main(["animate", str(dsi_path), str(tmp_path / "frames")]) == 1