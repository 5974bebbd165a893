"""Command-line editor for Nintendo DS banner files."""

import argparse
import sys
from dataclasses import replace
from pathlib import Path

from PIL import Image

from .animation import AnimationPlayer
from .banner import (
    DSI_FLAG,
    FRAME_COUNT,
    Banner,
    BannerError,
    BannerVersion,
    banner_size,
)

LANGUAGES = ("Japanese", "English", "French", "German", "Italian", "Spanish",
             "Chinese", "Korean")
_VERSION_NAMES = {
    BannerVersion.NORMAL: "Normal",
    BannerVersion.CHINESE: "Chinese",
    BannerVersion.KOREAN: "Korean",
    BannerVersion.DSI: "DSi",
}


def _language(value):
    lowered = value.lower()
    for index, name in enumerate(LANGUAGES):
        if name.lower() == lowered:
            return index
    try:
        index = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"unknown language: {value}") from None
    if not 0 <= index < len(LANGUAGES):
        raise argparse.ArgumentTypeError(f"language index out of range: {value}")
    return index


def _decode_title(raw):
    return bytes(raw).decode("utf-16-le", "surrogatepass").split("\0", 1)[0]


def _version_name(version):
    try:
        return _VERSION_NAMES[BannerVersion(version)]
    except ValueError:
        return "Unknown"


def _icon_ids(banner, args):
    if args.bitmap is None:
        return None, 0
    if not banner.version & DSI_FLAG:
        raise BannerError("Extra icon bitmaps exist only in DSi banners.")
    return args.bitmap - 1, (args.palette or 1) - 1


def _require_dsi(banner):
    if not banner.version & DSI_FLAG:
        raise BannerError("Animation exists only in DSi banners.")


def _save(banner, args):
    banner.save(args.output or args.banner)


def _cmd_info(banner, args):
    version = banner.version
    print(f"Version: {_version_name(version)} (0x{version:04X})")
    print(f"Size: 0x{banner_size(version):X} bytes")
    for index in range(banner.max_language() + 1):
        print(f"Title [{LANGUAGES[index]}]: {_decode_title(banner.titles[index])!r}")
    print(f"Frames: {banner.frame_count}")
    for number, frame in enumerate(banner.frames[:banner.frame_count], start=1):
        flips = "".join(
            flag for flag, on in ((" flip-h", frame.flip_h), (" flip-v", frame.flip_v)) if on
        )
        print(
            f"  Frame {number}: duration {frame.duration}, bitmap {frame.bitmap + 1}, "
            f"palette {frame.palette + 1}{flips}"
        )


def _cmd_set_version(banner, args):
    banner.set_version(BannerVersion[args.version.upper()])
    _save(banner, args)


def _cmd_set_title(banner, args):
    if args.language > banner.max_language():
        raise BannerError(
            f"{LANGUAGES[args.language]} titles are not stored in this banner version."
        )
    kept = banner.set_title(args.language, args.text)
    if kept != args.text:
        print(f"Title cut to: {kept!r}", file=sys.stderr)
    _save(banner, args)


def _cmd_copy_title(banner, args):
    if args.language > banner.max_language():
        raise BannerError(
            f"{LANGUAGES[args.language]} titles are not stored in this banner version."
        )
    banner.copy_title_to_all(args.language)
    _save(banner, args)


def _cmd_export_icon(banner, args):
    bitmap, palette = _icon_ids(banner, args)
    banner.export_icon(bitmap, palette).save(args.image, "PNG")


def _cmd_import_icon(banner, args):
    bitmap, palette = _icon_ids(banner, args)
    with Image.open(args.image) as img:
        img.load()
        banner.import_icon(img, bitmap, palette, not args.keep_palette)
    _save(banner, args)


def _cmd_add_frame(banner, args):
    _require_dsi(banner)
    if not 1 <= args.duration <= 0xFF:
        raise BannerError("Frame duration must be between 1 and 255.")
    for value in (args.bitmap, args.palette):
        if not 1 <= value <= 8:
            raise BannerError("Bitmap and palette numbers must be between 1 and 8.")
    index = banner.add_frame()
    banner.frames[index] = replace(
        banner.frames[index],
        duration=args.duration,
        bitmap=args.bitmap - 1,
        palette=args.palette - 1,
        flip_h=args.flip_h,
        flip_v=args.flip_v,
    )
    _save(banner, args)
    print(f"Frame {index + 1}")


def _cmd_remove_frame(banner, args):
    _require_dsi(banner)
    banner.remove_frame(args.frame - 1)
    _save(banner, args)


def _cmd_animate(banner, args):
    _require_dsi(banner)
    out_dir = Path(args.directory)
    out_dir.mkdir(parents=True, exist_ok=True)
    player = AnimationPlayer(banner)
    for number, image in enumerate(player.render(), start=1):
        image.save(out_dir / f"frame_{number:02d}.png", "PNG")
    print(f"Frames: {player.frame_count}, ticks: {player.tick_count - 1}")


def _build_parser():
    parser = argparse.ArgumentParser(
        prog="ndsbanner", description="Nintendo DS Banner Editor"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    def command(name, func, help_text, writes=False):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("banner", help="banner .bin file")
        if writes:
            p.add_argument("-o", "--output", help="write here instead of in place")
        p.set_defaults(func=func)
        return p

    command("info", _cmd_info, "show the banner's contents")

    p = command("set-version", _cmd_set_version, "change the banner version", True)
    p.add_argument("version", choices=[v.name.lower() for v in BannerVersion])

    p = command("set-title", _cmd_set_title, "set one language's title", True)
    p.add_argument("language", type=_language)
    p.add_argument("text")

    p = command("copy-title", _cmd_copy_title, "copy one title to all languages", True)
    p.add_argument("language", type=_language)

    for name, func, help_text, writes in (
        ("export-icon", _cmd_export_icon, "save an icon as PNG", False),
        ("import-icon", _cmd_import_icon, "replace an icon with a 32x32 image", True),
    ):
        p = command(name, func, help_text, writes)
        p.add_argument("image", help="PNG file")
        p.add_argument("--bitmap", type=int, choices=range(1, 9),
                       help="DSi extra bitmap (1-8); main icon if omitted")
        p.add_argument("--palette", type=int, choices=range(1, 9),
                       help="DSi extra palette (1-8)")
        if name == "import-icon":
            p.add_argument("--keep-palette", action="store_true",
                           help="map onto the existing palette of an extra icon")

    p = command("add-frame", _cmd_add_frame, "append an animation frame", True)
    p.add_argument("--duration", type=int, default=1)
    p.add_argument("--bitmap", type=int, default=1)
    p.add_argument("--palette", type=int, default=1)
    p.add_argument("--flip-h", action="store_true")
    p.add_argument("--flip-v", action="store_true")

    p = command("remove-frame", _cmd_remove_frame, "remove an animation frame", True)
    p.add_argument("frame", type=int, help=f"frame number (1-{FRAME_COUNT})")

    p = command("animate", _cmd_animate, "render animation frames to PNG files")
    p.add_argument("directory")
    return parser


def main(argv=None):
    args = _build_parser().parse_args(argv)
    try:
        banner = Banner.load(args.banner)
        args.func(banner, args)
    except (BannerError, OSError, IndexError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())