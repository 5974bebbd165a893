# ndsbanner

Read, edit and write Nintendo DS `banner.bin` files: the 32×32 icon,
the per-language game titles, the banner version (normal, Chinese,
Korean, DSi) and the DSi animated icon sequence.

## Installing

```
pip install .
```

Pillow is used to read and write images. Tests run with `pytest`
(`pip install .[test]`).

## Command line

```
ndsbanner --help
```

Every command takes the banner file as its first argument. Commands
that change the banner write it back in place, or to `-o/--output`.

| Command | What it does |
| --- | --- |
| `info BANNER` | Show version, size, titles and animation frames |
| `set-version BANNER {normal,chinese,korean,dsi}` | Change the banner version |
| `set-title BANNER LANGUAGE TEXT` | Set one language's title (cut to 128 UTF-16 units) |
| `copy-title BANNER LANGUAGE` | Copy one title to all eight languages |
| `export-icon BANNER IMAGE [--bitmap N] [--palette N]` | Save an icon as PNG |
| `import-icon BANNER IMAGE [--bitmap N] [--palette N] [--keep-palette]` | Replace an icon with a 32×32 image |
| `add-frame BANNER [--duration D] [--bitmap N] [--palette N] [--flip-h] [--flip-v]` | Append a DSi animation frame |
| `remove-frame BANNER FRAME` | Remove a DSi animation frame (numbered from 1) |
| `animate BANNER DIRECTORY` | Render each animation frame to `frame_NN.png` |

`LANGUAGE` is a name (Japanese, English, French, German, Italian,
Spanish, Chinese, Korean) or an index from 0 to 7; Chinese and Korean
titles are only stored by banner versions that hold them. Without
`--bitmap` the icon commands work on the main icon; `--bitmap` and
`--palette` (1–8) pick a DSi extra bitmap and palette. Errors are
printed to standard error and the command exits with status 1.

## Library use

```python
from ndsbanner.banner import Banner, BannerVersion

banner = Banner.load("banner.bin")
banner.set_title(1, "My Game\nSubtitle\nPublisher")
banner.set_version(BannerVersion.DSI)

img = banner.export_icon()          # main icon as a Pillow image
img.save("icon.png")
banner.export_icon(0, 0).save("extra1.png")   # DSi bitmap 0, palette 0

banner.save("banner.bin")           # CRCs are recomputed on save
```

- `ndsbanner.banner` — `Banner` (`from_bytes`, `load`, `to_bytes`,
  `save`, `differs_from`, `set_version`, `max_language`, `set_title`,
  `copy_title_to_all`, `icon`, `export_icon`, `import_icon`,
  `add_frame`, `remove_frame`, `frame_count`), `AnimFrame`,
  `BannerVersion`, `banner_size` and `BannerError`, raised for
  invalid sizes, wrong image dimensions and a full animation.
- `ndsbanner.image` — `NDSImage` converts between 4bpp/8bpp 8×8-tiled
  data with a BGR555 palette and Pillow images (`from_nitro`,
  `from_image`, `from_image_auto`, `to_image`, `to_nitro`, `tiled`);
  `from_image_auto` builds a palette when the image has none. Also
  `to_rgb15`, `to_rgb24`, `create_palette`, `closest_match` and
  `pixel_distance`.
- `ndsbanner.animation` — `AnimationPlayer` renders the DSi frames
  (with flips) and steps through the sequence one tick at a time
  (`play`, `tick`, `stop`, `seek`, `status`), optionally looping.
- `ndsbanner.crc` — `crc16`, the checksum stored in the banner header.

## What it does not do

There is no graphical editor and no on-screen animation preview:
`AnimationPlayer` only tracks frames and ticks, and leaves timing and
display to the caller. The command line and the library are the only
interfaces.