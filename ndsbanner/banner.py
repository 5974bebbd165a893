"""Nintendo DS / DSi ``banner.bin`` model: parsing, editing and saving."""

import os
import struct
from dataclasses import dataclass, field, replace
from enum import IntEnum

from PIL import Image

from .crc import crc16
from .image import NDSImage

DSI_FLAG = 1 << 8

SIZE_NORMAL = 0x840
SIZE_CHINESE = 0x940
SIZE_KOREAN = 0xA40
SIZE_DSI = 0x23C0
VALID_SIZES = (SIZE_NORMAL, SIZE_CHINESE, SIZE_KOREAN, SIZE_DSI)

TITLE_COUNT = 16
TITLE_BYTES = 0x100
TITLE_CHARS = TITLE_BYTES // 2
LANGUAGE_COUNT = 8
EXTRA_ICON_COUNT = 8
FRAME_COUNT = 64
NCG_BYTES = 0x200
NCL_COLORS = 0x10
ICON_TILE_WIDTH = 4
ICON_SIZE = (32, 32)
ALPHA_THRESHOLD = 0x80

_HEADER = struct.Struct("<H4H")
_RESERVED_BYTES = 0x16
_ICON_OFFSET = 0x20
_ICON_NCL_OFFSET = _ICON_OFFSET + NCG_BYTES
_TITLE_OFFSET = _ICON_NCL_OFFSET + NCL_COLORS * 2
_EXTRA_NCG_OFFSET = _TITLE_OFFSET + TITLE_COUNT * TITLE_BYTES
_EXTRA_NCL_OFFSET = _EXTRA_NCG_OFFSET + EXTRA_ICON_COUNT * NCG_BYTES
_ANIM_OFFSET = _EXTRA_NCL_OFFSET + EXTRA_ICON_COUNT * NCL_COLORS * 2
_PALETTE = struct.Struct(f"<{NCL_COLORS}H")
_ANIM = struct.Struct(f"<{FRAME_COUNT}H")


class BannerError(Exception):
    """Raised when banner data is invalid or an edit cannot be made."""


class BannerVersion(IntEnum):
    NORMAL = 0x0001
    CHINESE = 0x0002
    KOREAN = 0x0003
    DSI = 0x0103


def banner_size(version):
    """Number of bytes a banner of ``version`` occupies on disk."""
    if version & DSI_FLAG:
        return SIZE_DSI
    if version & 3 == 3:
        return SIZE_KOREAN
    if version & 2:
        return SIZE_CHINESE
    return SIZE_NORMAL


@dataclass
class AnimFrame:
    """One entry of the DSi icon animation sequence."""

    duration: int = 0
    bitmap: int = 0
    palette: int = 0
    flip_h: bool = False
    flip_v: bool = False

    @classmethod
    def from_word(cls, word):
        return cls(
            duration=word & 0xFF,
            bitmap=(word >> 8) & 0x7,
            palette=(word >> 11) & 0x7,
            flip_h=bool(word & (1 << 14)),
            flip_v=bool(word & (1 << 15)),
        )

    def to_word(self):
        return (
            (self.duration & 0xFF)
            | ((self.bitmap & 0x7) << 8)
            | ((self.palette & 0x7) << 11)
            | (int(bool(self.flip_h)) << 14)
            | (int(bool(self.flip_v)) << 15)
        )


def _zero_palette():
    return [0] * NCL_COLORS


@dataclass
class Banner:
    """In-memory banner; titles are kept as raw UTF-16LE slots of 0x100 bytes."""

    version: int = 0
    crc: list = field(default_factory=lambda: [0] * 4)
    reserved: bytes = bytes(_RESERVED_BYTES)
    icon_ncg: bytes = bytes(NCG_BYTES)
    icon_ncl: list = field(default_factory=_zero_palette)
    titles: list = field(default_factory=lambda: [bytes(TITLE_BYTES)] * TITLE_COUNT)
    extra_ncg: list = field(default_factory=lambda: [bytes(NCG_BYTES)] * EXTRA_ICON_COUNT)
    extra_ncl: list = field(
        default_factory=lambda: [_zero_palette() for _ in range(EXTRA_ICON_COUNT)]
    )
    frames: list = field(default_factory=lambda: [AnimFrame() for _ in range(FRAME_COUNT)])

    @classmethod
    def from_bytes(cls, data):
        data = bytes(data)
        if len(data) not in VALID_SIZES:
            raise BannerError(
                "Invalid banner size. Make sure this is a valid banner file."
            )
        data = data.ljust(SIZE_DSI, b"\0")
        version, *crc = _HEADER.unpack_from(data, 0)
        titles = [
            data[_TITLE_OFFSET + i * TITLE_BYTES:_TITLE_OFFSET + (i + 1) * TITLE_BYTES]
            for i in range(TITLE_COUNT)
        ]
        extra_ncg = [
            data[_EXTRA_NCG_OFFSET + i * NCG_BYTES:_EXTRA_NCG_OFFSET + (i + 1) * NCG_BYTES]
            for i in range(EXTRA_ICON_COUNT)
        ]
        extra_ncl = [
            list(_PALETTE.unpack_from(data, _EXTRA_NCL_OFFSET + i * _PALETTE.size))
            for i in range(EXTRA_ICON_COUNT)
        ]
        frames = [AnimFrame.from_word(w) for w in _ANIM.unpack_from(data, _ANIM_OFFSET)]
        return cls(
            version=version,
            crc=list(crc),
            reserved=data[_HEADER.size:_ICON_OFFSET],
            icon_ncg=data[_ICON_OFFSET:_ICON_NCL_OFFSET],
            icon_ncl=list(_PALETTE.unpack_from(data, _ICON_NCL_OFFSET)),
            titles=titles,
            extra_ncg=extra_ncg,
            extra_ncl=extra_ncl,
            frames=frames,
        )

    @classmethod
    def load(cls, path):
        with open(path, "rb") as handle:
            data = handle.read()
        return cls.from_bytes(data)

    def _pack(self):
        parts = [
            _HEADER.pack(self.version, *self.crc),
            bytes(self.reserved),
            bytes(self.icon_ncg),
            _PALETTE.pack(*self.icon_ncl),
            *(bytes(t) for t in self.titles),
            *(bytes(n) for n in self.extra_ncg),
            *(_PALETTE.pack(*p) for p in self.extra_ncl),
            _ANIM.pack(*(f.to_word() for f in self.frames)),
        ]
        return b"".join(parts)

    def _update_crc(self):
        data = self._pack()
        v = self.version
        self.crc = [
            crc16(data[0x20:SIZE_NORMAL]),
            crc16(data[0x20:SIZE_CHINESE]) if v & 2 else 0,
            crc16(data[0x20:SIZE_KOREAN]) if v & 3 == 3 else 0,
            crc16(data[_EXTRA_NCG_OFFSET:SIZE_DSI]) if v & DSI_FLAG else 0,
        ]

    def to_bytes(self):
        """Refresh the checksums and return the banner as stored on disk."""
        self._update_crc()
        return self._pack()[:banner_size(self.version)]

    def save(self, path):
        data = self.to_bytes()
        with open(path, "wb") as handle:
            handle.write(data)

    def differs_from(self, data):
        """True if ``data`` does not match this banner as it currently stands."""
        size = banner_size(self.version)
        return bytes(data)[:size] != self._pack()[:size]

    @property
    def frame_count(self):
        """Number of animation frames before the first zero-duration entry."""
        for index, frame in enumerate(self.frames):
            if not frame.duration:
                return index
        return len(self.frames)

    def set_version(self, version):
        self.version = int(BannerVersion(version))

    def max_language(self):
        """Highest title language index this banner version holds."""
        if self.version & 3 == 3:
            return 7
        if self.version & 2:
            return 6
        return 5

    def set_title(self, language, text):
        """Store ``text`` (cut to 0x80 UTF-16 units) as a title; returns what was kept."""
        if not 0 <= language < TITLE_COUNT:
            raise IndexError(f"title language {language} out of range")
        raw = text.encode("utf-16-le", "surrogatepass")[:TITLE_BYTES]
        self.titles[language] = raw.ljust(TITLE_BYTES, b"\0")
        return raw.decode("utf-16-le", "surrogatepass")

    def copy_title_to_all(self, language):
        if not 0 <= language < LANGUAGE_COUNT:
            raise IndexError(f"title language {language} out of range")
        source = self.titles[language]
        for index in range(LANGUAGE_COUNT):
            if index != language:
                self.titles[index] = source

    def _check_icon(self, bitmap, palette):
        if bitmap is None:
            return
        if not 0 <= bitmap < EXTRA_ICON_COUNT:
            raise IndexError(f"bitmap {bitmap} out of range")
        if not 0 <= palette < EXTRA_ICON_COUNT:
            raise IndexError(f"palette {palette} out of range")

    def icon(self, bitmap=None, palette=0):
        """The main icon when ``bitmap`` is None, else a DSi extra bitmap/palette pair."""
        self._check_icon(bitmap, palette)
        if bitmap is None:
            return NDSImage.from_nitro(self.icon_ncg, self.icon_ncl, True)
        return NDSImage.from_nitro(self.extra_ncg[bitmap], self.extra_ncl[palette], True)

    def export_icon(self, bitmap=None, palette=0):
        return self.icon(bitmap, palette).to_image(ICON_TILE_WIDTH)

    def import_icon(self, img, bitmap=None, palette=0, new_palette=True):
        """Replace an icon with a 32x32 image, optionally rebuilding its palette."""
        self._check_icon(bitmap, palette)
        if isinstance(img, (str, os.PathLike)):
            img = Image.open(img)
            img.load()
        if img.size != ICON_SIZE:
            raise BannerError("The imported image is not 32x32 pixels.")
        if bitmap is None:
            new_palette = True
        if new_palette:
            nds = NDSImage.from_image_auto(img, NCL_COLORS, ALPHA_THRESHOLD)
        else:
            nds = NDSImage.from_image(img, list(self.extra_ncl[palette]), ALPHA_THRESHOLD)
        ncg, ncl = nds.to_nitro(True)
        ncg = bytes(ncg[:NCG_BYTES]).ljust(NCG_BYTES, b"\0")
        ncl = (list(ncl) + _zero_palette())[:NCL_COLORS]
        if bitmap is None:
            self.icon_ncg = ncg
            self.icon_ncl = ncl
        else:
            self.extra_ncg[bitmap] = ncg
            self.extra_ncl[palette] = ncl

    def add_frame(self):
        """Append an animation frame of duration 1; returns its index."""
        index = self.frame_count
        if index >= FRAME_COUNT:
            raise BannerError("The animation already has the maximum number of frames.")
        self.frames[index] = replace(self.frames[index], duration=1)
        return index

    def remove_frame(self, index):
        count = self.frame_count
        if not 0 <= index < count:
            raise IndexError(f"frame {index} out of range")
        self.frames = (
            self.frames[:index]
            + self.frames[index + 1:count]
            + [AnimFrame()]
            + self.frames[count:]
        )