"""Conversion between 4bpp/8bpp tiled Nintendo DS graphics and Pillow images."""

import math

from PIL import Image

MAGENTA = (0xFF, 0x00, 0xFF, 0xFF)
_TRANSPARENT_MAGENTA = (0xFF, 0x00, 0xFF, 0x00)
_PAD_COLOR = (0, 0, 0, 0xFF)


def _qround(value):
    return int(math.floor(value + 0.5))


def to_rgb15(rgb24):
    """Convert a 0xRRGGBB colour to the 15-bit BGR555 format."""
    r = _qround(((rgb24 >> 16) & 0xFF) * 31.0 / 255.0)
    g = _qround(((rgb24 >> 8) & 0xFF) * 31.0 / 255.0)
    b = _qround((rgb24 & 0xFF) * 31.0 / 255.0)
    return (b << 10) | (g << 5) | r


def to_rgb24(rgb15):
    """Convert a 15-bit BGR555 colour to 0xRRGGBB."""
    r = _qround((rgb15 & 0x1F) * 255.0 / 31.0)
    g = _qround(((rgb15 >> 5) & 0x1F) * 255.0 / 31.0)
    b = _qround(((rgb15 >> 10) & 0x1F) * 255.0 / 31.0)
    return (r << 16) | (g << 8) | b


def _rgba_from_rgb24(rgb24):
    return ((rgb24 >> 16) & 0xFF, (rgb24 >> 8) & 0xFF, rgb24 & 0xFF, 0xFF)


def _rgb24_from_rgba(color):
    r, g, b = color[:3]
    return (r << 16) | (g << 8) | b


def pixel_distance(p1, p2):
    """Manhattan distance between two RGBA colours."""
    return sum(abs(a - b) for a, b in zip(p1, p2))


def closest_match(pixel, clut, alpha_threshold):
    """Index of the palette entry closest to ``pixel``; 0 means transparent."""
    if pixel[3] < alpha_threshold or tuple(pixel) == MAGENTA:
        return 0
    best_index = 0
    best_distance = None
    for index, color in enumerate(clut[1:], start=1):
        distance = pixel_distance(pixel, color)
        if best_distance is None or distance < best_distance:
            best_distance = distance
            best_index = index
    return best_index


def create_palette(colors, color_count):
    """Reduce or pad RGBA ``colors`` to ``color_count`` BGR555 palette entries."""
    pal = [tuple(c) for c in colors]
    if len(pal) < color_count:
        pal.extend([_PAD_COLOR] * (color_count - len(pal)))

    if len(pal) > color_count:
        if color_count <= 0:
            raise ValueError("color_count must be positive")
        ranges = [
            max(c[ch] for c in pal) - min(c[ch] for c in pal) for ch in range(3)
        ]
        widest = max(ranges)
        channel = ranges.index(widest)
        pal.sort(key=lambda c: (c[3] != 0, c[channel]))

        group_size = float(len(pal) // color_count)
        return [
            to_rgb15(_rgb24_from_rgba(pal[_qround(group_size * i + group_size / 2)]))
            for i in range(color_count)
        ]

    return [to_rgb15(_rgb24_from_rgba(c)) for c in pal[:color_count]]


def _retile(texture, tile_width, inverse):
    width = tile_width * 8
    height = len(texture) // width
    out = [0] * len(texture)
    for y in range(height):
        for x in range(width):
            linear = x + y * width
            tile_pixel = linear % 64
            tx, ty = tile_pixel % 8, tile_pixel // 8
            tile = linear // 64
            gx = (tile % tile_width) * 8
            gy = (tile // tile_width) * 8
            image_pos = (gx + tx) + (gy + ty) * width
            if inverse:
                out[linear] = texture[image_pos]
            else:
                out[image_pos] = texture[linear]
    return out


def _indexed_colors(img):
    """RGBA colour table of a palette image, or None for other modes."""
    if img.mode != "P":
        return None
    flat = img.getpalette() or []
    rgb = [tuple(flat[i:i + 3]) for i in range(0, len(flat) - 2, 3)]
    alphas = [0xFF] * len(rgb)
    transparency = img.info.get("transparency")
    if isinstance(transparency, int):
        if 0 <= transparency < len(alphas):
            alphas[transparency] = 0
    elif isinstance(transparency, (bytes, bytearray)):
        for index, alpha in enumerate(transparency[: len(alphas)]):
            alphas[index] = alpha
    return [color + (alpha,) for color, alpha in zip(rgb, alphas)]


def _rgba_pixels(img):
    data = img.convert("RGBA").tobytes()
    return list(zip(*[iter(data)] * 4))


class NDSImage:
    """A tiled indexed texture with a BGR555 palette."""

    def __init__(self, texture=None, palette=None):
        self.texture = list(texture) if texture is not None else []
        self.palette = list(palette) if palette is not None else []

    def __repr__(self):
        return f"NDSImage(pixels={len(self.texture)}, colors={len(self.palette)})"

    @classmethod
    def from_nitro(cls, ncg, ncl, is_4bpp=True):
        """Build from raw character data and a palette."""
        data = bytes(ncg)
        if is_4bpp:
            texture = []
            for byte in data:
                texture.append(byte & 0xF)
                texture.append((byte >> 4) & 0xF)
        else:
            texture = list(data)
        return cls(texture, ncl)

    @classmethod
    def from_image(cls, img, palette, alpha_threshold):
        """Build from a Pillow image using a fixed BGR555 palette."""
        width, _ = img.size
        table = _indexed_colors(img)
        if table is not None and len(table) <= 16:
            linear = list(img.tobytes())
        else:
            clut = [_rgba_from_rgb24(to_rgb24(c)) for c in palette]
            linear = [
                closest_match(pixel, clut, alpha_threshold)
                for pixel in _rgba_pixels(img)
            ]
        return cls(_retile(linear, width // 8, True), palette)

    @classmethod
    def from_image_auto(cls, img, color_count, alpha_threshold):
        """Build from a Pillow image, deriving a palette of ``color_count`` colours."""
        colors = [_TRANSPARENT_MAGENTA]
        table = _indexed_colors(img)
        if table is not None:
            if len(table) <= 16:
                colors.clear()
            colors.extend(table)
        else:
            seen = set(colors)
            for pixel in _rgba_pixels(img):
                if pixel in seen or pixel[3] < alpha_threshold or pixel == MAGENTA:
                    continue
                seen.add(pixel)
                colors.append(pixel)
        palette = create_palette(colors, color_count)
        return cls.from_image(img, palette, alpha_threshold)

    def tiled(self, tile_width, inverse=False):
        """Reorder the texture between tile order and linear image order."""
        return _retile(self.texture, tile_width, inverse)

    def to_image(self, tile_width):
        """Render as a palette image; palette entry 0 is transparent."""
        if not self.palette:
            raise ValueError("image has no palette")
        width = tile_width * 8
        height = len(self.texture) // width
        flat = []
        for color in self.palette:
            rgb24 = to_rgb24(color)
            flat.extend(((rgb24 >> 16) & 0xFF, (rgb24 >> 8) & 0xFF, rgb24 & 0xFF))
        pixels = bytes(self.tiled(tile_width, False)[: width * height])
        out = Image.frombytes("P", (width, height), pixels)
        out.putpalette(flat)
        out.info["transparency"] = 0
        return out

    def to_nitro(self, is_4bpp=True):
        """Return ``(ncg, ncl)``: packed character bytes and the palette."""
        if is_4bpp:
            ncg = bytes(
                (low & 0xF) | ((high & 0xF) << 4)
                for low, high in zip(self.texture[0::2], self.texture[1::2])
            )
        else:
            ncg = bytes(self.texture)
        return ncg, list(self.palette)