import io
import struct
import zlib
from typing import Iterable, Tuple

from PIL import Image

from spriteatlas.allocator import Rectangle


def make_image(width: int, height: int, seed: int = 0) -> Image.Image:
    """RGBA image whose pixels depend on the seed."""
    data = bytes((seed * 31 + i * 7) % 256 for i in range(width * height * 4))
    return Image.frombytes('RGBA', (width, height), data)


def encode_png(img: Image.Image) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format='PNG')
    return buf.getvalue()


def png_bytes(width: int, height: int, seed: int = 0) -> bytes:
    return encode_png(make_image(width, height, seed))


def solid_png(width: int, height: int, color: Tuple[int, int, int, int] = (255, 0, 0, 255)) -> bytes:
    return encode_png(Image.new('RGBA', (width, height), color))


def find_overlap(rects: Iterable[Rectangle]):
    """Return the first overlapping pair, or None."""
    rects = list(rects)
    for i, a in enumerate(rects):
        for b in rects[i + 1:]:
            if a.intersects(b):
                return a, b
    return None


def png_header_only(width: int, height: int) -> bytes:
    """A PNG that declares the given size but carries no pixel data."""
    def chunk(kind: bytes, data: bytes) -> bytes:
        return (struct.pack(">I", len(data)) + kind + data +
                struct.pack(">I", zlib.crc32(kind + data) & 0xffffffff))

    ihdr = struct.pack(">IIBBBBB", width, height, 8, 6, 0, 0, 0)
    return b"\x89PNG\r\n\x1a\n" + chunk(b"IHDR", ihdr) + chunk(b"IEND", b"")


# Pushed in this order into a 32x32 builder, these pack incrementally into
# 64x64 but not when repacked largest first into the same canvas.
FRAGMENTED_SIZES = [(22, 9), (22, 10), (19, 28), (17, 37), (4, 34), (18, 24),
                    (38, 7), (24, 1), (33, 1), (7, 32), (24, 2)]
