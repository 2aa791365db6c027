import hashlib
import io
import logging
from typing import Callable, Dict, Iterator, Optional, Tuple

from PIL import Image, UnidentifiedImageError

from .errors import DecodeError

log = logging.getLogger(__name__)

# Both are part of the ContentId format: changing either changes every id.
HASH_SEED = 1312
HASH_PERSON = b"spriteatlas-v1"

ContentId = str


def content_id(data: bytes) -> ContentId:
    """128-bit fingerprint of raw image bytes, as 32 hex characters."""
    digest = hashlib.blake2b(
        data,
        digest_size=16,
        key=HASH_SEED.to_bytes(4, "little"),
        person=HASH_PERSON,
    )
    return digest.hexdigest()


def decode_image(data: bytes) -> Image.Image:
    """Decode raw bytes into an RGBA image."""
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
        raise DecodeError(f"Not a valid image: {e}") from e
    return img.convert("RGBA")


class StoredImage:
    """Decoded pixels plus the size the allocator is asked for."""
    __slots__ = ("image", "width", "height")

    def __init__(self, image: Image.Image, width: int, height: int):
        self.image = image
        self.width = width
        self.height = height

    def __repr__(self):
        return f"StoredImage({self.width}×{self.height})"


class ContentStore:
    """Content-addressed store of decoded images, one per distinct byte content."""

    def __init__(self, decoder: Callable[[bytes], Image.Image] = decode_image):
        self.decoder = decoder
        self._images: Dict[ContentId, StoredImage] = {}

    def __contains__(self, cid: ContentId) -> bool:
        return cid in self._images

    def __len__(self) -> int:
        return len(self._images)

    def get(self, cid: ContentId) -> StoredImage:
        return self._images[cid]

    def items(self) -> Iterator[Tuple[ContentId, StoredImage]]:
        return iter(self._images.items())

    def discard(self, cid: ContentId):
        self._images.pop(cid, None)

    def submit(self, data: bytes, size: Optional[Tuple[int, int]] = None) -> ContentId:
        """Store the image for these bytes unless identical bytes were seen before.

        The explicit size, if given, replaces the decoded size for packing; it is
        not checked against the pixel data.
        """
        cid = content_id(data)
        if cid in self._images:
            log.debug("Duplicate content %s, skipping decode", cid)
            return cid

        image = self.decoder(data)
        width, height = size if size is not None else image.size
        self._images[cid] = StoredImage(image, width, height)
        return cid
