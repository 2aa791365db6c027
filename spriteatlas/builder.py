import logging
from typing import Callable, Dict, List, Optional, Tuple

from PIL import Image

from .allocator import Allocation, AtlasAllocator, HeuristicType
from .dedup import ContentId, ContentStore, decode_image
from .errors import BuilderConsumed
from .registry import AllocationRegistry
from .sprite_sheet import SpriteSheet

log = logging.getLogger(__name__)

DEFAULT_SIZE = (1024, 1024)


class AtlasBuilder:
    """Packs deduplicated images into one growable texture atlas.

    Push images one at a time, then call build() once. The canvas doubles in
    both dimensions whenever an image doesn't fit. Growth marks the layout
    dirty; a dirty layout is rearranged once, right before the atlas is
    composed, rather than after every push.
    """

    def __init__(self, initial_size: Tuple[int, int] = DEFAULT_SIZE,
                 heuristic: HeuristicType = HeuristicType.BEST_SHORT_SIDE_FIT,
                 decoder: Callable[[bytes], Image.Image] = decode_image):
        self.allocator = AtlasAllocator(initial_size[0], initial_size[1], heuristic)
        self.store = ContentStore(decoder)
        self.registry = AllocationRegistry()
        self.identities: Dict[str, ContentId] = {}
        self._dirty = False
        self._consumed = False

    @property
    def dirty(self) -> bool:
        """Whether the layout may be fragmented since the last rearrange."""
        return self._dirty

    @property
    def canvas_size(self) -> Tuple[int, int]:
        return self.allocator.size()

    @property
    def content_ids(self) -> List[ContentId]:
        return [cid for cid, _ in self.store.items()]

    def allocation(self, cid: ContentId) -> Allocation:
        return self.registry.get(cid)

    def _check_not_consumed(self):
        if self._consumed:
            raise BuilderConsumed("This builder has already been built")

    def push(self, identity: str, data: bytes, size: Optional[Tuple[int, int]] = None) -> ContentId:
        """Add one image under the given name and return its ContentId."""
        self._check_not_consumed()

        cid = self.store.submit(data, size)
        if cid in self.registry:
            self.identities[identity] = cid
            return cid

        stored = self.store.get(cid)
        grew = False
        try:
            # Try allocating; if it doesn't fit, grow the atlas and retry
            while True:
                allocation = self.allocator.allocate(stored.width, stored.height)
                if allocation is not None:
                    break
                self._grow()
                grew = True
        except Exception:
            # Unplaced content must not reach build()
            self.store.discard(cid)
            raise

        self.registry.insert(cid, allocation)
        self.identities[identity] = cid
        if grew:
            self._dirty = True
        log.debug("Placed %s (%s) at %r", identity, cid, allocation.rectangle)
        return cid

    def push_file(self, path: str, identity: Optional[str] = None,
                  size: Optional[Tuple[int, int]] = None) -> ContentId:
        with open(path, 'rb') as f:
            data = f.read()
        return self.push(identity if identity is not None else path, data, size)

    def _grow(self):
        width, height = self.allocator.size()
        new_width, new_height = width * 2, height * 2
        log.debug("Resizing texture atlas to: %d×%d", new_width, new_height)

        change_list = self.allocator.resize_and_rearrange(new_width, new_height)
        self.registry.apply_change_list(change_list)

    def rearrange_if_dirty(self):
        if not self._dirty:
            return
        log.debug("Rearranging texture atlas")
        change_list = self.allocator.rearrange()
        self.registry.apply_change_list(change_list)
        self._dirty = False

    def build(self) -> Tuple[SpriteSheet, Image.Image]:
        """Compose the atlas image and sprite sheet. The builder can't be used afterwards."""
        self._check_not_consumed()
        self.rearrange_if_dirty()
        self._consumed = True

        width, height = self.allocator.size()
        atlas_img = Image.new('RGBA', (width, height), (0, 0, 0, 0))

        for cid, stored in self.store.items():
            rect = self.registry.get(cid).rectangle
            img = stored.image
            if img.size != (rect.width, rect.height):
                # Explicit sizes may differ from the pixels; never spill into neighbours
                img = img.crop((0, 0, rect.width, rect.height))
            atlas_img.paste(img, (rect.x, rect.y))

        sprites = {
            identity: self.registry.get(cid).rectangle
            for identity, cid in self.identities.items()
        }
        log.debug("Built %d×%d atlas with %d images for %d sprites",
                  width, height, len(self.store), len(sprites))

        self.store = ContentStore(self.store.decoder)
        self.registry = AllocationRegistry()
        self.identities = {}

        return SpriteSheet(sprites, width, height), atlas_img
