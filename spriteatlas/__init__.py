from .allocator import Allocation, AtlasAllocator, Change, ChangeList, HeuristicType, Rectangle
from .builder import DEFAULT_SIZE, AtlasBuilder
from .dedup import HASH_SEED, ContentStore, StoredImage, content_id, decode_image
from .errors import AllocationsFailed, AtlasError, BuilderConsumed, DecodeError
from .registry import AllocationRegistry
from .sprite_sheet import SpriteSheet

__all__ = [
    "Allocation", "AllocationRegistry", "AllocationsFailed", "AtlasAllocator", "AtlasBuilder",
    "AtlasError", "BuilderConsumed", "Change", "ChangeList", "ContentStore", "DEFAULT_SIZE",
    "DecodeError", "HASH_SEED", "HeuristicType", "Rectangle", "SpriteSheet", "StoredImage",
    "content_id", "decode_image",
]
