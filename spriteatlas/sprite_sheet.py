import json
import os
from collections.abc import Mapping
from typing import Dict, Iterator, Tuple

from .allocator import Rectangle


class SpriteSheet(Mapping):
    """Read-only mapping from sprite name to its rectangle in the atlas."""

    def __init__(self, sprites: Mapping[str, Rectangle], width: int, height: int):
        # Copies, so callers can't move a sprite after the fact
        self._sprites: Dict[str, Rectangle] = {
            name: Rectangle(rect.width, rect.height, rect.x, rect.y)
            for name, rect in sprites.items()
        }
        self.width = width
        self.height = height

    def __getitem__(self, name: str) -> Rectangle:
        rect = self._sprites[name]
        return Rectangle(rect.width, rect.height, rect.x, rect.y)

    def __iter__(self) -> Iterator[str]:
        return iter(self._sprites)

    def __len__(self) -> int:
        return len(self._sprites)

    def __repr__(self):
        return f"SpriteSheet({len(self)} sprites, {self.width}×{self.height})"

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    def efficiency(self) -> float:
        """Percentage of the atlas covered by distinct sprite rectangles."""
        total_pixels = self.width * self.height
        sprite_pixels = sum(rect.area() for rect in set(self._sprites.values()))
        return (sprite_pixels / total_pixels) * 100 if total_pixels > 0 else 0

    def to_dict(self, image_name: str = "") -> dict:
        return {
            "frames": {name: {"frame": rect.to_dict()} for name, rect in self._sprites.items()},
            "meta": {
                "image": image_name,
                "format": "RGBA8888",
                "size": {"w": self.width, "h": self.height},
                "scale": "1",
            },
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'SpriteSheet':
        sprites = {}
        for name, entry in data["frames"].items():
            frame = entry["frame"]
            sprites[name] = Rectangle(frame["w"], frame["h"], frame["x"], frame["y"])
        size = data["meta"]["size"]
        return cls(sprites, size["w"], size["h"])

    def save(self, path: str, image_path: str = ""):
        """Write the sheet as JSON; the image is referenced by basename."""
        with open(path, 'w') as f:
            json.dump(self.to_dict(os.path.basename(image_path)), f, indent=2)

    @classmethod
    def load(cls, path: str) -> 'SpriteSheet':
        with open(path) as f:
            return cls.from_dict(json.load(f))
