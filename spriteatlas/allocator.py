import enum
import logging
from typing import Dict, List, Optional, Tuple

log = logging.getLogger(__name__)


class Rectangle:
    """Represents a rectangle with width, height, and position (x, y)."""
    def __init__(self, width: int, height: int, x: int = 0, y: int = 0):
        self.width = width
        self.height = height
        self.x = x
        self.y = y

    def __repr__(self):
        return f"Rectangle({self.width}×{self.height} at ({self.x},{self.y}))"

    def __eq__(self, other):
        if not isinstance(other, Rectangle):
            return NotImplemented
        return self.as_tuple() == other.as_tuple()

    def __hash__(self):
        return hash(self.as_tuple())

    def as_tuple(self) -> Tuple[int, int, int, int]:
        return (self.x, self.y, self.width, self.height)

    def to_dict(self) -> Dict[str, int]:
        return {"x": self.x, "y": self.y, "w": self.width, "h": self.height}

    def intersects(self, other: 'Rectangle') -> bool:
        """Check if this rectangle intersects with another."""
        return not (
            self.x + self.width <= other.x or
            self.y + self.height <= other.y or
            self.x >= other.x + other.width or
            self.y >= other.y + other.height
        )

    def contains(self, other: 'Rectangle') -> bool:
        """Check if another rectangle lies completely inside this one."""
        return (other.x >= self.x and
                other.y >= self.y and
                other.x + other.width <= self.x + self.width and
                other.y + other.height <= self.y + self.height)

    def area(self) -> int:
        """Get the area of the rectangle."""
        return self.width * self.height


class HeuristicType(enum.Enum):
    """Enum for placement heuristics."""
    BEST_SHORT_SIDE_FIT = 1  # Minimize the shorter leftover side
    BEST_LONG_SIDE_FIT = 2   # Minimize the longer leftover side
    BEST_AREA_FIT = 3        # Minimize the total area of leftover space
    BOTTOM_LEFT = 4          # Place at the lowest y, then lowest x


class Allocation:
    """A placed rectangle and the handle the allocator knows it by."""
    __slots__ = ("id", "rectangle")

    def __init__(self, id: int, rectangle: Rectangle):
        self.id = id
        self.rectangle = rectangle

    def __repr__(self):
        return f"Allocation(#{self.id} {self.rectangle!r})"

    def __eq__(self, other):
        if not isinstance(other, Allocation):
            return NotImplemented
        return self.id == other.id and self.rectangle == other.rectangle

    def __hash__(self):
        return hash((self.id, self.rectangle))


class Change:
    """One allocation moved by a resize or rearrange."""
    __slots__ = ("old", "new")

    def __init__(self, old: Allocation, new: Allocation):
        self.old = old
        self.new = new

    def __repr__(self):
        return f"Change({self.old!r} -> {self.new!r})"


class ChangeList:
    """Relocations and failures produced by resize_and_rearrange/rearrange."""
    def __init__(self, changes: Optional[List[Change]] = None, failures: Optional[List[Allocation]] = None):
        self.changes = changes if changes is not None else []
        self.failures = failures if failures is not None else []

    def __repr__(self):
        return f"ChangeList({len(self.changes)} changes, {len(self.failures)} failures)"


class AtlasAllocator:
    """Growable Maximal Rectangles allocator for a single atlas canvas.

    Every placement gets a fresh integer handle. Handles do not survive
    resize_and_rearrange() or rearrange(); callers must translate them through
    the returned ChangeList.
    """

    def __init__(self, width: int, height: int,
                 heuristic: HeuristicType = HeuristicType.BEST_SHORT_SIDE_FIT):
        if width <= 0 or height <= 0:
            raise ValueError(f"Canvas size must be positive, got {width}×{height}")
        self.width = width
        self.height = height
        self.heuristic = heuristic
        # Start with the entire canvas as a free rectangle
        self.free_rects = [Rectangle(width, height)]
        self._allocations: Dict[int, Rectangle] = {}
        self._next_id = 0

    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    def allocations(self) -> List[Allocation]:
        """Live allocations in handle order."""
        return [Allocation(alloc_id, rect) for alloc_id, rect in sorted(self._allocations.items())]

    def free_area(self) -> int:
        return self.width * self.height - sum(r.area() for r in self._allocations.values())

    def find_position(self, width: int, height: int) -> Optional[Tuple[int, int]]:
        """Return the best (x, y) for a rectangle of the given size, or None if it doesn't fit."""
        best_score1 = float('inf')
        best_score2 = float('inf')
        best_pos = None

        for rect in self.free_rects:
            if rect.width >= width and rect.height >= height:
                score1, score2 = self._calculate_score(rect, width, height)

                if ((score1 < best_score1) or
                    (score1 == best_score1 and score2 < best_score2)):
                    best_score1 = score1
                    best_score2 = score2
                    best_pos = (rect.x, rect.y)

        return best_pos

    def _calculate_score(self, free_rect: Rectangle, width: int, height: int) -> Tuple[float, float]:
        """Calculate the score based on the selected heuristic."""
        leftover_width = free_rect.width - width
        leftover_height = free_rect.height - height

        if self.heuristic == HeuristicType.BEST_LONG_SIDE_FIT:
            return max(leftover_width, leftover_height), min(leftover_width, leftover_height)

        elif self.heuristic == HeuristicType.BEST_AREA_FIT:
            return leftover_width * leftover_height, min(leftover_width, leftover_height)

        elif self.heuristic == HeuristicType.BOTTOM_LEFT:
            # Lowest edge first, then leftmost
            return free_rect.y + height, free_rect.x

        # Short side fit (primary) and long side fit (secondary)
        return min(leftover_width, leftover_height), max(leftover_width, leftover_height)

    def allocate(self, width: int, height: int) -> Optional[Allocation]:
        """Try to place a rectangle. Returns the allocation or None if it couldn't fit."""
        if width <= 0 or height <= 0:
            raise ValueError(f"Allocation size must be positive, got {width}×{height}")

        position = self.find_position(width, height)
        if position is None:
            return None

        placed = Rectangle(width, height, *position)
        alloc_id = self._next_id
        self._next_id += 1
        self._allocations[alloc_id] = placed

        self._split_free_rectangles(placed)
        self._prune_free_rectangles()

        return Allocation(alloc_id, placed)

    def rearrange(self) -> ChangeList:
        """Repack all live allocations into the current canvas.

        If the repack can't place everything, the current layout is kept and
        the returned ChangeList is empty.
        """
        snapshot = self._snapshot()
        change_list = self._repack(self.width, self.height)
        if change_list.failures:
            log.debug("Rearrange left %d allocations unplaced, keeping the current layout",
                      len(change_list.failures))
            self._restore(snapshot)
            return ChangeList()
        return change_list

    def resize_and_rearrange(self, width: int, height: int) -> ChangeList:
        """Resize the canvas and repack all live allocations into it, largest first.

        On failure the previous layout is restored. When the canvas only grows,
        the previous layout is extended to the new size instead, with every
        handle unchanged; otherwise the failures are returned.
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Canvas size must be positive, got {width}×{height}")

        snapshot = self._snapshot()
        change_list = self._repack(width, height)
        if not change_list.failures:
            return change_list

        self._restore(snapshot)
        if width >= self.width and height >= self.height:
            log.debug("Repack into %d×%d failed, growing in place", width, height)
            self._extend(width, height)
            return ChangeList()
        return change_list

    def _snapshot(self):
        free_rects = [Rectangle(r.width, r.height, r.x, r.y) for r in self.free_rects]
        return self.width, self.height, free_rects, dict(self._allocations), self._next_id

    def _restore(self, snapshot):
        self.width, self.height, self.free_rects, self._allocations, self._next_id = snapshot

    def _repack(self, width: int, height: int) -> ChangeList:
        previous = self.allocations()
        # Stable sort keeps handle order among equal areas
        previous.sort(key=lambda a: a.rectangle.area(), reverse=True)

        self.width = width
        self.height = height
        self.free_rects = [Rectangle(width, height)]
        self._allocations = {}

        change_list = ChangeList()
        for old in previous:
            new = self.allocate(old.rectangle.width, old.rectangle.height)
            if new is None:
                change_list.failures.append(old)
            else:
                change_list.changes.append(Change(old, new))

        log.debug("Rearranged %d allocations in %d×%d (%d failed)",
                  len(change_list.changes), width, height, len(change_list.failures))
        return change_list

    def _extend(self, width: int, height: int):
        """Enlarge the canvas without moving any allocation."""
        old_width, old_height = self.width, self.height
        self.width = width
        self.height = height

        # Free space touching the old right/bottom edge continues into the new area
        for rect in self.free_rects:
            if rect.x + rect.width == old_width:
                rect.width = width - rect.x
            if rect.y + rect.height == old_height:
                rect.height = height - rect.y
        if width > old_width:
            self.free_rects.append(Rectangle(width - old_width, height, old_width, 0))
        if height > old_height:
            self.free_rects.append(Rectangle(width, height - old_height, 0, old_height))
        self._prune_free_rectangles()

    def _split_free_rectangles(self, inserted_rect: Rectangle):
        """Replace every free rectangle the inserted one overlaps by the parts left around it."""
        left, top = inserted_rect.x, inserted_rect.y
        right, bottom = left + inserted_rect.width, top + inserted_rect.height
        new_free_rects = []

        for free_rect in self.free_rects:
            if not inserted_rect.intersects(free_rect):
                new_free_rects.append(free_rect)
                continue

            free_right = free_rect.x + free_rect.width
            free_bottom = free_rect.y + free_rect.height
            if top > free_rect.y:
                new_free_rects.append(Rectangle(free_rect.width, top - free_rect.y, free_rect.x, free_rect.y))
            if bottom < free_bottom:
                new_free_rects.append(Rectangle(free_rect.width, free_bottom - bottom, free_rect.x, bottom))
            if left > free_rect.x:
                new_free_rects.append(Rectangle(left - free_rect.x, free_rect.height, free_rect.x, free_rect.y))
            if right < free_right:
                new_free_rects.append(Rectangle(free_right - right, free_rect.height, right, free_rect.y))

        self.free_rects = new_free_rects

    def _prune_free_rectangles(self):
        """Remove redundant free rectangles (those completely contained within others)."""
        i = 0
        while i < len(self.free_rects):
            j = i + 1
            while j < len(self.free_rects):
                if self.free_rects[j].contains(self.free_rects[i]):
                    self.free_rects.pop(i)
                    i -= 1
                    break
                elif self.free_rects[i].contains(self.free_rects[j]):
                    self.free_rects.pop(j)
                else:
                    j += 1
            i += 1
