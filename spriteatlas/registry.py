from typing import Dict, Iterator, Tuple

from .allocator import Allocation, ChangeList
from .dedup import ContentId
from .errors import AllocationsFailed


class AllocationRegistry:
    """Maps each ContentId to its current allocation.

    Allocator handles change on every resize/rearrange, so the registry is the
    only place an allocation should be looked up from.
    """

    def __init__(self):
        self._allocations: Dict[ContentId, Allocation] = {}

    def __contains__(self, cid: ContentId) -> bool:
        return cid in self._allocations

    def __len__(self) -> int:
        return len(self._allocations)

    def get(self, cid: ContentId) -> Allocation:
        return self._allocations[cid]

    def items(self) -> Iterator[Tuple[ContentId, Allocation]]:
        return iter(self._allocations.items())

    def insert(self, cid: ContentId, allocation: Allocation):
        self._allocations[cid] = allocation

    def apply_change_list(self, change_list: ChangeList):
        """Rewrite allocations moved by a resize or rearrange.

        Raises AllocationsFailed without touching the registry if anything
        could not be placed.
        """
        if change_list.failures:
            raise AllocationsFailed(change_list.failures)

        moved = {change.old.id: change.new for change in change_list.changes}
        updates = {
            cid: moved[allocation.id]
            for cid, allocation in self._allocations.items()
            if allocation.id in moved
        }
        self._allocations.update(updates)
