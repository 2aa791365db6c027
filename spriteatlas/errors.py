from typing import List


class AtlasError(Exception):
    """Base class for atlas build errors."""


class DecodeError(AtlasError):
    """Raw bytes could not be decoded as an image."""


class AllocationsFailed(AtlasError):
    """Existing allocations could not be placed after a resize or rearrange."""
    def __init__(self, failures: List):
        self.failures = list(failures)
        super().__init__(f"Allocations failed: {len(self.failures)} could not be placed")


class BuilderConsumed(AtlasError):
    """The builder was already used to build an atlas."""
