"""
Tier pricing for animation shots.

Maps a shot's frame count to a price using an ordered list of tiers.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional, Sequence

logger = logging.getLogger(__name__)

# Tiers with a max above this are displayed as open-ended
UNBOUNDED_THRESHOLD = 90000

ZERO = Decimal("0")


@dataclass(frozen=True)
class PricingTier:
    """A frame range and the flat price charged for shots inside it."""
    min: int
    max: int
    price: Decimal
    label: str

    def __post_init__(self):
        """Validate the range and price."""
        if self.min < 0:
            raise ValueError("tier min cannot be negative")
        if self.max < self.min:
            raise ValueError("tier max must be >= min")
        if self.price < 0:
            raise ValueError("tier price cannot be negative")

    def contains(self, frames: int) -> bool:
        """Whether the frame count falls inside this tier (inclusive)."""
        return self.min <= frames <= self.max

    @property
    def is_unbounded(self) -> bool:
        return self.max > UNBOUNDED_THRESHOLD


DEFAULT_TIERS: List[PricingTier] = [
    PricingTier(min=0, max=100, price=Decimal("125000"), label="Kategori 1"),
    PricingTier(min=101, max=200, price=Decimal("150000"), label="Kategori 2"),
    PricingTier(min=201, max=999, price=Decimal("225000"), label="Kategori 3"),
]


def find_tier(frames: int, tiers: Sequence[PricingTier]) -> Optional[PricingTier]:
    """Find the tier that prices a frame count.

    Tiers are scanned in list order and the first containing tier wins,
    so overlapping tiers resolve to the earliest one.

    Args:
        frames: Frame count of the shot
        tiers: Ordered pricing tiers

    Returns:
        The matching tier, or None for negative counts and coverage gaps
    """
    if frames < 0:
        return None
    for tier in tiers:
        if tier.contains(frames):
            return tier
    logger.debug("No pricing tier covers %d frames", frames)
    return None


def classify(frames: int, tiers: Sequence[PricingTier]) -> Decimal:
    """Calculate the price of a shot from its frame count.

    Args:
        frames: Frame count of the shot
        tiers: Ordered pricing tiers

    Returns:
        Price of the first matching tier, or zero when nothing matches
    """
    tier = find_tier(frames, tiers)
    return tier.price if tier is not None else ZERO

