"""
Shot records and batch insertion.

Builds priced shots from raw names and frame counts and merges batches
of candidates into an existing shot collection without duplicates.
"""

import logging
import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence, Set

from .naming import normalize_shot_name
from .pricing import PricingTier, classify

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Shot:
    """A priced shot in the estimate.

    Only the frame count is authoritative; the price is derived from
    the tier list and recomputed whenever tiers or frames change.
    """
    id: str
    name: str
    frames: int
    price: Decimal
    preview: Optional[str] = None


@dataclass(frozen=True)
class ShotCandidate:
    """Unvalidated shot entry coming from a file import or image analysis."""
    name: str
    frames: Optional[int]


@dataclass
class BatchResult:
    """Outcome of merging a batch of candidates."""
    added: List[Shot] = field(default_factory=list)
    duplicates: List[str] = field(default_factory=list)
    skipped: int = 0
    error: Optional[str] = None

    @property
    def added_count(self) -> int:
        return len(self.added)

    @property
    def duplicate_count(self) -> int:
        return len(self.duplicates)

    def summary(self) -> str:
        """Human readable one-line summary of the batch."""
        if self.error:
            return f"Analysis failed: {self.error}"
        if not self.added and not self.duplicates and not self.skipped:
            return "No shots detected."
        text = f"+ {self.added_count} shot(s) added."
        if self.duplicates:
            text += f" ({self.duplicate_count} duplicate(s) skipped)"
        if self.skipped:
            text += f" ({self.skipped} invalid entr{'y' if self.skipped == 1 else 'ies'} ignored)"
        return text


def new_shot_id() -> str:
    return uuid.uuid4().hex


def build_shot(
    name: str,
    frames: int,
    tiers: Sequence[PricingTier],
    preview: Optional[str] = None,
) -> Shot:
    """Create a shot with a normalized name and a tier price.

    Args:
        name: Raw shot name
        frames: Frame count
        tiers: Ordered pricing tiers used to price the shot
        preview: Optional preview image reference

    Returns:
        New Shot with a fresh id
    """
    return Shot(
        id=new_shot_id(),
        name=normalize_shot_name(name),
        frames=frames,
        price=classify(frames, tiers),
        preview=preview,
    )


def _coerce_frames(value) -> Optional[int]:
    # bool is an int subclass but never a frame count
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def merge_candidates(
    existing: Iterable[Shot],
    candidates: Iterable[ShotCandidate],
    tiers: Sequence[PricingTier],
) -> BatchResult:
    """Merge a batch of candidates against an existing shot collection.

    Each candidate name is normalized and rejected if it matches a shot
    already in the collection or a name accepted earlier in the same
    batch. Candidates without a name or a non-zero frame count are
    ignored.

    Args:
        existing: Shots already in the estimate
        candidates: Batch entries in insertion order
        tiers: Ordered pricing tiers used to price accepted shots

    Returns:
        BatchResult with accepted shots and rejected duplicate names
    """
    existing_names: Set[str] = {shot.name for shot in existing}
    batch_names: Set[str] = set()
    result = BatchResult()

    for candidate in candidates:
        frames = _coerce_frames(candidate.frames)
        if not candidate.name or not candidate.name.strip() or not frames:
            result.skipped += 1
            continue

        name = normalize_shot_name(candidate.name)
        if name in existing_names or name in batch_names:
            result.duplicates.append(name)
            continue

        batch_names.add(name)
        result.added.append(Shot(
            id=new_shot_id(),
            name=name,
            frames=frames,
            price=classify(frames, tiers),
        ))

    logger.info(
        "Merged batch: %d added, %d duplicates, %d skipped",
        result.added_count, result.duplicate_count, result.skipped,
    )
    return result
