"""
Estimate state and its mutations.

The Estimator owns the shot list and the active pricing tiers. All
changes go through its methods, which delegate pricing, naming and
duplicate checks to the pure functions of the core package.
"""

import logging
from dataclasses import dataclass, field, replace
from decimal import Decimal
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from .exceptions import (
    DuplicateShotError,
    ImageAnalysisError,
    ShotNotFoundError,
    TierInUseError,
)
from .naming import normalize_shot_name, parse_shot_code
from .pricing import DEFAULT_TIERS, PricingTier, classify, find_tier
from .shots import BatchResult, Shot, ShotCandidate, build_shot, merge_candidates

logger = logging.getLogger(__name__)

UNPRICED_LABEL = "Unpriced"
SORT_KEYS = ("added", "name", "frames", "price")


@dataclass
class EstimateState:
    """Shots and tiers of a single estimate."""
    shots: List[Shot] = field(default_factory=list)
    tiers: List[PricingTier] = field(default_factory=lambda: list(DEFAULT_TIERS))


@dataclass(frozen=True)
class TierSummary:
    """Aggregated shots priced by one tier."""
    label: str
    shot_count: int
    frames: int
    subtotal: Decimal


class Estimator:
    """Single owner of the estimate state."""

    def __init__(self, tiers: Optional[Iterable[PricingTier]] = None):
        self.state = EstimateState()
        if tiers is not None:
            self.state.tiers = list(tiers)

    @property
    def shots(self) -> List[Shot]:
        return list(self.state.shots)

    @property
    def tiers(self) -> List[PricingTier]:
        return list(self.state.tiers)

    @property
    def total_frames(self) -> int:
        return sum(shot.frames for shot in self.state.shots)

    @property
    def total_price(self) -> Decimal:
        return sum((shot.price for shot in self.state.shots), Decimal("0"))

    def get_shot(self, shot_id: str) -> Shot:
        for shot in self.state.shots:
            if shot.id == shot_id:
                return shot
        raise ShotNotFoundError(shot_id)

    def add_shot(self, name: str, frames: int, preview: Optional[str] = None) -> Shot:
        """Add a single shot.

        Raises:
            ValueError: If the name is blank
            DuplicateShotError: If the normalized name is already present
        """
        if not normalize_shot_name(name):
            raise ValueError("shot name cannot be empty")
        shot = build_shot(name, frames, self.state.tiers, preview=preview)
        if any(existing.name == shot.name for existing in self.state.shots):
            raise DuplicateShotError(shot.name)
        self.state.shots.append(shot)
        logger.info("Added shot %s (%d frames)", shot.name, shot.frames)
        return shot

    def add_candidates(self, candidates: Iterable[ShotCandidate]) -> BatchResult:
        """Add a batch of candidates, skipping duplicates."""
        result = merge_candidates(self.state.shots, candidates, self.state.tiers)
        self.state.shots.extend(result.added)
        return result

    def import_image(self, image: Union[str, Path], analyzer) -> BatchResult:
        """Add the shots an image analyzer detects in an image.

        Analyzer failures are reported on the returned result and leave
        the estimate unchanged.

        Args:
            image: Path to the image to analyze
            analyzer: Object with an ``analyze(image)`` method returning
                a list of ShotCandidate

        Returns:
            BatchResult of the merge, or one carrying the failure message
        """
        try:
            candidates = analyzer.analyze(image)
        except ImageAnalysisError as e:
            logger.exception("Image analysis failed for %s", image)
            return BatchResult(error=str(e))

        if not candidates:
            logger.info("No shots detected in %s", image)
            return BatchResult()
        return self.add_candidates(candidates)

    def update_shot(
        self,
        shot_id: str,
        frames: Optional[int] = None,
        name: Optional[str] = None,
    ) -> Shot:
        """Edit a shot's frames and/or name and re-price it.

        Raises:
            ShotNotFoundError: If the shot id is unknown
            ValueError: If the new name is blank
            DuplicateShotError: If the new name belongs to another shot
        """
        current = self.get_shot(shot_id)
        new_name = current.name
        if name is not None:
            new_name = normalize_shot_name(name)
            if not new_name:
                raise ValueError("shot name cannot be empty")
            if any(s.name == new_name and s.id != shot_id for s in self.state.shots):
                raise DuplicateShotError(new_name)
        new_frames = current.frames if frames is None else frames

        updated = replace(
            current,
            name=new_name,
            frames=new_frames,
            price=classify(new_frames, self.state.tiers),
        )
        self.state.shots = [updated if s.id == shot_id else s for s in self.state.shots]
        return updated

    def remove_shot(self, shot_id: str) -> None:
        """Remove a shot by id.

        Raises:
            ShotNotFoundError: If the shot id is unknown
        """
        self.get_shot(shot_id)
        self.state.shots = [s for s in self.state.shots if s.id != shot_id]

    def replace_tiers(self, tiers: Iterable[PricingTier]) -> None:
        """Replace the tier list and re-price every shot."""
        new_tiers = list(tiers)
        self.state.tiers = new_tiers
        self.state.shots = [
            replace(shot, price=classify(shot.frames, new_tiers))
            for shot in self.state.shots
        ]
        logger.info("Replaced pricing tiers (%d tiers, %d shots re-priced)",
                    len(new_tiers), len(self.state.shots))

    def shots_in_tier(self, index: int) -> List[Shot]:
        """Shots that the tier at ``index`` currently prices."""
        tier = self.state.tiers[index]
        return [
            shot for shot in self.state.shots
            if find_tier(shot.frames, self.state.tiers) is tier
        ]

    def can_delete_tier(self, index: int) -> bool:
        return not self.shots_in_tier(index)

    def delete_tier(self, index: int) -> None:
        """Delete a tier that prices no shot.

        Raises:
            IndexError: If the index is out of range
            TierInUseError: If the tier still prices existing shots
        """
        index = range(len(self.state.tiers))[index]
        in_use = self.shots_in_tier(index)
        if in_use:
            raise TierInUseError(self.state.tiers[index].label, len(in_use))
        remaining = [t for i, t in enumerate(self.state.tiers) if i != index]
        self.replace_tiers(remaining)

    def tier_breakdown(self) -> List[TierSummary]:
        """Aggregate shots per tier in tier order.

        Shots in a coverage gap are collected under an extra unpriced
        entry, which is omitted when empty.
        """
        buckets: Dict[int, List[Shot]] = {i: [] for i in range(len(self.state.tiers))}
        unpriced: List[Shot] = []
        for shot in self.state.shots:
            tier = find_tier(shot.frames, self.state.tiers)
            if tier is None:
                unpriced.append(shot)
                continue
            # Identity lookup keeps equal tiers in separate buckets
            index = next(i for i, t in enumerate(self.state.tiers) if t is tier)
            buckets[index].append(shot)

        summaries = [
            _summarize(self.state.tiers[i].label, shots)
            for i, shots in buckets.items()
        ]
        if unpriced:
            summaries.append(_summarize(UNPRICED_LABEL, unpriced))
        return summaries

    def sorted_shots(self, key: str = "added", descending: bool = False) -> List[Shot]:
        """Shots ordered by insertion, name, frames or price.

        Name ordering follows the shot code numerically where one is
        present, with free-text names after coded ones.
        """
        if key not in SORT_KEYS:
            raise ValueError(f"sort key must be one of: {list(SORT_KEYS)}")
        shots = list(self.state.shots)
        if key == "added":
            return list(reversed(shots)) if descending else shots
        if key == "name":
            return sorted(shots, key=_name_sort_key, reverse=descending)
        return sorted(shots, key=lambda s: getattr(s, key), reverse=descending)


def _summarize(label: str, shots: List[Shot]) -> TierSummary:
    return TierSummary(
        label=label,
        shot_count=len(shots),
        frames=sum(s.frames for s in shots),
        subtotal=sum((s.price for s in shots), Decimal("0")),
    )


def _name_sort_key(shot: Shot):
    code = parse_shot_code(shot.name)
    if code is None:
        return (1, (0, 0, 0), shot.name)
    return (0, code.sort_key, shot.name)
