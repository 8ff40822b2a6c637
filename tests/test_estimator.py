"""
Unit tests for the estimate state owner.

Tests insertion, editing, the tier-edit cascade and the tier-delete guard.
"""

from decimal import Decimal
from unittest.mock import Mock

import pytest

from framecount.core.estimator import UNPRICED_LABEL, Estimator
from framecount.core.exceptions import (
    DuplicateShotError,
    ImageAnalysisError,
    ShotNotFoundError,
    TierInUseError,
)
from framecount.core.pricing import DEFAULT_TIERS, PricingTier, classify
from framecount.core.shots import ShotCandidate


def _tier(min_frames, max_frames, price, label="T"):
    return PricingTier(min=min_frames, max=max_frames, price=Decimal(price), label=label)


class TestAddShots:
    """Test manual and batch insertion."""

    def test_default_tiers(self):
        """Verify a new estimate starts with the default tiers."""
        assert Estimator().tiers == DEFAULT_TIERS

    def test_add_shot(self):
        """Verify a shot is normalized, priced and stored."""
        estimator = Estimator()
        shot = estimator.add_shot("sq1 sc2 sh3", 120)
        assert shot.name == "SQ01_SC02_SH03"
        assert shot.price == Decimal("150000")
        assert estimator.shots == [shot]

    def test_add_duplicate_raises_and_keeps_state(self):
        """Verify a duplicate manual insert is rejected."""
        estimator = Estimator()
        estimator.add_shot("SQ01_SC01_SH01", 10)
        with pytest.raises(DuplicateShotError) as exc_info:
            estimator.add_shot("sq01 sc01 sh01", 20)
        assert exc_info.value.name == "SQ01_SC01_SH01"
        assert len(estimator.shots) == 1
        assert estimator.shots[0].frames == 10

    @pytest.mark.parametrize("name", ["", "   ", "\t"])
    def test_add_blank_name_rejected(self, name):
        """Verify a shot needs a name."""
        estimator = Estimator()
        with pytest.raises(ValueError, match="shot name cannot be empty"):
            estimator.add_shot(name, 10)
        assert estimator.shots == []

    def test_add_candidates(self):
        """Verify batches dedupe against existing shots and themselves."""
        estimator = Estimator()
        estimator.add_shot("SQ01_SC01_SH01", 10)
        result = estimator.add_candidates([
            ShotCandidate("sq1 sc1 sh1", 5),
            ShotCandidate("sq1 sc1 sh2", 5),
            ShotCandidate("SQ01-SC01-SH02", 7),
        ])
        assert result.added_count == 1
        assert result.duplicate_count == 2
        assert [s.name for s in estimator.shots] == ["SQ01_SC01_SH01", "SQ01_SC01_SH02"]

    def test_totals(self):
        """Verify totals sum frames and prices."""
        estimator = Estimator()
        estimator.add_shot("a", 50)
        estimator.add_shot("b", 150)
        assert estimator.total_frames == 200
        assert estimator.total_price == Decimal("275000")

    def test_empty_totals(self):
        """Verify an empty estimate totals zero."""
        estimator = Estimator()
        assert estimator.total_frames == 0
        assert estimator.total_price == 0


class TestImportImage:
    """Test the image analysis boundary."""

    def test_candidates_are_merged(self):
        """Verify analyzer output goes through the batch path."""
        analyzer = Mock()
        analyzer.analyze.return_value = [
            ShotCandidate("SQ21_SC01_SH02", 49),
            ShotCandidate("sq21 sc1 sh2", 49),
        ]
        estimator = Estimator()
        result = estimator.import_image("shots.png", analyzer)

        analyzer.analyze.assert_called_once_with("shots.png")
        assert result.added_count == 1
        assert result.duplicate_count == 1
        assert len(estimator.shots) == 1

    def test_empty_result_adds_nothing(self):
        """Verify an empty analysis adds nothing."""
        analyzer = Mock()
        analyzer.analyze.return_value = []
        estimator = Estimator()
        result = estimator.import_image("shots.png", analyzer)
        assert result.added_count == 0
        assert result.error is None
        assert estimator.shots == []

    def test_failure_is_reported_not_raised(self):
        """Verify analysis failures leave the estimate unchanged."""
        analyzer = Mock()
        analyzer.analyze.side_effect = ImageAnalysisError("Failed to extract data from image.")
        estimator = Estimator()
        estimator.add_shot("a", 1)

        result = estimator.import_image("shots.png", analyzer)

        assert result.error == "Failed to extract data from image."
        assert result.added == []
        assert len(estimator.shots) == 1


class TestUpdateAndRemove:
    """Test editing and removing shots."""

    def test_update_frames_reprices(self):
        """Verify editing frames recomputes the price."""
        estimator = Estimator()
        shot = estimator.add_shot("a", 50)
        updated = estimator.update_shot(shot.id, frames=250)
        assert updated.id == shot.id
        assert updated.price == Decimal("225000")
        assert estimator.get_shot(shot.id) == updated

    def test_update_name_normalizes(self):
        """Verify a renamed shot is normalized."""
        estimator = Estimator()
        shot = estimator.add_shot("a", 50)
        assert estimator.update_shot(shot.id, name="sq1 sc1 sh1").name == "SQ01_SC01_SH01"

    def test_update_name_to_own_name_allowed(self):
        """Verify a shot may keep its own name."""
        estimator = Estimator()
        shot = estimator.add_shot("SQ01_SC01_SH01", 50)
        assert estimator.update_shot(shot.id, name="sq01 sc01 sh01").name == shot.name

    def test_update_to_blank_name_rejected(self):
        """Verify a shot cannot be renamed to a blank name."""
        estimator = Estimator()
        shot = estimator.add_shot("a", 1)
        with pytest.raises(ValueError, match="shot name cannot be empty"):
            estimator.update_shot(shot.id, name="  ")
        assert estimator.get_shot(shot.id).name == "A"

    def test_update_name_to_other_shot_rejected(self):
        """Verify renaming onto another shot is rejected."""
        estimator = Estimator()
        estimator.add_shot("a", 1)
        shot = estimator.add_shot("b", 1)
        with pytest.raises(DuplicateShotError):
            estimator.update_shot(shot.id, name="A")
        assert estimator.get_shot(shot.id).name == "B"

    def test_remove_shot(self):
        """Verify removal by id."""
        estimator = Estimator()
        keep = estimator.add_shot("a", 1)
        drop = estimator.add_shot("b", 1)
        estimator.remove_shot(drop.id)
        assert estimator.shots == [keep]

    def test_unknown_id(self):
        """Verify unknown ids raise ShotNotFoundError."""
        estimator = Estimator()
        with pytest.raises(ShotNotFoundError):
            estimator.remove_shot("missing")
        with pytest.raises(ShotNotFoundError):
            estimator.update_shot("missing", frames=1)


class TestTierCascade:
    """Test tier replacement and deletion."""

    def test_replace_tiers_reprices_all_shots(self):
        """Verify every shot matches a direct classify with the new tiers."""
        estimator = Estimator()
        for name, frames in [("a", 0), ("b", 75), ("c", 150), ("d", 500), ("e", 5000)]:
            estimator.add_shot(name, frames)

        new_tiers = [_tier(0, 80, "1000", "Short"), _tier(50, 600, "2000", "Long")]
        estimator.replace_tiers(new_tiers)

        assert estimator.tiers == new_tiers
        for shot in estimator.shots:
            assert shot.price == classify(shot.frames, new_tiers)
        assert [s.price for s in estimator.shots] == [
            Decimal("1000"), Decimal("1000"), Decimal("2000"), Decimal("2000"), Decimal("0"),
        ]

    def test_replace_tiers_keeps_frames_and_ids(self):
        """Verify re-pricing does not touch stored frames or ids."""
        estimator = Estimator()
        shot = estimator.add_shot("a", 75)
        estimator.replace_tiers([_tier(0, 10, "1")])
        repriced = estimator.shots[0]
        assert (repriced.id, repriced.frames) == (shot.id, shot.frames)
        assert repriced.price == 0

    def test_delete_unused_tier(self):
        """Verify a tier without shots can be deleted."""
        estimator = Estimator()
        estimator.add_shot("a", 50)
        assert estimator.can_delete_tier(2)
        estimator.delete_tier(2)
        assert [t.label for t in estimator.tiers] == ["Kategori 1", "Kategori 2"]

    def test_delete_tier_negative_index(self):
        """Verify a negative index deletes the tier counted from the end."""
        estimator = Estimator()
        estimator.delete_tier(-1)
        assert [t.label for t in estimator.tiers] == ["Kategori 1", "Kategori 2"]

    def test_delete_tier_out_of_range(self):
        """Verify an out-of-range index raises and keeps the tiers."""
        estimator = Estimator()
        with pytest.raises(IndexError):
            estimator.delete_tier(3)
        with pytest.raises(IndexError):
            estimator.delete_tier(-4)
        assert len(estimator.tiers) == 3

    def test_delete_tier_in_use_rejected(self):
        """Verify a tier that prices a shot cannot be deleted."""
        estimator = Estimator()
        estimator.add_shot("a", 50)
        assert not estimator.can_delete_tier(0)
        with pytest.raises(TierInUseError) as exc_info:
            estimator.delete_tier(0)
        assert exc_info.value.shot_count == 1
        assert len(estimator.tiers) == 3

    def test_shadowed_tier_is_not_in_use(self):
        """Verify a tier shadowed by an earlier overlapping tier prices nothing."""
        estimator = Estimator([_tier(0, 100, "1", "A"), _tier(50, 150, "2", "B")])
        estimator.add_shot("a", 75)
        assert estimator.shots_in_tier(1) == []
        assert len(estimator.shots_in_tier(0)) == 1


class TestBreakdownAndSorting:
    """Test per-tier aggregation and shot ordering."""

    def test_tier_breakdown(self):
        """Verify per-tier counts, frames and subtotals."""
        estimator = Estimator()
        estimator.add_shot("a", 10)
        estimator.add_shot("b", 20)
        estimator.add_shot("c", 300)
        estimator.add_shot("d", 5000)

        breakdown = estimator.tier_breakdown()
        assert [s.label for s in breakdown] == ["Kategori 1", "Kategori 2", "Kategori 3", UNPRICED_LABEL]
        assert breakdown[0].shot_count == 2
        assert breakdown[0].frames == 30
        assert breakdown[0].subtotal == Decimal("250000")
        assert breakdown[1].shot_count == 0
        assert breakdown[3].subtotal == 0

    def test_sort_by_name_uses_shot_code(self):
        """Verify coded names sort numerically before free text."""
        estimator = Estimator()
        for name in ["zeta", "SQ10_SC01_SH01", "SQ2_SC01_SH05", "SQ2_SC01_SH01"]:
            estimator.add_shot(name, 1)
        names = [s.name for s in estimator.sorted_shots("name")]
        assert names == ["SQ02_SC01_SH01", "SQ02_SC01_SH05", "SQ10_SC01_SH01", "ZETA"]

    def test_sort_by_frames_descending(self):
        """Verify numeric sorting with direction."""
        estimator = Estimator()
        for name, frames in [("a", 5), ("b", 50), ("c", 25)]:
            estimator.add_shot(name, frames)
        assert [s.frames for s in estimator.sorted_shots("frames", descending=True)] == [50, 25, 5]

    def test_sort_by_added_default(self):
        """Verify insertion order is the default."""
        estimator = Estimator()
        for name in ["b", "a"]:
            estimator.add_shot(name, 1)
        assert [s.name for s in estimator.sorted_shots()] == ["B", "A"]

    def test_invalid_sort_key(self):
        """Verify unknown sort keys raise."""
        with pytest.raises(ValueError, match="sort key must be one of"):
            Estimator().sorted_shots("color")
