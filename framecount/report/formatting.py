"""
Display formatting for prices and tier ranges.
"""

import re
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

from framecount.core.pricing import PricingTier

CURRENCY_PREFIX = "Rp"
INFINITY_SYMBOL = "∞"


def format_currency(amount: Union[Decimal, int, float]) -> str:
    """Format an amount as whole Rupiah with dot thousands separators."""
    rounded = Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    sign = "-" if rounded < 0 else ""
    grouped = f"{abs(int(rounded)):,}".replace(",", ".")
    return f"{sign}{CURRENCY_PREFIX} {grouped}"


def format_frame_range(tier: PricingTier) -> str:
    """Format a tier's frame range, open-ended tiers ending in ∞."""
    upper = INFINITY_SYMBOL if tier.is_unbounded else str(tier.max)
    return f"{tier.min} - {upper} frames"


def report_filename(title: str) -> str:
    """Derive a PDF file name from a report title."""
    slug = re.sub(r"\s+", "-", title.strip()).lower()
    return f"{slug or 'report'}.pdf"
