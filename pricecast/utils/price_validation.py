"""
Split Discontinuity Scan
========================

Flags day-over-day price jumps that look like an unadjusted stock split.

Why it matters here:
    Free price files are often not split-adjusted. A 4-for-1 split shows up
    as a single -75% day, which the return clamp caps at -50% but still
    feeds into volatility, drawdown and the training data.

Policy:
    This scan only REPORTS. Prices are never rewritten; the session records
    the findings and the caller decides whether to reject the file.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Sequence, Tuple

import numpy as np

from pricecast.data.record_parser import Observation

logger = logging.getLogger(__name__)


class SplitDiscontinuityError(ValueError):
    """Raised by strict validation when a split-like jump is found."""
    pass


# Split factors worth recognizing, forward or reverse
KNOWN_SPLIT_FACTORS = (2, 3, 4, 5, 10, 20)

# Relative distance to a known factor that still counts as a match
FACTOR_TOLERANCE = 0.05

# Jumps smaller than this are ordinary volatility
MIN_JUMP_RATIO = 1.5

MAX_REPORTED = 5


@dataclass(frozen=True)
class SplitDiscontinuity:
    """
    One suspected split.

    Attributes:
        date: First observation after the jump
        price_before: Last price before the jump
        price_after: First price after the jump
        ratio: Jump size as a factor >= 1
        factor: Matched split factor; positive for a price drop (forward
            split), negative for a price rise (reverse split or bad tick)
    """
    date: date
    price_before: float
    price_after: float
    ratio: float
    factor: int

    @property
    def is_reverse(self) -> bool:
        return self.factor < 0

    def describe(self) -> str:
        kind = "reverse split or bad tick" if self.is_reverse else "split"
        return (
            f"{self.date.isoformat()}: {self.price_before:.2f} -> {self.price_after:.2f} "
            f"(x{self.ratio:.2f}, looks like a {abs(self.factor)}:1 {kind})"
        )


def match_split_factor(ratio: float) -> Optional[int]:
    """Known split factor within FACTOR_TOLERANCE of ratio, if any."""
    for factor in KNOWN_SPLIT_FACTORS:
        if abs(ratio / factor - 1.0) < FACTOR_TOLERANCE:
            return factor
    return None


def detect_split_discontinuities(
    observations: Sequence[Observation],
    min_ratio: float = MIN_JUMP_RATIO,
) -> List[SplitDiscontinuity]:
    """
    Scan consecutive observations for split-sized jumps.

    Args:
        observations: Ascending observations
        min_ratio: Smallest jump factor (either direction) to consider

    Returns:
        Suspected splits in date order
    """
    if len(observations) < 2:
        return []

    prices = np.array([obs.price for obs in observations], dtype=float)
    before, after = prices[:-1], prices[1:]
    drops = before / after
    rises = after / before

    found = []
    for i in np.flatnonzero((drops > min_ratio) | (rises > min_ratio)):
        is_drop = drops[i] > min_ratio
        ratio = float(drops[i] if is_drop else rises[i])
        factor = match_split_factor(ratio)
        if factor is None:
            continue

        disc = SplitDiscontinuity(
            date=observations[i + 1].date,
            price_before=float(before[i]),
            price_after=float(after[i]),
            ratio=ratio,
            factor=factor if is_drop else -factor,
        )
        logger.warning(f"Suspected split discontinuity on {disc.describe()}")
        found.append(disc)

    return found


def validate_price_series_consistency(
    observations: Sequence[Observation],
    raise_on_error: bool = True,
) -> Tuple[bool, List[SplitDiscontinuity]]:
    """
    Check a series for split discontinuities.

    Args:
        observations: Ascending observations
        raise_on_error: Raise instead of returning when something is found

    Returns:
        (is_clean, discontinuities)

    Raises:
        SplitDiscontinuityError if raise_on_error and the scan finds anything
    """
    found = detect_split_discontinuities(observations)

    if found and raise_on_error:
        details = [f"  - {disc.describe()}" for disc in found[:MAX_REPORTED]]
        if len(found) > MAX_REPORTED:
            details.append(f"  ... and {len(found) - MAX_REPORTED} more")
        raise SplitDiscontinuityError(
            f"Price series is not consistently split-adjusted "
            f"({len(found)} suspected splits):\n" + "\n".join(details)
        )

    return not found, found
