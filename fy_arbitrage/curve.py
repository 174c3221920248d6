"""
Reference discount curve.

Piecewise-linear simple-rate curve used to derive the fair value of one unit
of base token receivable at an FY token's maturity. Pure functions of time:
no I/O, no state after construction.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Sequence

from .exceptions import ValidationError
from .utils import WAD

SECONDS_PER_DAY = 86400


class DayCount(Enum):
    """Day count convention for converting elapsed time to year fractions."""

    ACT_360 = "ACT/360"
    ACT_365 = "ACT/365"

    @property
    def days_per_year(self) -> int:
        return 360 if self is DayCount.ACT_360 else 365

    def year_fraction(self, days: float) -> float:
        """Convert days to year fraction."""
        return days / self.days_per_year

    def year_fraction_from_seconds(self, seconds: float) -> float:
        """Convert seconds to year fraction (for block timestamps)."""
        return seconds / (SECONDS_PER_DAY * self.days_per_year)

    @classmethod
    def parse(cls, value: str) -> "DayCount":
        """Parse 'ACT/360', 'act360', 'ACT_365' style tags."""
        normalized = value.strip().upper().replace("_", "/")
        if "/" not in normalized and normalized.startswith("ACT"):
            normalized = "ACT/" + normalized[3:]
        for member in cls:
            if member.value == normalized:
                return member
        raise ValidationError(
            f"Unknown day count convention: {value}",
            {"allowed": [m.value for m in cls]},
        )


@dataclass(frozen=True)
class CurveKnot:
    """A point on the curve: time to maturity in years and its simple rate."""

    t: float
    rate: float  # e.g. 0.0520 = 5.20%


@dataclass(frozen=True)
class DiscountCurve:
    """
    Discount factor curve with piecewise-linear interpolation in rate space.

    Attributes:
        knots: Curve knots, non-decreasing in ``t``
        day_count: Convention used by ``time_to_maturity``
    """

    knots: Sequence[CurveKnot] = field(default_factory=tuple)
    day_count: DayCount = DayCount.ACT_360

    def __post_init__(self):
        # Immutable copy of the knots
        object.__setattr__(self, "knots", tuple(self.knots))

        for knot in self.knots:
            if knot.t < 0:
                raise ValidationError(
                    f"Curve knot time must be non-negative: {knot.t}",
                    {"knot": knot},
                )
        for prev, curr in zip(self.knots, self.knots[1:]):
            if curr.t < prev.t:
                raise ValidationError(
                    f"Curve knots must be sorted by time: {prev.t} > {curr.t}",
                    {"previous": prev, "current": curr},
                )

    @classmethod
    def default_usd(cls) -> "DiscountCurve":
        """
        Sample SOFR-like USD curve.

        Placeholder values; production deployments load knots from config.
        """
        return cls(
            knots=[
                CurveKnot(t=0.0028, rate=0.0520),  # ~1 day
                CurveKnot(t=0.0833, rate=0.0515),  # 1 month
                CurveKnot(t=0.25, rate=0.0500),  # 3 months
                CurveKnot(t=0.50, rate=0.0475),  # 6 months
                CurveKnot(t=1.00, rate=0.0450),  # 1 year
                CurveKnot(t=2.00, rate=0.0425),  # 2 years
            ],
            day_count=DayCount.ACT_360,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DiscountCurve":
        """
        Build a curve from a config mapping.

        Expected shape::

            day_count: ACT/360
            knots:
              - {t: 0.25, rate: 0.05}
              - {t: 1.0, rate: 0.045}
        """
        knots = [
            CurveKnot(t=float(k["t"]), rate=float(k["rate"]))
            for k in data.get("knots", [])
        ]
        day_count = DayCount.parse(data.get("day_count", DayCount.ACT_360.value))
        return cls(knots=knots, day_count=day_count)

    def interpolate_rate(self, t: float) -> float:
        """
        Simple rate at time ``t``.

        Flat before the first knot and after the last one, linear in between.
        An empty curve has rate 0.
        """
        n = len(self.knots)
        if n == 0:
            return 0.0

        first, last = self.knots[0], self.knots[-1]
        if t <= first.t:
            return first.rate
        if t >= last.t:
            return last.rate

        for lower, upper in zip(self.knots, self.knots[1:]):
            if t == upper.t:
                return upper.rate
            if t < upper.t:
                # r = r0 + (r1 - r0) * (t - t0) / (t1 - t0)
                alpha = (t - lower.t) / (upper.t - lower.t)
                return lower.rate + alpha * (upper.rate - lower.rate)

        return last.rate

    def rate(self, t: float) -> float:
        """Alias for interpolate_rate."""
        return self.interpolate_rate(t)

    def discount_factor(self, t: float) -> float:
        """DF(t) = 1 / (1 + r(t) * t) using simple compounding."""
        if t <= 0.0:
            return 1.0
        return 1.0 / (1.0 + self.interpolate_rate(t) * t)

    def forward_rate(self, t1: float, t2: float) -> float:
        """Implied simple forward rate F(t1, t2) = [DF(t1) / DF(t2) - 1] / (t2 - t1)."""
        if t2 <= t1:
            return 0.0
        df1 = self.discount_factor(t1)
        df2 = self.discount_factor(t2)
        return (df1 / df2 - 1.0) / (t2 - t1)

    def time_to_maturity(self, now: int, maturity: int) -> float:
        """Years from ``now`` to ``maturity`` (both Unix seconds), floored at 0."""
        seconds = max(int(maturity) - int(now), 0)
        return self.day_count.year_fraction_from_seconds(seconds)

    def target_price(self, ttm: float) -> int:
        """Fair base-per-FY price at 10^18 scale for a given time to maturity."""
        return int(self.discount_factor(ttm) * WAD)
