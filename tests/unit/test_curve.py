"""
Unit tests for the reference discount curve
"""

import pytest

from fy_arbitrage.curve import CurveKnot, DayCount, DiscountCurve
from fy_arbitrage.exceptions import ValidationError


@pytest.fixture
def two_knot_curve():
    return DiscountCurve(knots=[CurveKnot(0.0, 0.05), CurveKnot(1.0, 0.04)])


class TestInterpolation:
    """Rate interpolation and extrapolation"""

    def test_midpoint_linear(self, two_knot_curve):
        assert two_knot_curve.rate(0.5) == pytest.approx(0.045, abs=1e-15)

    def test_flat_before_first_knot(self):
        curve = DiscountCurve(knots=[CurveKnot(0.25, 0.05), CurveKnot(1.0, 0.04)])
        assert curve.rate(0.0) == 0.05
        assert curve.rate(0.1) == 0.05

    def test_flat_after_last_knot(self, two_knot_curve):
        assert two_knot_curve.rate(1.0) == 0.04
        assert two_knot_curve.rate(30.0) == 0.04

    def test_exact_at_interior_knot(self):
        curve = DiscountCurve(
            knots=[
                CurveKnot(0.0028, 0.0520),
                CurveKnot(0.0833, 0.0515),
                CurveKnot(0.25, 0.0500),
                CurveKnot(1.0, 0.0450),
            ]
        )
        for knot in curve.knots:
            assert curve.rate(knot.t) == knot.rate

    def test_empty_curve_has_zero_rate(self):
        curve = DiscountCurve()
        assert curve.rate(0.5) == 0.0
        assert curve.discount_factor(0.5) == 1.0

    def test_single_knot_is_flat(self):
        curve = DiscountCurve(knots=[CurveKnot(0.5, 0.03)])
        assert curve.rate(0.1) == 0.03
        assert curve.rate(5.0) == 0.03


class TestDiscountFactor:
    """Discount factors and forward rates"""

    def test_df_at_zero_is_one(self, two_knot_curve):
        assert two_knot_curve.discount_factor(0.0) == 1.0
        assert DiscountCurve.default_usd().discount_factor(0.0) == 1.0

    def test_df_negative_time_is_one(self, two_knot_curve):
        assert two_knot_curve.discount_factor(-1.0) == 1.0

    def test_df_simple_compounding(self, two_knot_curve):
        assert two_knot_curve.discount_factor(1.0) == pytest.approx(1 / 1.04)

    def test_df_non_increasing(self):
        curve = DiscountCurve.default_usd()
        grid = [i / 20 for i in range(0, 60)]
        factors = [curve.discount_factor(t) for t in grid]
        for earlier, later in zip(factors, factors[1:]):
            assert later <= earlier

    def test_forward_rate_zero_when_not_increasing(self, two_knot_curve):
        assert two_knot_curve.forward_rate(1.0, 1.0) == 0.0
        assert two_knot_curve.forward_rate(1.0, 0.5) == 0.0

    def test_forward_rate_flat_curve(self):
        curve = DiscountCurve(knots=[CurveKnot(0.0, 0.05)])
        # From today the forward equals the spot simple rate
        assert curve.forward_rate(0.0, 1.0) == pytest.approx(0.05)


class TestTimeToMaturity:
    """Day count conversion"""

    def test_act_360_one_year(self):
        curve = DiscountCurve(day_count=DayCount.ACT_360)
        assert curve.time_to_maturity(0, 360 * 86400) == 1.0

    def test_act_365_one_year(self):
        curve = DiscountCurve(day_count=DayCount.ACT_365)
        assert curve.time_to_maturity(1000, 1000 + 365 * 86400) == 1.0

    def test_matured_is_zero(self):
        curve = DiscountCurve()
        assert curve.time_to_maturity(2_000, 1_000) == 0.0

    def test_target_price_at_maturity_is_par(self, two_knot_curve):
        assert two_knot_curve.target_price(0.0) == 10**18

    def test_target_price_one_year(self):
        curve = DiscountCurve(knots=[CurveKnot(0.0028, 0.052), CurveKnot(1.0, 0.045)])
        assert curve.target_price(1.0) == pytest.approx(0.956937799e18, rel=1e-9)


class TestConstruction:
    """Validation and config parsing"""

    def test_unsorted_knots_rejected(self):
        with pytest.raises(ValidationError, match="sorted"):
            DiscountCurve(knots=[CurveKnot(1.0, 0.04), CurveKnot(0.5, 0.05)])

    def test_negative_time_rejected(self):
        with pytest.raises(ValidationError):
            DiscountCurve(knots=[CurveKnot(-0.1, 0.04)])

    def test_knots_are_immutable(self):
        knots = [CurveKnot(0.0, 0.05)]
        curve = DiscountCurve(knots=knots)
        knots.append(CurveKnot(1.0, 0.01))
        assert len(curve.knots) == 1

    def test_from_dict(self):
        curve = DiscountCurve.from_dict(
            {
                "day_count": "ACT/365",
                "knots": [{"t": 0.25, "rate": 0.05}, {"t": 1.0, "rate": 0.045}],
            }
        )
        assert curve.day_count is DayCount.ACT_365
        assert curve.rate(1.0) == 0.045

    @pytest.mark.parametrize("tag", ["ACT/360", "act360", "ACT_360"])
    def test_day_count_parse(self, tag):
        assert DayCount.parse(tag) is DayCount.ACT_360

    def test_day_count_parse_unknown(self):
        with pytest.raises(ValidationError, match="Unknown day count"):
            DayCount.parse("30/360")
