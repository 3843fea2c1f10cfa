"""
Unit tests for yield conventions: price from yield, yield from price,
durations and convexity.

Reference prices use weekend-only calendars; the bonds below have no
holiday-sensitive dates.
"""

from datetime import date
import pytest

from bondlib.bonds import FixedCouponBond
from bondlib.config import PricerSettings
from bondlib.conventions import DayCount, YieldConvention, year_fraction
from bondlib.exceptions import SettlementDateError, UnsupportedConventionError
from bondlib.pricers import FixedCouponBondPricer
from bondlib.pricers.yield_conventions import YieldFormula, YieldGrid, yield_formula

TOL = 1e-10
EPS = 1e-7

YIELD_US = 0.04
SETTLEMENT_US = date(2011, 8, 23)
SETTLEMENT_LAST_US = date(2016, 6, 8)

YIELD_UK = 0.04
SETTLEMENT_UK = date(2011, 9, 5)
SETTLEMENT_LAST_UK = date(2014, 6, 4)
# Inside the final ex-dividend window (detachment 2014-09-01)
SETTLEMENT_FINAL_EX_UK = date(2014, 9, 3)

YIELD_GER = 0.04
SETTLEMENT_GER = date(2011, 9, 7)
SETTLEMENT_LAST_GER = date(2014, 6, 6)

RATE_JP = 0.004
YIELD_JP = 0.00321
END_JP = date(2025, 9, 20)
SETTLEMENT_JP = date(2015, 9, 29)
SETTLEMENT_LAST_JP = date(2025, 6, 6)
SETTLEMENT_ENDED_JP = date(2026, 8, 6)


def make_us_bond(fixed_rate=0.04625):
    return FixedCouponBond.from_schedule(
        date(2006, 11, 15), date(2016, 11, 15), 2, fixed_rate,
        DayCount.ACT_ACT_ICMA, YieldConvention.US_STREET,
        notional=100.0, settlement_days=3, currency="USD",
    )


@pytest.fixture
def pricer():
    return FixedCouponBondPricer()


@pytest.fixture
def newton_pricer():
    return FixedCouponBondPricer(PricerSettings.newton())


@pytest.fixture
def us_bond():
    return make_us_bond()


@pytest.fixture
def uk_bond():
    return FixedCouponBond.from_schedule(
        date(2002, 9, 7), date(2014, 9, 7), 2, 0.05,
        DayCount.ACT_ACT_ICMA, YieldConvention.GB_BUMP_DMO,
        notional=100.0, settlement_days=1, ex_coupon_days=-7, currency="GBP",
    )


@pytest.fixture
def ger_bond():
    return FixedCouponBond.from_schedule(
        date(2002, 9, 7), date(2014, 9, 7), 1, 0.05,
        DayCount.ACT_ACT_ICMA, YieldConvention.DE_BONDS,
        notional=100.0, settlement_days=3, currency="EUR",
    )


@pytest.fixture
def jp_bond():
    return FixedCouponBond.from_schedule(
        date(2015, 9, 20), END_JP, 2, RATE_JP,
        DayCount.NL_365, YieldConvention.JP_SIMPLE,
        notional=100.0, settlement_days=3, currency="JPY",
    )


def fd_modified_duration(pricer, bond, settlement, yield_):
    price = pricer.dirty_price_from_yield(bond, settlement, yield_)
    up = pricer.dirty_price_from_yield(bond, settlement, yield_ + EPS)
    down = pricer.dirty_price_from_yield(bond, settlement, yield_ - EPS)
    return 0.5 * (down - up) / price / EPS


def fd_convexity(pricer, bond, settlement, yield_):
    duration = pricer.modified_duration_from_yield(bond, settlement, yield_)
    up = pricer.modified_duration_from_yield(bond, settlement, yield_ + EPS)
    down = pricer.modified_duration_from_yield(bond, settlement, yield_ - EPS)
    return 0.5 * (down - up) / EPS + duration * duration


class TestSettlementDates:
    """The reference settlement dates follow each bond's settlement lag."""

    def test_settlement_dates(self, pricer, us_bond, uk_bond, ger_bond, jp_bond):
        assert pricer.settlement_date(us_bond, date(2011, 8, 18)) == SETTLEMENT_US
        assert pricer.settlement_date(us_bond, date(2016, 6, 3)) == SETTLEMENT_LAST_US
        assert pricer.settlement_date(uk_bond, date(2011, 9, 2)) == SETTLEMENT_UK
        assert pricer.settlement_date(uk_bond, date(2014, 6, 3)) == SETTLEMENT_LAST_UK
        assert pricer.settlement_date(ger_bond, date(2011, 9, 2)) == SETTLEMENT_GER
        assert pricer.settlement_date(ger_bond, date(2014, 6, 3)) == SETTLEMENT_LAST_GER
        assert pricer.settlement_date(jp_bond, date(2015, 9, 24)) == SETTLEMENT_JP
        assert pricer.settlement_date(jp_bond, date(2026, 8, 3)) == SETTLEMENT_ENDED_JP


class TestUSStreet:
    """US street convention."""

    def test_dirty_price_from_yield(self, pricer, us_bond):
        dirty = pricer.dirty_price_from_yield(us_bond, SETTLEMENT_US, YIELD_US)
        assert abs(dirty - 1.0417352500524246) < TOL
        assert abs(pricer.yield_from_dirty_price(us_bond, SETTLEMENT_US, dirty) - YIELD_US) < TOL

    def test_yield_with_newton(self, newton_pricer, us_bond):
        dirty = newton_pricer.dirty_price_from_yield(us_bond, SETTLEMENT_US, YIELD_US)
        assert abs(newton_pricer.yield_from_dirty_price(us_bond, SETTLEMENT_US, dirty) - YIELD_US) < TOL

    def test_dirty_price_from_yield_ad(self, pricer, us_bond):
        dirty = pricer.dirty_price_from_yield(us_bond, SETTLEMENT_US, YIELD_US)
        dirty_ad = pricer.dirty_price_from_yield_ad(us_bond, SETTLEMENT_US, YIELD_US)
        assert abs(dirty_ad.value - dirty) < TOL
        shift = 1e-8
        dirty_up = pricer.dirty_price_from_yield(us_bond, SETTLEMENT_US, YIELD_US + shift)
        assert abs((dirty_up - dirty) / shift - dirty_ad.derivative(0)) < 1e-6

    def test_zero_coupon(self, pricer):
        bond = make_us_bond(0.0)
        assert abs(pricer.dirty_price_from_yield(bond, SETTLEMENT_US, 0.0) - 1.0) < TOL
        dirty = pricer.dirty_price_from_yield(bond, SETTLEMENT_US, YIELD_US)
        assert abs(dirty - 0.8129655023939295) < TOL
        assert abs(pricer.yield_from_dirty_price(bond, SETTLEMENT_US, dirty) - YIELD_US) < TOL

    def test_last_period(self, pricer, us_bond):
        dirty = pricer.dirty_price_from_yield(us_bond, SETTLEMENT_LAST_US, YIELD_US)
        assert abs(dirty - 1.005635683760684) < TOL
        assert abs(pricer.yield_from_dirty_price(us_bond, SETTLEMENT_LAST_US, dirty) - YIELD_US) < TOL

    def test_last_period_price_ad(self, pricer, us_bond):
        dirty_ad = pricer.dirty_price_from_yield_ad(us_bond, SETTLEMENT_LAST_US, YIELD_US)
        up = pricer.dirty_price_from_yield(us_bond, SETTLEMENT_LAST_US, YIELD_US + EPS)
        down = pricer.dirty_price_from_yield(us_bond, SETTLEMENT_LAST_US, YIELD_US - EPS)
        assert abs(dirty_ad.derivative(0) - 0.5 * (up - down) / EPS) < 1e-6

    @pytest.mark.parametrize("settlement", [SETTLEMENT_US, SETTLEMENT_LAST_US])
    def test_yield_from_dirty_price_ad(self, pricer, us_bond, settlement):
        dirty = pricer.dirty_price_from_yield(us_bond, settlement, YIELD_US)
        yield_ad = pricer.yield_from_dirty_price_ad(us_bond, settlement, dirty)
        assert abs(yield_ad.value - YIELD_US) < TOL
        up = pricer.yield_from_dirty_price(us_bond, settlement, dirty + EPS)
        down = pricer.yield_from_dirty_price(us_bond, settlement, dirty - EPS)
        assert abs(yield_ad.derivative(0) - 0.5 * (up - down) / EPS) < 1e-5

    @pytest.mark.parametrize("settlement", [SETTLEMENT_US, SETTLEMENT_LAST_US])
    def test_modified_duration(self, pricer, us_bond, settlement):
        computed = pricer.modified_duration_from_yield(us_bond, settlement, YIELD_US)
        expected = fd_modified_duration(pricer, us_bond, settlement, YIELD_US)
        assert abs(computed - expected) < 1e-6

    @pytest.mark.parametrize("settlement", [SETTLEMENT_US, SETTLEMENT_LAST_US])
    def test_modified_duration_ad(self, pricer, us_bond, settlement):
        shift = 1e-7
        md = pricer.modified_duration_from_yield(us_bond, settlement, YIELD_US)
        md_ad = pricer.modified_duration_from_yield_ad(us_bond, settlement, YIELD_US)
        assert abs(md_ad.value - md) < TOL
        up = pricer.modified_duration_from_yield(us_bond, settlement, YIELD_US + shift)
        down = pricer.modified_duration_from_yield(us_bond, settlement, YIELD_US - shift)
        assert abs(md_ad.derivative(0) - (up - down) / (2 * shift)) < 1e-6

    @pytest.mark.parametrize("settlement", [SETTLEMENT_US, SETTLEMENT_LAST_US])
    def test_convexity(self, pricer, us_bond, settlement):
        computed = pricer.convexity_from_yield(us_bond, settlement, YIELD_US)
        expected = fd_convexity(pricer, us_bond, settlement, YIELD_US)
        assert abs(computed - expected) < 1e-5

    def test_macaulay_duration(self, pricer, us_bond):
        duration = pricer.macaulay_duration_from_yield(us_bond, SETTLEMENT_US, YIELD_US)
        assert abs(duration - 4.6575232098896215) < TOL

    def test_macaulay_duration_last_period(self, pricer, us_bond):
        """Time to the final payment once a single coupon remains."""
        duration = pricer.macaulay_duration_from_yield(us_bond, SETTLEMENT_LAST_US, YIELD_US)
        assert abs(duration - 0.43478260869565216) < TOL

    def test_period_counter_defaults_to_bond(self, pricer, us_bond):
        md = pricer.modified_duration_from_yield(us_bond, SETTLEMENT_US, YIELD_US)
        md_counter = pricer.modified_duration_from_yield(us_bond, SETTLEMENT_US, YIELD_US, us_bond)
        assert md == md_counter


class TestGBBumpDMO:
    """UK DMO convention, with an ex-dividend period."""

    def test_dirty_price_from_yield(self, pricer, uk_bond):
        dirty = pricer.dirty_price_from_yield(uk_bond, SETTLEMENT_UK, YIELD_UK)
        assert abs(dirty - 1.0277859038905428) < TOL
        assert abs(pricer.yield_from_dirty_price(uk_bond, SETTLEMENT_UK, dirty) - YIELD_UK) < TOL

    def test_last_period(self, pricer, uk_bond):
        dirty = pricer.dirty_price_from_yield(uk_bond, SETTLEMENT_LAST_UK, YIELD_UK)
        assert abs(dirty - 1.0145736043763598) < TOL
        assert abs(pricer.yield_from_dirty_price(uk_bond, SETTLEMENT_LAST_UK, dirty) - YIELD_UK) < TOL

    def test_yield_with_newton(self, newton_pricer, uk_bond):
        dirty = newton_pricer.dirty_price_from_yield(uk_bond, SETTLEMENT_UK, YIELD_UK)
        assert abs(newton_pricer.yield_from_dirty_price(uk_bond, SETTLEMENT_UK, dirty) - YIELD_UK) < TOL

    def test_settlement_is_ex_coupon(self, pricer, uk_bond):
        assert pricer.accrued_interest(uk_bond, SETTLEMENT_UK) < 0
        assert pricer.factor_to_next_coupon(uk_bond, SETTLEMENT_UK) > 1.0

    @pytest.mark.parametrize("settlement", [SETTLEMENT_UK, SETTLEMENT_LAST_UK])
    def test_dirty_price_from_yield_ad(self, pricer, uk_bond, settlement):
        dirty_ad = pricer.dirty_price_from_yield_ad(uk_bond, settlement, YIELD_UK)
        assert abs(dirty_ad.value - pricer.dirty_price_from_yield(uk_bond, settlement, YIELD_UK)) < TOL
        up = pricer.dirty_price_from_yield(uk_bond, settlement, YIELD_UK + EPS)
        down = pricer.dirty_price_from_yield(uk_bond, settlement, YIELD_UK - EPS)
        assert abs(dirty_ad.derivative(0) - 0.5 * (up - down) / EPS) < 1e-6

    @pytest.mark.parametrize("settlement", [SETTLEMENT_UK, SETTLEMENT_LAST_UK])
    def test_modified_duration(self, pricer, uk_bond, settlement):
        computed = pricer.modified_duration_from_yield(uk_bond, settlement, YIELD_UK)
        expected = fd_modified_duration(pricer, uk_bond, settlement, YIELD_UK)
        assert abs(computed - expected) < 1e-6

    @pytest.mark.parametrize("settlement", [SETTLEMENT_UK, SETTLEMENT_LAST_UK])
    def test_modified_duration_ad(self, pricer, uk_bond, settlement):
        shift = 1e-7
        md_ad = pricer.modified_duration_from_yield_ad(uk_bond, settlement, YIELD_UK)
        up = pricer.modified_duration_from_yield(uk_bond, settlement, YIELD_UK + shift)
        down = pricer.modified_duration_from_yield(uk_bond, settlement, YIELD_UK - shift)
        assert abs(md_ad.derivative(0) - (up - down) / (2 * shift)) < 1e-6

    @pytest.mark.parametrize("settlement", [SETTLEMENT_UK, SETTLEMENT_LAST_UK])
    def test_convexity(self, pricer, uk_bond, settlement):
        computed = pricer.convexity_from_yield(uk_bond, settlement, YIELD_UK)
        expected = fd_convexity(pricer, uk_bond, settlement, YIELD_UK)
        assert abs(computed - expected) < 1e-5

    def test_macaulay_duration(self, pricer, uk_bond):
        duration = pricer.macaulay_duration_from_yield(uk_bond, SETTLEMENT_UK, YIELD_UK)
        assert abs(duration - 2.8312260658609163) < TOL

    def test_macaulay_duration_last_period(self, pricer, uk_bond):
        duration = pricer.macaulay_duration_from_yield(uk_bond, SETTLEMENT_LAST_UK, YIELD_UK)
        assert abs(duration - 0.25815217391304346) < TOL

    def test_final_period_ex_coupon(self, pricer, uk_bond):
        """Only the redemption and final coupon remain, discounted over f periods."""
        settlement = SETTLEMENT_FINAL_EX_UK
        assert pricer.accrued_interest(uk_bond, settlement) < 0
        f = pricer.factor_to_next_coupon(uk_bond, settlement)
        md = pricer.modified_duration_from_yield(uk_bond, settlement, YIELD_UK)
        assert abs(md - f / 2.0 / (1.0 + YIELD_UK / 2.0)) < 1e-12
        assert abs(md - fd_modified_duration(pricer, uk_bond, settlement, YIELD_UK)) < 1e-6

    def test_final_period_ex_coupon_derivatives(self, pricer, uk_bond):
        settlement = SETTLEMENT_FINAL_EX_UK
        dirty_ad = pricer.dirty_price_from_yield_ad(uk_bond, settlement, YIELD_UK)
        up = pricer.dirty_price_from_yield(uk_bond, settlement, YIELD_UK + EPS)
        down = pricer.dirty_price_from_yield(uk_bond, settlement, YIELD_UK - EPS)
        assert abs(dirty_ad.derivative(0) - 0.5 * (up - down) / EPS) < 1e-6
        md_ad = pricer.modified_duration_from_yield_ad(uk_bond, settlement, YIELD_UK)
        md_up = pricer.modified_duration_from_yield(uk_bond, settlement, YIELD_UK + EPS)
        md_down = pricer.modified_duration_from_yield(uk_bond, settlement, YIELD_UK - EPS)
        assert abs(md_ad.derivative(0) - 0.5 * (md_up - md_down) / EPS) < 1e-6
        convexity = pricer.convexity_from_yield(uk_bond, settlement, YIELD_UK)
        assert abs(convexity - fd_convexity(pricer, uk_bond, settlement, YIELD_UK)) < 1e-5
        duration = pricer.macaulay_duration_from_yield(uk_bond, settlement, YIELD_UK)
        assert abs(duration - md_ad.value * (1.0 + YIELD_UK / 2.0)) < TOL


class TestDEBonds:
    """German Bund convention."""

    def test_dirty_price_from_yield(self, pricer, ger_bond):
        dirty = pricer.dirty_price_from_yield(ger_bond, SETTLEMENT_GER, YIELD_GER)
        assert abs(dirty - 1.027750910332271) < TOL
        assert abs(pricer.yield_from_dirty_price(ger_bond, SETTLEMENT_GER, dirty) - YIELD_GER) < TOL

    def test_last_period(self, pricer, ger_bond):
        dirty = pricer.dirty_price_from_yield(ger_bond, SETTLEMENT_LAST_GER, YIELD_GER)
        assert abs(dirty - 1.039406595790844) < TOL
        assert abs(pricer.yield_from_dirty_price(ger_bond, SETTLEMENT_LAST_GER, dirty) - YIELD_GER) < TOL

    @pytest.mark.parametrize("settlement", [SETTLEMENT_GER, SETTLEMENT_LAST_GER])
    def test_dirty_price_from_yield_ad(self, pricer, ger_bond, settlement):
        dirty_ad = pricer.dirty_price_from_yield_ad(ger_bond, settlement, YIELD_GER)
        up = pricer.dirty_price_from_yield(ger_bond, settlement, YIELD_GER + EPS)
        down = pricer.dirty_price_from_yield(ger_bond, settlement, YIELD_GER - EPS)
        assert abs(dirty_ad.derivative(0) - 0.5 * (up - down) / EPS) < 1e-6

    @pytest.mark.parametrize("settlement", [SETTLEMENT_GER, SETTLEMENT_LAST_GER])
    def test_modified_duration(self, pricer, ger_bond, settlement):
        computed = pricer.modified_duration_from_yield(ger_bond, settlement, YIELD_GER)
        expected = fd_modified_duration(pricer, ger_bond, settlement, YIELD_GER)
        assert abs(computed - expected) < 1e-6

    @pytest.mark.parametrize("settlement", [SETTLEMENT_GER, SETTLEMENT_LAST_GER])
    def test_convexity(self, pricer, ger_bond, settlement):
        computed = pricer.convexity_from_yield(ger_bond, settlement, YIELD_GER)
        expected = fd_convexity(pricer, ger_bond, settlement, YIELD_GER)
        assert abs(computed - expected) < 1e-5

    def test_macaulay_duration(self, pricer, ger_bond):
        duration = pricer.macaulay_duration_from_yield(ger_bond, SETTLEMENT_GER, YIELD_GER)
        assert abs(duration - 2.861462874541554) < TOL

    def test_macaulay_duration_last_period(self, pricer, ger_bond):
        """Scaled modified duration even when a single coupon remains."""
        duration = pricer.macaulay_duration_from_yield(ger_bond, SETTLEMENT_LAST_GER, YIELD_GER)
        md = pricer.modified_duration_from_yield(ger_bond, SETTLEMENT_LAST_GER, YIELD_GER)
        assert abs(duration - 0.26231286613148186) < TOL
        assert abs(duration - md * (1.0 + YIELD_GER)) < TOL


class TestSingleCouponClosedForm:
    """Closed-form yield when one coupon remains."""

    def test_money_market_currency(self, pricer):
        bond = FixedCouponBond.from_schedule(
            date(2006, 11, 15), date(2016, 11, 15), 2, 0.04625,
            DayCount.ACT_ACT_ICMA, YieldConvention.US_STREET, notional=100.0, currency="CAD",
        )
        dirty = 1.005
        final_amount = 1.0 + 0.04625 * 0.5
        days = (date(2016, 11, 15) - SETTLEMENT_LAST_US).days
        computed = pricer.yield_from_dirty_price_ad(bond, SETTLEMENT_LAST_US, dirty)
        assert abs(computed.value - (final_amount / dirty - 1.0) * 365.0 / days) < TOL
        assert abs(computed.derivative(0) + final_amount / dirty ** 2 * 365.0 / days) < TOL

    def test_price_equal_to_final_amount(self, pricer, us_bond):
        final_amount = 1.0 + 0.04625 * 0.5
        assert pricer.yield_from_dirty_price(us_bond, SETTLEMENT_LAST_US, final_amount) == 0.0

    def test_closed_form_only_for_single_coupon(self, us_bond):
        formula = yield_formula(YieldConvention.US_STREET)
        assert formula.closed_form_yield(us_bond, SETTLEMENT_US, 1.04) is None
        assert formula.closed_form_yield(us_bond, SETTLEMENT_LAST_US, 1.005) is not None


class TestJPSimple:
    """Japanese simple yield."""

    def expected_dirty(self, pricer, bond, settlement):
        maturity = year_fraction(settlement, END_JP, DayCount.NL_365)
        clean = (1.0 + RATE_JP * maturity) / (1.0 + YIELD_JP * maturity)
        return pricer.dirty_price_from_clean_price(bond, settlement, clean)

    @pytest.mark.parametrize("settlement", [SETTLEMENT_JP, SETTLEMENT_LAST_JP])
    def test_dirty_price_from_yield(self, pricer, jp_bond, settlement):
        computed = pricer.dirty_price_from_yield(jp_bond, settlement, YIELD_JP)
        assert abs(computed - self.expected_dirty(pricer, jp_bond, settlement)) < TOL
        assert abs(pricer.yield_from_dirty_price(jp_bond, settlement, computed) - YIELD_JP) < TOL

    def test_ended(self, pricer, jp_bond):
        assert pricer.dirty_price_from_yield(jp_bond, SETTLEMENT_ENDED_JP, YIELD_JP) == 0.0
        assert pricer.modified_duration_from_yield(jp_bond, SETTLEMENT_ENDED_JP, YIELD_JP) == 0.0
        assert pricer.convexity_from_yield(jp_bond, SETTLEMENT_ENDED_JP, YIELD_JP) == 0.0

    def test_yield_after_maturity(self, pricer, jp_bond):
        with pytest.raises(SettlementDateError):
            pricer.yield_from_dirty_price(jp_bond, SETTLEMENT_ENDED_JP, 1.0)

    def test_dirty_price_from_yield_ad(self, pricer, jp_bond):
        dirty_ad = pricer.dirty_price_from_yield_ad(jp_bond, SETTLEMENT_JP, YIELD_JP)
        up = pricer.dirty_price_from_yield(jp_bond, SETTLEMENT_JP, YIELD_JP + EPS)
        down = pricer.dirty_price_from_yield(jp_bond, SETTLEMENT_JP, YIELD_JP - EPS)
        assert abs(dirty_ad.derivative(0) - 0.5 * (up - down) / EPS) < 1e-6

    def test_yield_from_dirty_price_ad(self, pricer, jp_bond):
        dirty = pricer.dirty_price_from_yield(jp_bond, SETTLEMENT_JP, YIELD_JP)
        yield_ad = pricer.yield_from_dirty_price_ad(jp_bond, SETTLEMENT_JP, dirty)
        up = pricer.yield_from_dirty_price(jp_bond, SETTLEMENT_JP, dirty + EPS)
        down = pricer.yield_from_dirty_price(jp_bond, SETTLEMENT_JP, dirty - EPS)
        assert abs(yield_ad.value - YIELD_JP) < TOL
        assert abs(yield_ad.derivative(0) - 0.5 * (up - down) / EPS) < 1e-5

    @pytest.mark.parametrize("settlement", [SETTLEMENT_JP, SETTLEMENT_LAST_JP])
    def test_modified_duration(self, pricer, jp_bond, settlement):
        computed = pricer.modified_duration_from_yield(jp_bond, settlement, YIELD_JP)
        expected = fd_modified_duration(pricer, jp_bond, settlement, YIELD_JP)
        assert abs(computed - expected) < 1e-6

    def test_modified_duration_ad(self, pricer, jp_bond):
        shift = 1e-7
        md = pricer.modified_duration_from_yield(jp_bond, SETTLEMENT_JP, YIELD_JP)
        md_ad = pricer.modified_duration_from_yield_ad(jp_bond, SETTLEMENT_JP, YIELD_JP)
        assert abs(md_ad.value - md) < TOL
        up = pricer.modified_duration_from_yield(jp_bond, SETTLEMENT_JP, YIELD_JP + shift)
        down = pricer.modified_duration_from_yield(jp_bond, SETTLEMENT_JP, YIELD_JP - shift)
        assert abs(md_ad.derivative(0) - (up - down) / (2 * shift)) < 1e-6

    @pytest.mark.parametrize("settlement", [SETTLEMENT_JP, SETTLEMENT_LAST_JP])
    def test_convexity(self, pricer, jp_bond, settlement):
        computed = pricer.convexity_from_yield(jp_bond, settlement, YIELD_JP)
        expected = fd_convexity(pricer, jp_bond, settlement, YIELD_JP)
        assert abs(computed - expected) < 1e-5

    def test_macaulay_duration_unsupported(self, pricer, jp_bond):
        with pytest.raises(UnsupportedConventionError):
            pricer.macaulay_duration_from_yield(jp_bond, SETTLEMENT_JP, YIELD_JP)


class TestNonRegularFinalPeriod:
    """ACT/365F periods are not exactly 1/m of a year."""

    @pytest.fixture(params=[YieldConvention.GB_BUMP_DMO, YieldConvention.DE_BONDS])
    def act365_bond(self, request):
        return FixedCouponBond.from_schedule(
            date(2015, 4, 12), date(2025, 4, 12), 2, 0.015,
            DayCount.ACT_365, request.param, notional=100.0, currency="EUR",
        )

    def test_final_period_year_fraction(self, act365_bond):
        assert act365_bond.periods[-1].year_fraction * 2 != 1.0

    def test_modified_duration(self, pricer, act365_bond):
        settlement = date(2016, 4, 28)
        computed = pricer.modified_duration_from_yield(act365_bond, settlement, 0.02)
        assert abs(computed - fd_modified_duration(pricer, act365_bond, settlement, 0.02)) < 1e-6

    def test_modified_duration_ad(self, pricer, act365_bond):
        settlement = date(2016, 4, 28)
        md_ad = pricer.modified_duration_from_yield_ad(act365_bond, settlement, 0.02)
        up = pricer.modified_duration_from_yield(act365_bond, settlement, 0.02 + EPS)
        down = pricer.modified_duration_from_yield(act365_bond, settlement, 0.02 - EPS)
        assert abs(md_ad.derivative(0) - 0.5 * (up - down) / EPS) < 1e-6

    def test_convexity(self, pricer, act365_bond):
        settlement = date(2016, 4, 28)
        computed = pricer.convexity_from_yield(act365_bond, settlement, 0.02)
        assert abs(computed - fd_convexity(pricer, act365_bond, settlement, 0.02)) < 1e-5


class TestPeriodCounter:
    """Time to the next coupon counted on a second bond."""

    @pytest.fixture
    def us_counter(self):
        return FixedCouponBond.from_schedule(
            date(2006, 11, 15), date(2016, 11, 15), 2, 0.04625,
            DayCount.ACT_365, YieldConvention.US_STREET, notional=100.0,
        )

    @pytest.fixture
    def jp_counter(self):
        return FixedCouponBond.from_schedule(
            date(2015, 9, 20), END_JP, 2, RATE_JP,
            DayCount.ACT_365, YieldConvention.JP_SIMPLE, notional=100.0, currency="JPY",
        )

    def test_counter_changes_factor(self, pricer, us_bond, us_counter):
        for settlement in (SETTLEMENT_US, SETTLEMENT_LAST_US):
            f_bond = pricer.factor_to_next_coupon(us_bond, settlement)
            f_counter = pricer.factor_to_next_coupon(us_counter, settlement)
            assert abs(f_bond - f_counter) > 1e-3

    def test_single_coupon(self, pricer, us_bond, us_counter):
        settlement = SETTLEMENT_LAST_US
        time_to_pay = pricer.factor_to_next_coupon(us_counter, settlement) / 2.0
        md = pricer.modified_duration_from_yield(us_bond, settlement, YIELD_US, us_counter)
        assert abs(md - time_to_pay / (1.0 + time_to_pay * YIELD_US)) < 1e-14
        duration = pricer.macaulay_duration_from_yield(us_bond, settlement, YIELD_US, us_counter)
        assert abs(duration - time_to_pay) < 1e-14

    def test_general_case(self, pricer, us_bond, us_counter):
        """Cash flows from the bond, exponents shifted by the counter's factor."""
        settlement = SETTLEMENT_US
        f = pricer.factor_to_next_coupon(us_counter, settlement)
        v = 1.0 + YIELD_US / 2.0
        # Ten live coupons of c/2, then redemption plus the last coupon
        flows = [(0.04625 * 0.5, k + f) for k in range(10)]
        flows.append((1.0 + 0.04625 * 0.5, 10 + f))
        pv = sum(a * v ** -t for a, t in flows)
        expected = sum(a * t * v ** (-t - 1) for a, t in flows) / (2.0 * pv)

        md = pricer.modified_duration_from_yield(us_bond, settlement, YIELD_US, us_counter)
        assert abs(md - expected) < 1e-12
        assert abs(md - pricer.modified_duration_from_yield(us_bond, settlement, YIELD_US)) > 1e-4
        duration = pricer.macaulay_duration_from_yield(us_bond, settlement, YIELD_US, us_counter)
        assert abs(duration - expected * v) < 1e-12

    def test_japanese_maturity(self, pricer, jp_bond, jp_counter):
        settlement = SETTLEMENT_JP
        maturity = year_fraction(settlement, END_JP, DayCount.ACT_365)
        assert maturity != year_fraction(settlement, END_JP, DayCount.NL_365)
        num = 1.0 + RATE_JP * maturity
        den = 1.0 + YIELD_JP * maturity
        dirty = num / den + pricer.accrued_interest(jp_bond, settlement) / 100.0
        md = pricer.modified_duration_from_yield(jp_bond, settlement, YIELD_JP, jp_counter)
        assert abs(md - num * maturity / den ** 2 / dirty) < 1e-12


class TestFormulaRegistry:
    """Tests for convention dispatch."""

    def test_every_convention_has_formula(self):
        for convention in YieldConvention:
            assert yield_formula(convention).convention == convention

    def test_unknown_convention(self):
        with pytest.raises(UnsupportedConventionError) as excinfo:
            yield_formula("XX")
        assert "yield conversion" in str(excinfo.value)

    def test_base_formula_raises(self, us_bond):
        formula = YieldFormula()
        with pytest.raises(NotImplementedError):
            formula.dirty_price_from_yield(us_bond, SETTLEMENT_US, YIELD_US)
        with pytest.raises(UnsupportedConventionError):
            formula.convexity_from_yield(us_bond, SETTLEMENT_US, YIELD_US)
        assert formula.closed_form_yield(us_bond, SETTLEMENT_US, 1.0) is None

    def test_yield_grid(self, us_bond):
        grid = YieldGrid.build(us_bond, SETTLEMENT_US)
        assert grid.coupon_count == 11
        assert grid.live_count == 10
        assert grid.final_live
        assert abs(grid.factor_to_next_coupon - 84 / 184) < 1e-14
        assert abs(grid.final_power - 10.0) < 1e-14
        assert len(grid.live_year_fractions) == 10
