"""
Yield conventions for fixed-coupon bonds.

Each YieldConvention maps to one formula object:
- US_STREET: periodic compounding, simple discounting when one coupon remains
- DE_BONDS: as US_STREET, Macaulay duration always from modified duration
- GB_BUMP_DMO: periodic compounding to the final payment in every case
- JP_SIMPLE: simple yield on the clean price to maturity

Every price function has an adjoint ("_ad") twin returning the value and
its derivative with respect to the yield (or to the dirty price for the
yield functions). Compounded conventions share a YieldGrid built once per
call. Notation: m coupons per year, f factor to next coupon, v = 1 + y/m,
p live coupons before the final one, c coupon rate, R redemption ratio.
"""

from dataclasses import dataclass
from datetime import date
from typing import Dict, Optional, Tuple

import logging

from ..bonds import FixedCouponBond
from ..conventions import YieldConvention
from ..exceptions import SettlementDateError, UnsupportedConventionError
from ..math.ad import ValueDerivatives
from .accrual import (
    accrued_interest,
    factor_to_next_coupon,
    is_coupon_live,
    remaining_coupon_count,
)

logger = logging.getLogger(__name__)

# Currencies whose single-coupon yield is annualised on a 365-day basis
ACTUAL_365_MONEY_MARKET_CURRENCIES = ("AUD", "CAD")


@dataclass(frozen=True)
class YieldGrid:
    """
    Schedule quantities shared by the compounded yield formulas.

    Attributes:
        coupon_count: Coupons remaining after settlement
        factor_to_next_coupon: f, from the period-counting bond
        live_year_fractions: Year fractions of live coupons before the final period
        final_year_fraction: Year fraction of the final period
        final_live: Whether the final coupon is live
        fixed_rate: Coupon rate c
        redemption_ratio: Redemption ratio R
        frequency: Coupons per year m
    """
    coupon_count: int
    factor_to_next_coupon: float
    live_year_fractions: Tuple[float, ...]
    final_year_fraction: float
    final_live: bool
    fixed_rate: float
    redemption_ratio: float
    frequency: int

    @classmethod
    def build(
        cls,
        bond: FixedCouponBond,
        settlement: date,
        period_counter: Optional[FixedCouponBond] = None,
    ) -> "YieldGrid":
        counter = period_counter if period_counter is not None else bond
        live = tuple(
            p.year_fraction for p in bond.periods[:-1] if is_coupon_live(p, settlement)
        )
        final = bond.periods[-1]
        return cls(
            coupon_count=remaining_coupon_count(bond, settlement),
            factor_to_next_coupon=factor_to_next_coupon(counter, settlement),
            live_year_fractions=live,
            final_year_fraction=final.year_fraction,
            final_live=is_coupon_live(final, settlement),
            fixed_rate=bond.fixed_rate,
            redemption_ratio=bond.redemption_ratio,
            frequency=bond.frequency,
        )

    @property
    def live_count(self) -> int:
        return len(self.live_year_fractions)

    @property
    def final_amount(self) -> float:
        """Redemption plus final coupon, per unit of notional."""
        return self.redemption_ratio + self.fixed_rate * self.final_year_fraction

    @property
    def final_power(self) -> float:
        return self.live_count - 1 + self.final_year_fraction * self.frequency

    def factor_on_period(self, yield_: float) -> float:
        return 1.0 + yield_ / self.frequency


class YieldFormula:
    """
    Price/yield relationship of one yield convention.

    Operations a convention does not define raise UnsupportedConventionError.
    """

    convention: Optional[YieldConvention] = None

    def _unsupported(self, operation: str) -> UnsupportedConventionError:
        return UnsupportedConventionError(self.convention, operation)

    def dirty_price_from_yield(self, bond: FixedCouponBond, settlement: date, yield_: float) -> float:
        raise self._unsupported("dirty_price_from_yield")

    def dirty_price_from_yield_ad(
        self, bond: FixedCouponBond, settlement: date, yield_: float
    ) -> ValueDerivatives:
        raise self._unsupported("dirty_price_from_yield_ad")

    def closed_form_yield(
        self, bond: FixedCouponBond, settlement: date, dirty_price: float
    ) -> Optional[ValueDerivatives]:
        """
        Yield and d(yield)/d(dirty price) where an algebraic inverse exists.

        Returns None when the yield must be found by root finding.
        """
        return None

    def modified_duration_from_yield(
        self,
        bond: FixedCouponBond,
        settlement: date,
        yield_: float,
        period_counter: Optional[FixedCouponBond] = None,
    ) -> float:
        raise self._unsupported("modified_duration_from_yield")

    def modified_duration_from_yield_ad(
        self, bond: FixedCouponBond, settlement: date, yield_: float
    ) -> ValueDerivatives:
        raise self._unsupported("modified_duration_from_yield_ad")

    def macaulay_duration_from_yield(
        self,
        bond: FixedCouponBond,
        settlement: date,
        yield_: float,
        period_counter: Optional[FixedCouponBond] = None,
    ) -> float:
        raise self._unsupported("macaulay_duration_from_yield")

    def convexity_from_yield(self, bond: FixedCouponBond, settlement: date, yield_: float) -> float:
        raise self._unsupported("convexity_from_yield")

    def __repr__(self) -> str:
        name = self.convention.name if self.convention is not None else None
        return f"{type(self).__name__}({name})"


class CompoundedYieldFormula(YieldFormula):
    """
    Periodic compounding from settlement to every live cash flow.

    The final payment is discounted over lastPow = p - 1 + m * yf_last
    periods past the next coupon.
    """

    def __init__(self, convention: YieldConvention = YieldConvention.GB_BUMP_DMO):
        self.convention = convention

    def dirty_price_from_yield(self, bond: FixedCouponBond, settlement: date, yield_: float) -> float:
        grid = YieldGrid.build(bond, settlement)
        return self._price(grid, yield_)

    def dirty_price_from_yield_ad(
        self, bond: FixedCouponBond, settlement: date, yield_: float
    ) -> ValueDerivatives:
        grid = YieldGrid.build(bond, settlement)
        return self._price_ad(grid, yield_)

    def modified_duration_from_yield(
        self,
        bond: FixedCouponBond,
        settlement: date,
        yield_: float,
        period_counter: Optional[FixedCouponBond] = None,
    ) -> float:
        grid = YieldGrid.build(bond, settlement, period_counter)
        return self._modified_duration_ad(grid, yield_).value

    def modified_duration_from_yield_ad(
        self, bond: FixedCouponBond, settlement: date, yield_: float
    ) -> ValueDerivatives:
        grid = YieldGrid.build(bond, settlement)
        return self._modified_duration_ad(grid, yield_)

    def macaulay_duration_from_yield(
        self,
        bond: FixedCouponBond,
        settlement: date,
        yield_: float,
        period_counter: Optional[FixedCouponBond] = None,
    ) -> float:
        md = self.modified_duration_from_yield(bond, settlement, yield_, period_counter)
        return md * (1.0 + yield_ / bond.frequency)

    def convexity_from_yield(self, bond: FixedCouponBond, settlement: date, yield_: float) -> float:
        grid = YieldGrid.build(bond, settlement)
        return self._convexity(grid, yield_)

    @classmethod
    def _price(cls, grid: YieldGrid, yield_: float) -> float:
        return cls._yield_sums(grid, yield_)[0]

    @classmethod
    def _price_ad(cls, grid: YieldGrid, yield_: float) -> ValueDerivatives:
        price, first, _ = cls._yield_sums(grid, yield_)
        return ValueDerivatives.of(price, -first / grid.frequency)

    @staticmethod
    def _discounted_terms(grid: YieldGrid):
        """(amount, periods to payment) pairs discounted by _price."""
        f = grid.factor_to_next_coupon
        terms = [(grid.fixed_rate * yf, k + f) for k, yf in enumerate(grid.live_year_fractions)]
        terms.append((grid.final_amount, grid.final_power + f))
        return terms

    @classmethod
    def _yield_sums(cls, grid: YieldGrid, yield_: float) -> Tuple[float, float, float]:
        """Price and the magnitudes of its first two derivatives in v = 1 + y/m."""
        v = grid.factor_on_period(yield_)
        pv = 0.0
        first = 0.0
        second = 0.0
        for amount, t in cls._discounted_terms(grid):
            pv += amount * v ** -t
            first += amount * t * v ** (-t - 1.0)
            second += amount * t * (t + 1.0) * v ** (-t - 2.0)
        return pv, first, second

    @classmethod
    def _modified_duration_ad(cls, grid: YieldGrid, yield_: float) -> ValueDerivatives:
        m = grid.frequency
        pv, first, second = cls._yield_sums(grid, yield_)
        md = first / (m * pv)
        md_v_bar = (first ** 2 - second * pv) / (m * pv ** 2)
        return ValueDerivatives.of(md, md_v_bar / m)

    @classmethod
    def _convexity(cls, grid: YieldGrid, yield_: float) -> float:
        pv, _, second = cls._yield_sums(grid, yield_)
        return second / (grid.frequency ** 2 * pv)


class SimpleFinalPeriodYieldFormula(CompoundedYieldFormula):
    """
    Compounded yield with simple discounting once a single coupon remains.

    Attributes:
        simple_final_macaulay: Report Macaulay duration as the time to the
            final payment when a single coupon remains
    """

    def __init__(self, convention: YieldConvention, simple_final_macaulay: bool):
        super().__init__(convention)
        self.simple_final_macaulay = simple_final_macaulay

    def dirty_price_from_yield(self, bond: FixedCouponBond, settlement: date, yield_: float) -> float:
        grid = YieldGrid.build(bond, settlement)
        if grid.coupon_count == 1:
            return self._single_price_ad(grid, yield_).value
        return self._price(grid, yield_)

    def dirty_price_from_yield_ad(
        self, bond: FixedCouponBond, settlement: date, yield_: float
    ) -> ValueDerivatives:
        grid = YieldGrid.build(bond, settlement)
        if grid.coupon_count == 1:
            return self._single_price_ad(grid, yield_)
        return self._price_ad(grid, yield_)

    def closed_form_yield(
        self, bond: FixedCouponBond, settlement: date, dirty_price: float
    ) -> Optional[ValueDerivatives]:
        grid = YieldGrid.build(bond, settlement)
        if grid.coupon_count != 1:
            return None
        abs_yield = grid.final_amount / dirty_price - 1.0
        price_bar = -grid.final_amount / dirty_price ** 2
        if bond.currency in ACTUAL_365_MONEY_MARKET_CURRENCIES:
            multiplier = 365.0 / (bond.unadjusted_end_date - settlement).days
        else:
            multiplier = grid.frequency / grid.factor_to_next_coupon
        if abs_yield == 0:
            return ValueDerivatives.of(0.0, price_bar * multiplier)
        return ValueDerivatives.of(abs_yield * multiplier, price_bar * multiplier)

    def modified_duration_from_yield(
        self,
        bond: FixedCouponBond,
        settlement: date,
        yield_: float,
        period_counter: Optional[FixedCouponBond] = None,
    ) -> float:
        grid = YieldGrid.build(bond, settlement, period_counter)
        if grid.coupon_count == 1:
            return self._single_modified_duration_ad(grid, yield_).value
        return self._modified_duration_ad(grid, yield_).value

    def modified_duration_from_yield_ad(
        self, bond: FixedCouponBond, settlement: date, yield_: float
    ) -> ValueDerivatives:
        grid = YieldGrid.build(bond, settlement)
        if grid.coupon_count == 1:
            return self._single_modified_duration_ad(grid, yield_)
        return self._modified_duration_ad(grid, yield_)

    def macaulay_duration_from_yield(
        self,
        bond: FixedCouponBond,
        settlement: date,
        yield_: float,
        period_counter: Optional[FixedCouponBond] = None,
    ) -> float:
        if self.simple_final_macaulay:
            grid = YieldGrid.build(bond, settlement, period_counter)
            if grid.coupon_count == 1:
                return grid.factor_to_next_coupon / grid.frequency
        return super().macaulay_duration_from_yield(bond, settlement, yield_, period_counter)

    def convexity_from_yield(self, bond: FixedCouponBond, settlement: date, yield_: float) -> float:
        grid = YieldGrid.build(bond, settlement)
        if grid.coupon_count == 1:
            time_to_pay = grid.factor_to_next_coupon / grid.frequency
            disc = 1.0 + time_to_pay * yield_
            return 2.0 * time_to_pay ** 2 / disc ** 2
        return self._convexity(grid, yield_)

    @staticmethod
    def _single_price_ad(grid: YieldGrid, yield_: float) -> ValueDerivatives:
        time_to_pay = grid.factor_to_next_coupon / grid.frequency
        disc = 1.0 + time_to_pay * yield_
        price = grid.final_amount / disc
        return ValueDerivatives.of(price, -grid.final_amount / disc ** 2 * time_to_pay)

    @staticmethod
    def _single_modified_duration_ad(grid: YieldGrid, yield_: float) -> ValueDerivatives:
        time_to_pay = grid.factor_to_next_coupon / grid.frequency
        disc = 1.0 + time_to_pay * yield_
        return ValueDerivatives.of(time_to_pay / disc, -time_to_pay ** 2 / disc ** 2)


class JapaneseSimpleYieldFormula(YieldFormula):
    """
    Simple yield on the clean price: clean = (R + c T) / (1 + y T).

    T is the signed year fraction from settlement to the unadjusted end
    date. Every value is zero once settlement is after that date.
    """

    convention = YieldConvention.JP_SIMPLE

    def dirty_price_from_yield(self, bond: FixedCouponBond, settlement: date, yield_: float) -> float:
        return self.dirty_price_from_yield_ad(bond, settlement, yield_).value

    def dirty_price_from_yield_ad(
        self, bond: FixedCouponBond, settlement: date, yield_: float
    ) -> ValueDerivatives:
        if settlement > bond.unadjusted_end_date:
            return ValueDerivatives.of(0.0, 0.0)
        maturity = bond.relative_year_fraction(settlement, bond.unadjusted_end_date)
        num = bond.redemption_ratio + bond.fixed_rate * maturity
        den = 1.0 + yield_ * maturity
        dirty = num / den + accrued_interest(bond, settlement) / bond.notional
        return ValueDerivatives.of(dirty, -num / den ** 2 * maturity)

    def closed_form_yield(
        self, bond: FixedCouponBond, settlement: date, dirty_price: float
    ) -> Optional[ValueDerivatives]:
        maturity = bond.relative_year_fraction(settlement, bond.unadjusted_end_date)
        if maturity <= 0:
            raise SettlementDateError(settlement, "Settlement on or after maturity of bond")
        clean = dirty_price - accrued_interest(bond, settlement) / bond.notional
        numerator = bond.fixed_rate + (bond.redemption_ratio - clean) / maturity
        price_bar = (-1.0 / maturity * clean - numerator) / clean ** 2
        return ValueDerivatives.of(numerator / clean, price_bar)

    def modified_duration_from_yield(
        self,
        bond: FixedCouponBond,
        settlement: date,
        yield_: float,
        period_counter: Optional[FixedCouponBond] = None,
    ) -> float:
        if settlement > bond.unadjusted_end_date:
            return 0.0
        counter = period_counter if period_counter is not None else bond
        maturity = counter.relative_year_fraction(settlement, bond.unadjusted_end_date)
        num = bond.redemption_ratio + bond.fixed_rate * maturity
        den = 1.0 + yield_ * maturity
        dirty = num / den + accrued_interest(bond, settlement) / bond.notional
        return num * maturity / den ** 2 / dirty

    def modified_duration_from_yield_ad(
        self, bond: FixedCouponBond, settlement: date, yield_: float
    ) -> ValueDerivatives:
        if settlement > bond.unadjusted_end_date:
            return ValueDerivatives.of(0.0, 0.0)
        maturity = bond.relative_year_fraction(settlement, bond.unadjusted_end_date)
        num = bond.redemption_ratio + bond.fixed_rate * maturity
        den = 1.0 + yield_ * maturity
        clean = num / den
        dirty = clean + accrued_interest(bond, settlement) / bond.notional
        md = num * maturity / den ** 2 / dirty
        # Backward sweep
        den_bar = -2.0 * num * maturity / den ** 3 / dirty
        dirty_bar = -md / dirty
        den_bar += -clean / den * dirty_bar
        return ValueDerivatives.of(md, maturity * den_bar)

    def convexity_from_yield(self, bond: FixedCouponBond, settlement: date, yield_: float) -> float:
        if settlement > bond.unadjusted_end_date:
            return 0.0
        maturity = bond.relative_year_fraction(settlement, bond.unadjusted_end_date)
        num = bond.redemption_ratio + bond.fixed_rate * maturity
        den = 1.0 + yield_ * maturity
        dirty = num / den + accrued_interest(bond, settlement) / bond.notional
        return 2.0 * num * maturity ** 2 * den ** -3 / dirty


_FORMULAS: Dict[YieldConvention, YieldFormula] = {
    YieldConvention.US_STREET: SimpleFinalPeriodYieldFormula(YieldConvention.US_STREET, simple_final_macaulay=True),
    YieldConvention.DE_BONDS: SimpleFinalPeriodYieldFormula(YieldConvention.DE_BONDS, simple_final_macaulay=False),
    YieldConvention.GB_BUMP_DMO: CompoundedYieldFormula(YieldConvention.GB_BUMP_DMO),
    YieldConvention.JP_SIMPLE: JapaneseSimpleYieldFormula(),
}


def yield_formula(convention) -> YieldFormula:
    """
    Formula object of a yield convention.

    Raises:
        UnsupportedConventionError: If no formula is registered
    """
    formula = _FORMULAS.get(convention)
    if formula is None:
        raise UnsupportedConventionError(convention, "yield conversion")
    logger.debug("Yield convention %s handled by %r", convention, formula)
    return formula


__all__ = [
    "YieldGrid",
    "YieldFormula",
    "CompoundedYieldFormula",
    "SimpleFinalPeriodYieldFormula",
    "JapaneseSimpleYieldFormula",
    "yield_formula",
]
