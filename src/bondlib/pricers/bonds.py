"""
Fixed-coupon bond pricing engine.

Converts between the four representations of a bond's value:
- present value against issuer and repo discount curves
- dirty and clean price (fraction of notional)
- yield under the bond's yield convention
- z-spread over the issuer curve

Conventions:
- Prices are expressed per unit of notional
- Point sensitivities are with respect to continuously-compounded zero rates
- Settlement defaults to valuation date plus the bond's settlement days
"""

from datetime import date
from typing import Optional

import logging

from ..bonds import FixedCouponBond
from ..config import PricerSettings, RootFinder
from ..conventions import CompoundingConvention
from ..dates import DateUtils
from ..market_state import DiscountFactors, LegalEntityDiscountingProvider
from ..math.ad import ValueDerivatives
from ..sensitivity.parameters import CurveParameterSensitivities
from ..sensitivity.points import PointSensitivities
from . import accrual
from .payments import DiscountingCouponPeriodPricer, DiscountingPaymentPricer
from .yield_conventions import yield_formula

logger = logging.getLogger(__name__)


class FixedCouponBondPricer:
    """
    Pricer for fixed-coupon bonds.

    Attributes:
        settings: Numerical settings (root finder, bracketing windows)
        root_finder: Root finder used for yield and z-spread inversion
        holidays: Holidays used to derive the default settlement date
    """

    def __init__(
        self,
        settings: Optional[PricerSettings] = None,
        root_finder: Optional[RootFinder] = None,
        holidays: Optional[set] = None,
    ):
        self.settings = settings or PricerSettings.default()
        self.root_finder = root_finder if root_finder is not None else self.settings.create_root_finder()
        self.holidays = holidays
        self.nominal_pricer = DiscountingPaymentPricer()
        self.period_pricer = DiscountingCouponPeriodPricer()

    # ------------------------------------------------------------------
    # Curve lookups and dates

    @staticmethod
    def _issuer_df(bond: FixedCouponBond, provider: LegalEntityDiscountingProvider) -> DiscountFactors:
        return provider.issuer_curve_discount_factors(bond.legal_entity_id, bond.currency)

    @staticmethod
    def _repo_df(bond: FixedCouponBond, provider: LegalEntityDiscountingProvider) -> DiscountFactors:
        return provider.repo_curve_discount_factors(bond.security_id, bond.legal_entity_id, bond.currency)

    def settlement_date(self, bond: FixedCouponBond, valuation_date: date) -> date:
        """Valuation date moved by the bond's settlement days."""
        return DateUtils.add_business_days(valuation_date, bond.settlement_days, self.holidays)

    def _settlement(self, bond, provider, settlement: Optional[date]) -> date:
        if settlement is not None:
            return settlement
        return self.settlement_date(bond, provider.valuation_date)

    # ------------------------------------------------------------------
    # Present value

    def present_value(
        self,
        bond: FixedCouponBond,
        provider: LegalEntityDiscountingProvider,
        reference_date: Optional[date] = None,
    ) -> float:
        """
        Present value of the nominal and of the coupons still attached.

        Coupons are included when their detachment date is after
        reference_date (the valuation date by default).
        """
        ref = reference_date or provider.valuation_date
        issuer_df = self._issuer_df(bond, provider)
        pv = self.nominal_pricer.present_value(bond.nominal_payment, issuer_df)
        for period in bond.periods:
            if period.detachment_date > ref:
                pv += self.period_pricer.present_value(period, issuer_df)
        return pv

    def present_value_with_z_spread(
        self,
        bond: FixedCouponBond,
        provider: LegalEntityDiscountingProvider,
        z_spread: float,
        compounding: CompoundingConvention,
        periods_per_year: int = 0,
        reference_date: Optional[date] = None,
    ) -> float:
        """Present value with a z-spread over the issuer curve."""
        ref = reference_date or provider.valuation_date
        issuer_df = self._issuer_df(bond, provider)
        pv = self.nominal_pricer.present_value_with_spread(
            bond.nominal_payment, issuer_df, z_spread, compounding, periods_per_year
        )
        for period in bond.periods:
            if period.detachment_date > ref:
                pv += self.period_pricer.present_value_with_spread(
                    period, issuer_df, z_spread, compounding, periods_per_year
                )
        return pv

    def present_value_coupons_between(
        self,
        bond: FixedCouponBond,
        provider: LegalEntityDiscountingProvider,
        start: date,
        end: date,
    ) -> float:
        """PV of coupons with start < detachment date <= end."""
        issuer_df = self._issuer_df(bond, provider)
        pv = 0.0
        for period in bond.periods:
            if start < period.detachment_date <= end:
                pv += self.period_pricer.present_value(period, issuer_df)
        return pv

    # ------------------------------------------------------------------
    # Prices from curves

    def dirty_price_from_curves(
        self,
        bond: FixedCouponBond,
        provider: LegalEntityDiscountingProvider,
        settlement: Optional[date] = None,
    ) -> float:
        """
        Dirty price: PV at settlement, forwarded on the repo curve, per notional.
        """
        settlement = self._settlement(bond, provider, settlement)
        pv = self.present_value(bond, provider, settlement)
        df = self._repo_df(bond, provider).discount_factor(settlement)
        return pv / df / bond.notional

    def dirty_price_from_curves_with_z_spread(
        self,
        bond: FixedCouponBond,
        provider: LegalEntityDiscountingProvider,
        z_spread: float,
        compounding: CompoundingConvention,
        periods_per_year: int = 0,
        settlement: Optional[date] = None,
    ) -> float:
        settlement = self._settlement(bond, provider, settlement)
        pv = self.present_value_with_z_spread(
            bond, provider, z_spread, compounding, periods_per_year, settlement
        )
        df = self._repo_df(bond, provider).discount_factor(settlement)
        return pv / df / bond.notional

    def dirty_price_from_clean_price(self, bond: FixedCouponBond, settlement: date, clean_price: float) -> float:
        return clean_price + self.accrued_interest(bond, settlement) / bond.notional

    def clean_price_from_dirty_price(self, bond: FixedCouponBond, settlement: date, dirty_price: float) -> float:
        return dirty_price - self.accrued_interest(bond, settlement) / bond.notional

    def z_spread_from_curves_and_dirty_price(
        self,
        bond: FixedCouponBond,
        provider: LegalEntityDiscountingProvider,
        dirty_price: float,
        compounding: CompoundingConvention,
        periods_per_year: int = 0,
        settlement: Optional[date] = None,
    ) -> float:
        """
        Z-spread reproducing dirty_price from the curves.

        Raises:
            RootFindingError: If no spread can be bracketed or solved
        """
        settlement = self._settlement(bond, provider, settlement)

        def residual(z: float) -> float:
            return self.dirty_price_from_curves_with_z_spread(
                bond, provider, z, compounding, periods_per_year, settlement
            ) - dirty_price

        lower, upper = self.root_finder.bracket(residual, *self.settings.z_spread_bracket)
        z_spread = self.root_finder.solve(residual, lower, upper)
        logger.debug("Z-spread of %s at dirty price %s: %s", bond.security_id, dirty_price, z_spread)
        return z_spread

    # ------------------------------------------------------------------
    # Curve sensitivities

    def present_value_sensitivity(
        self,
        bond: FixedCouponBond,
        provider: LegalEntityDiscountingProvider,
        reference_date: Optional[date] = None,
    ) -> PointSensitivities:
        """Point sensitivities of present_value to the issuer curve."""
        ref = reference_date or provider.valuation_date
        issuer_df = self._issuer_df(bond, provider)
        sensitivities = self.nominal_pricer.present_value_sensitivity(bond.nominal_payment, issuer_df)
        for period in bond.periods:
            if period.detachment_date > ref:
                sensitivities = sensitivities.combined_with(
                    self.period_pricer.present_value_sensitivity(period, issuer_df)
                )
        return sensitivities

    def present_value_sensitivity_with_z_spread(
        self,
        bond: FixedCouponBond,
        provider: LegalEntityDiscountingProvider,
        z_spread: float,
        compounding: CompoundingConvention,
        periods_per_year: int = 0,
        reference_date: Optional[date] = None,
    ) -> PointSensitivities:
        ref = reference_date or provider.valuation_date
        issuer_df = self._issuer_df(bond, provider)
        sensitivities = self.nominal_pricer.present_value_sensitivity_with_spread(
            bond.nominal_payment, issuer_df, z_spread, compounding, periods_per_year
        )
        for period in bond.periods:
            if period.detachment_date > ref:
                sensitivities = sensitivities.combined_with(
                    self.period_pricer.present_value_sensitivity_with_spread(
                        period, issuer_df, z_spread, compounding, periods_per_year
                    )
                )
        return sensitivities

    def dirty_price_sensitivity(
        self,
        bond: FixedCouponBond,
        provider: LegalEntityDiscountingProvider,
        settlement: Optional[date] = None,
    ) -> PointSensitivities:
        """Point sensitivities of dirty_price_from_curves to issuer and repo curves."""
        settlement = self._settlement(bond, provider, settlement)
        repo_df = self._repo_df(bond, provider)
        df = repo_df.discount_factor(settlement)
        pv = self.present_value(bond, provider, settlement)
        # Backward sweep
        pv_bar = 1.0 / df / bond.notional
        df_bar = -pv / df ** 2 / bond.notional
        pv_sens = self.present_value_sensitivity(bond, provider, settlement)
        df_sens = PointSensitivities.of(repo_df.zero_rate_point_sensitivity(settlement))
        return pv_sens.multiplied_by(pv_bar).combined_with(df_sens.multiplied_by(df_bar))

    def dirty_price_sensitivity_with_z_spread(
        self,
        bond: FixedCouponBond,
        provider: LegalEntityDiscountingProvider,
        z_spread: float,
        compounding: CompoundingConvention,
        periods_per_year: int = 0,
        settlement: Optional[date] = None,
    ) -> PointSensitivities:
        settlement = self._settlement(bond, provider, settlement)
        repo_df = self._repo_df(bond, provider)
        df = repo_df.discount_factor(settlement)
        pv = self.present_value_with_z_spread(
            bond, provider, z_spread, compounding, periods_per_year, settlement
        )
        pv_sens = self.present_value_sensitivity_with_z_spread(
            bond, provider, z_spread, compounding, periods_per_year, settlement
        )
        df_sens = PointSensitivities.of(repo_df.zero_rate_point_sensitivity(settlement))
        return pv_sens.multiplied_by(1.0 / df / bond.notional).combined_with(
            df_sens.multiplied_by(-pv / df ** 2 / bond.notional)
        )

    def present_value_parameter_sensitivity(
        self,
        bond: FixedCouponBond,
        provider: LegalEntityDiscountingProvider,
    ) -> CurveParameterSensitivities:
        """Sensitivity of present_value to every node of the issuer curve."""
        return provider.parameter_sensitivity(self.present_value_sensitivity(bond, provider))

    def dirty_price_parameter_sensitivity(
        self,
        bond: FixedCouponBond,
        provider: LegalEntityDiscountingProvider,
        settlement: Optional[date] = None,
    ) -> CurveParameterSensitivities:
        """Sensitivity of dirty_price_from_curves to every node of the issuer and repo curves."""
        return provider.parameter_sensitivity(self.dirty_price_sensitivity(bond, provider, settlement))

    # ------------------------------------------------------------------
    # Accrual

    def accrued_interest(self, bond: FixedCouponBond, settlement: date) -> float:
        return accrual.accrued_interest(bond, settlement)

    def accrued_year_fraction(self, bond: FixedCouponBond, settlement: date) -> float:
        return accrual.accrued_year_fraction(bond, settlement)

    def factor_to_next_coupon(self, bond: FixedCouponBond, settlement: date) -> float:
        return accrual.factor_to_next_coupon(bond, settlement)

    # ------------------------------------------------------------------
    # Yield

    def dirty_price_from_yield(self, bond: FixedCouponBond, settlement: date, yield_: float) -> float:
        return yield_formula(bond.yield_convention).dirty_price_from_yield(bond, settlement, yield_)

    def dirty_price_from_yield_ad(self, bond: FixedCouponBond, settlement: date, yield_: float) -> ValueDerivatives:
        """Dirty price and its derivative with respect to the yield."""
        return yield_formula(bond.yield_convention).dirty_price_from_yield_ad(bond, settlement, yield_)

    def yield_from_dirty_price(self, bond: FixedCouponBond, settlement: date, dirty_price: float) -> float:
        """
        Yield reproducing dirty_price under the bond's yield convention.

        Raises:
            RootFindingError: If the yield has no closed form and root
                finding fails
        """
        formula = yield_formula(bond.yield_convention)
        closed = formula.closed_form_yield(bond, settlement, dirty_price)
        if closed is not None:
            return closed.value
        return self._find_yield(bond, settlement, dirty_price)

    def yield_from_dirty_price_ad(
        self, bond: FixedCouponBond, settlement: date, dirty_price: float
    ) -> ValueDerivatives:
        """Yield and its derivative with respect to the dirty price."""
        formula = yield_formula(bond.yield_convention)
        closed = formula.closed_form_yield(bond, settlement, dirty_price)
        if closed is not None:
            return closed
        yield_ = self._find_yield(bond, settlement, dirty_price)
        price_ad = formula.dirty_price_from_yield_ad(bond, settlement, yield_)
        return ValueDerivatives.of(yield_, 1.0 / price_ad.derivative(0))

    def _find_yield(self, bond: FixedCouponBond, settlement: date, dirty_price: float) -> float:
        formula = yield_formula(bond.yield_convention)
        finder = self.root_finder

        if finder.supports_derivative:
            def residual_ad(y: float) -> ValueDerivatives:
                price = formula.dirty_price_from_yield_ad(bond, settlement, y)
                return ValueDerivatives(price.value - dirty_price, price.derivatives)

            yield_ = finder.solve_with_derivative(residual_ad, bond.fixed_rate)
        else:
            def residual(y: float) -> float:
                return formula.dirty_price_from_yield(bond, settlement, y) - dirty_price

            lower, upper = finder.bracket(residual, *self.settings.yield_bracket)
            yield_ = finder.solve(residual, lower, upper)

        logger.debug("Yield of %s at dirty price %s: %s", bond.security_id, dirty_price, yield_)
        return yield_

    # ------------------------------------------------------------------
    # Yield risk

    def modified_duration_from_yield(
        self,
        bond: FixedCouponBond,
        settlement: date,
        yield_: float,
        period_counter: Optional[FixedCouponBond] = None,
    ) -> float:
        """
        Modified duration at a yield.

        Args:
            bond: Bond providing the cash flows
            settlement: Settlement date
            yield_: Yield under the bond's convention
            period_counter: Bond used to count time to the next coupon,
                the bond itself by default
        """
        return yield_formula(bond.yield_convention).modified_duration_from_yield(
            bond, settlement, yield_, period_counter
        )

    def modified_duration_from_yield_ad(
        self, bond: FixedCouponBond, settlement: date, yield_: float
    ) -> ValueDerivatives:
        return yield_formula(bond.yield_convention).modified_duration_from_yield_ad(bond, settlement, yield_)

    def macaulay_duration_from_yield(
        self,
        bond: FixedCouponBond,
        settlement: date,
        yield_: float,
        period_counter: Optional[FixedCouponBond] = None,
    ) -> float:
        """
        Macaulay duration at a yield.

        Raises:
            UnsupportedConventionError: For JP_SIMPLE bonds
        """
        return yield_formula(bond.yield_convention).macaulay_duration_from_yield(
            bond, settlement, yield_, period_counter
        )

    def convexity_from_yield(self, bond: FixedCouponBond, settlement: date, yield_: float) -> float:
        return yield_formula(bond.yield_convention).convexity_from_yield(bond, settlement, yield_)

    def __repr__(self) -> str:
        return f"FixedCouponBondPricer(root_finder={self.root_finder!r})"


__all__ = ["FixedCouponBondPricer"]
