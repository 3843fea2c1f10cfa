"""
Discounting of single payments and coupon periods.

Payments dated before the valuation date have zero value and no
sensitivity. Spread variants thread a z-spread through the discount factor.
"""

from ..bonds import CouponPeriod, NominalPayment
from ..conventions import CompoundingConvention
from ..market_state import DiscountFactors
from ..sensitivity.points import PointSensitivities


class DiscountingPaymentPricer:
    """Prices a NominalPayment by discounting."""

    def present_value(self, payment: NominalPayment, discount_factors: DiscountFactors) -> float:
        if payment.payment_date < discount_factors.valuation_date:
            return 0.0
        return payment.amount * discount_factors.discount_factor(payment.payment_date)

    def present_value_with_spread(
        self,
        payment: NominalPayment,
        discount_factors: DiscountFactors,
        z_spread: float,
        compounding: CompoundingConvention,
        periods_per_year: int = 0,
    ) -> float:
        if payment.payment_date < discount_factors.valuation_date:
            return 0.0
        df = discount_factors.discount_factor_with_spread(
            payment.payment_date, z_spread, compounding, periods_per_year
        )
        return payment.amount * df

    def present_value_sensitivity(
        self, payment: NominalPayment, discount_factors: DiscountFactors
    ) -> PointSensitivities:
        if payment.payment_date < discount_factors.valuation_date:
            return PointSensitivities.none()
        point = discount_factors.zero_rate_point_sensitivity(payment.payment_date)
        return PointSensitivities.of(point.multiplied_by(payment.amount))

    def present_value_sensitivity_with_spread(
        self,
        payment: NominalPayment,
        discount_factors: DiscountFactors,
        z_spread: float,
        compounding: CompoundingConvention,
        periods_per_year: int = 0,
    ) -> PointSensitivities:
        if payment.payment_date < discount_factors.valuation_date:
            return PointSensitivities.none()
        point = discount_factors.zero_rate_point_sensitivity_with_spread(
            payment.payment_date, z_spread, compounding, periods_per_year
        )
        return PointSensitivities.of(point.multiplied_by(payment.amount))


class DiscountingCouponPeriodPricer:
    """Prices the fixed coupon of a CouponPeriod by discounting."""

    def present_value(self, period: CouponPeriod, discount_factors: DiscountFactors) -> float:
        if period.payment_date < discount_factors.valuation_date:
            return 0.0
        return period.fixed_amount * discount_factors.discount_factor(period.payment_date)

    def present_value_with_spread(
        self,
        period: CouponPeriod,
        discount_factors: DiscountFactors,
        z_spread: float,
        compounding: CompoundingConvention,
        periods_per_year: int = 0,
    ) -> float:
        if period.payment_date < discount_factors.valuation_date:
            return 0.0
        df = discount_factors.discount_factor_with_spread(
            period.payment_date, z_spread, compounding, periods_per_year
        )
        return period.fixed_amount * df

    def present_value_sensitivity(
        self, period: CouponPeriod, discount_factors: DiscountFactors
    ) -> PointSensitivities:
        if period.payment_date < discount_factors.valuation_date:
            return PointSensitivities.none()
        point = discount_factors.zero_rate_point_sensitivity(period.payment_date)
        return PointSensitivities.of(point.multiplied_by(period.fixed_amount))

    def present_value_sensitivity_with_spread(
        self,
        period: CouponPeriod,
        discount_factors: DiscountFactors,
        z_spread: float,
        compounding: CompoundingConvention,
        periods_per_year: int = 0,
    ) -> PointSensitivities:
        if period.payment_date < discount_factors.valuation_date:
            return PointSensitivities.none()
        point = discount_factors.zero_rate_point_sensitivity_with_spread(
            period.payment_date, z_spread, compounding, periods_per_year
        )
        return PointSensitivities.of(point.multiplied_by(period.fixed_amount))


__all__ = [
    "DiscountingPaymentPricer",
    "DiscountingCouponPeriodPricer",
]
