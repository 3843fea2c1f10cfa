"""
Pricers package - fixed-coupon bond pricing.

Provides:
- FixedCouponBondPricer: price, yield, z-spread and sensitivities
- DiscountingPaymentPricer / DiscountingCouponPeriodPricer: single cash flows
- Yield convention formulas and accrual helpers
"""

from .accrual import (
    accrued_interest,
    accrued_year_fraction,
    coupon_index,
    factor_to_next_coupon,
    remaining_coupon_count,
)
from .bonds import FixedCouponBondPricer
from .payments import DiscountingCouponPeriodPricer, DiscountingPaymentPricer
from .yield_conventions import YieldFormula, YieldGrid, yield_formula

__all__ = [
    "FixedCouponBondPricer",
    "DiscountingPaymentPricer",
    "DiscountingCouponPeriodPricer",
    "YieldFormula",
    "YieldGrid",
    "yield_formula",
    "accrued_interest",
    "accrued_year_fraction",
    "coupon_index",
    "factor_to_next_coupon",
    "remaining_coupon_count",
]
