"""
Accrual calculations for fixed-coupon bonds.

Provides:
- accrued_year_fraction / accrued_interest: accrual at settlement, negative
  inside an ex-coupon window
- coupon_index / remaining_coupon_count: position of settlement in the schedule
- factor_to_next_coupon: fraction of a coupon period to the next coupon
- is_coupon_live: whether a coupon still belongs to the buyer at settlement
"""

from datetime import date
from typing import Sequence

from ..bonds import CouponPeriod, FixedCouponBond
from ..exceptions import SettlementDateError


def accrued_year_fraction(bond: FixedCouponBond, settlement: date) -> float:
    """
    Accrued year fraction at settlement.

    Zero before the bond starts accruing. Inside an ex-coupon window
    (settlement strictly after the detachment date) the full period year
    fraction is subtracted, so the result is negative.

    Raises:
        SettlementDateError: If settlement is on or after the bond's end date
    """
    if bond.unadjusted_start_date > settlement:
        return 0.0
    period = bond.find_period(settlement)
    if period is None:
        raise SettlementDateError(settlement)
    accrued = bond.year_fraction(period.unadjusted_start_date, settlement)
    if settlement > period.detachment_date:
        return accrued - period.year_fraction
    return accrued


def accrued_interest(bond: FixedCouponBond, settlement: date) -> float:
    """Accrued interest in currency units."""
    return accrued_year_fraction(bond, settlement) * bond.fixed_rate * bond.notional


def coupon_index(periods: Sequence[CouponPeriod], d: date) -> int:
    """Index of the first period whose adjusted end date is after d, 0 if none."""
    for i, period in enumerate(periods):
        if period.end_date > d:
            return i
    return 0


def remaining_coupon_count(bond: FixedCouponBond, settlement: date) -> int:
    return len(bond.periods) - coupon_index(bond.periods, settlement)


def factor_to_next_coupon(bond: FixedCouponBond, settlement: date) -> float:
    """
    Remaining part of the current coupon period, in units of periods.

    Zero when settlement is before the first accrual start date.
    """
    if bond.periods[0].start_date > settlement:
        return 0.0
    index = coupon_index(bond.periods, settlement)
    period_year_fraction = bond.periods[index].year_fraction
    return (period_year_fraction - accrued_year_fraction(bond, settlement)) * bond.frequency


def is_coupon_live(period: CouponPeriod, settlement: date) -> bool:
    """
    True if the coupon of period is paid to a buyer settling on settlement.

    With an ex-coupon period the coupon is live up to and including the
    detachment date; otherwise while the payment date is after settlement.
    """
    if period.has_ex_coupon_period:
        return settlement <= period.detachment_date
    return period.payment_date > settlement


__all__ = [
    "accrued_year_fraction",
    "accrued_interest",
    "coupon_index",
    "remaining_coupon_count",
    "factor_to_next_coupon",
    "is_coupon_live",
]
