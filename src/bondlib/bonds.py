"""
Resolved fixed-coupon bond model.

Provides:
- CouponPeriod: one accrual period with payment and detachment dates
- NominalPayment: redemption payment at maturity
- FixedCouponBond: immutable bond, validated at construction, with a
  schedule-based factory

Dates:
- Accrual dates are kept both unadjusted (for year fractions) and adjusted
- The detachment (ex-coupon) date equals the payment date when the bond
  has no ex-coupon convention
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional, Tuple

from .conventions import (
    BondConventions,
    BusinessDayConvention,
    DayCount,
    YieldConvention,
    adjust_business_day,
    year_fraction,
)
from .dates import DateUtils, generate_bond_schedule


@dataclass(frozen=True)
class CouponPeriod:
    """A single fixed coupon period."""
    start_date: date
    end_date: date
    unadjusted_start_date: date
    unadjusted_end_date: date
    payment_date: date
    detachment_date: date
    notional: float
    fixed_rate: float
    year_fraction: float

    @property
    def has_ex_coupon_period(self) -> bool:
        return self.detachment_date != self.payment_date

    @property
    def fixed_amount(self) -> float:
        """Coupon amount paid on the payment date."""
        return self.notional * self.fixed_rate * self.year_fraction

    def contains(self, d: date) -> bool:
        """True if unadjusted_start_date <= d < unadjusted_end_date."""
        return self.unadjusted_start_date <= d < self.unadjusted_end_date


@dataclass(frozen=True)
class NominalPayment:
    """Redemption payment of a bond."""
    payment_date: date
    amount: float
    currency: str = "USD"


@dataclass(frozen=True)
class FixedCouponBond:
    """
    Resolved fixed-coupon bond.

    Attributes:
        periods: Coupon periods in date order
        nominal_payment: Redemption payment, paid with the last coupon
        fixed_rate: Annual coupon rate (decimal)
        notional: Face amount
        frequency: Coupons per year
        day_count: Accrual day count
        yield_convention: Yield quotation convention
        settlement_days: Business days from valuation to settlement
        currency: ISO currency code
        security_id: Identifier used for repo curve lookup
        legal_entity_id: Issuer identifier used for issuer curve lookup
        redemption_ratio: Redemption amount per unit of notional
    """
    periods: Tuple[CouponPeriod, ...]
    nominal_payment: NominalPayment
    fixed_rate: float
    notional: float
    frequency: int
    day_count: DayCount
    yield_convention: YieldConvention
    settlement_days: int = 1
    currency: str = "USD"
    security_id: str = "BOND"
    legal_entity_id: str = "ISSUER"
    redemption_ratio: float = 1.0

    def __post_init__(self):
        object.__setattr__(self, "periods", tuple(self.periods))
        if not self.periods:
            raise ValueError("A bond needs at least one coupon period")
        if self.frequency <= 0:
            raise ValueError(f"Frequency must be positive, got {self.frequency}")
        if self.notional == 0:
            raise ValueError("Notional must be non-zero")
        for prev, period in zip(self.periods, self.periods[1:]):
            if period.unadjusted_start_date != prev.unadjusted_end_date:
                raise ValueError(
                    f"Coupon periods are not contiguous: {prev.unadjusted_end_date} != "
                    f"{period.unadjusted_start_date}"
                )
        for period in self.periods:
            if period.unadjusted_end_date <= period.unadjusted_start_date:
                raise ValueError(f"Coupon period ends before it starts: {period}")
        if self.nominal_payment.payment_date != self.periods[-1].payment_date:
            raise ValueError("Nominal payment date must equal the last coupon payment date")

    @property
    def unadjusted_start_date(self) -> date:
        return self.periods[0].unadjusted_start_date

    @property
    def unadjusted_end_date(self) -> date:
        return self.periods[-1].unadjusted_end_date

    @property
    def start_date(self) -> date:
        return self.periods[0].start_date

    @property
    def maturity_date(self) -> date:
        return self.periods[-1].end_date

    def find_period(self, d: date) -> Optional[CouponPeriod]:
        """The period with unadjusted_start_date <= d < unadjusted_end_date, or None."""
        for period in self.periods:
            if period.contains(d):
                return period
        return None

    def year_fraction(self, start: date, end: date) -> float:
        """
        Year fraction in the bond's day count.

        ACT/ACT ICMA measures each segment against the reference coupon
        period ending at the containing period's unadjusted end date.
        """
        if not self.day_count.needs_reference_period:
            return year_fraction(start, end, self.day_count)
        total = 0.0
        cursor = start
        while cursor < end:
            period = self.find_period(cursor)
            if period is None:
                raise ValueError(f"Date outside the schedule of the bond: {cursor}")
            segment_end = min(end, period.unadjusted_end_date)
            ref_start, ref_end = _reference_period(period.unadjusted_end_date, self.frequency)
            total += year_fraction(cursor, segment_end, self.day_count, ref_start, ref_end, self.frequency)
            cursor = segment_end
        return total

    def relative_year_fraction(self, start: date, end: date) -> float:
        """Signed year fraction in the bond's day count."""
        if end < start:
            return -self.year_fraction(end, start)
        return self.year_fraction(start, end)

    @classmethod
    def from_schedule(
        cls,
        start: date,
        end: date,
        frequency: int,
        fixed_rate: float,
        day_count: DayCount,
        yield_convention: YieldConvention,
        notional: float = 1.0,
        business_day: BusinessDayConvention = BusinessDayConvention.FOLLOWING,
        holidays: Optional[set] = None,
        settlement_days: int = 1,
        ex_coupon_days: int = 0,
        ex_coupon_business_days: bool = False,
        ex_coupon_adjustment: BusinessDayConvention = BusinessDayConvention.PRECEDING,
        currency: str = "USD",
        security_id: str = "BOND",
        legal_entity_id: str = "ISSUER",
        redemption_ratio: float = 1.0,
    ) -> "FixedCouponBond":
        """
        Build a bond from its schedule terms.

        The unadjusted schedule is rolled backward from the end date. Accrual
        and payment dates are adjusted with business_day on a weekend calendar
        plus holidays. The ex-coupon offset is counted in business days, or
        in calendar days followed by ex_coupon_adjustment.

        Args:
            start: First accrual start date
            end: Maturity date (unadjusted)
            frequency: Coupons per year
            fixed_rate: Annual coupon rate (decimal)
            day_count: Accrual day count
            yield_convention: Yield quotation convention
            notional: Face amount
            ex_coupon_days: Offset of the detachment date from the payment
                date, zero or negative
        """
        if ex_coupon_days > 0:
            raise ValueError(f"Ex-coupon offset must not be positive, got {ex_coupon_days}")
        schedule = generate_bond_schedule(start, end, frequency, business_day, holidays)

        periods = []
        for i in range(schedule.num_periods):
            unadj_start, unadj_end = schedule.period(i)
            adj_start, adj_end = schedule.adjusted_dates[i], schedule.adjusted_dates[i + 1]
            payment = adj_end
            if ex_coupon_days == 0:
                detachment = payment
            elif ex_coupon_business_days:
                detachment = DateUtils.add_business_days(payment, ex_coupon_days, holidays)
            else:
                detachment = adjust_business_day(
                    payment + timedelta(days=ex_coupon_days), ex_coupon_adjustment, holidays
                )
            if day_count.needs_reference_period:
                ref_start, ref_end = _reference_period(unadj_end, frequency)
                yf = year_fraction(unadj_start, unadj_end, day_count, ref_start, ref_end, frequency)
            else:
                yf = year_fraction(unadj_start, unadj_end, day_count)
            periods.append(CouponPeriod(
                start_date=adj_start,
                end_date=adj_end,
                unadjusted_start_date=unadj_start,
                unadjusted_end_date=unadj_end,
                payment_date=payment,
                detachment_date=detachment,
                notional=notional,
                fixed_rate=fixed_rate,
                year_fraction=yf,
            ))

        nominal = NominalPayment(periods[-1].payment_date, notional * redemption_ratio, currency)
        return cls(
            periods=tuple(periods),
            nominal_payment=nominal,
            fixed_rate=fixed_rate,
            notional=notional,
            frequency=frequency,
            day_count=day_count,
            yield_convention=yield_convention,
            settlement_days=settlement_days,
            currency=currency,
            security_id=security_id,
            legal_entity_id=legal_entity_id,
            redemption_ratio=redemption_ratio,
        )

    @classmethod
    def from_conventions(
        cls,
        start: date,
        end: date,
        fixed_rate: float,
        conventions: BondConventions,
        notional: float = 1.0,
        holidays: Optional[set] = None,
        security_id: str = "BOND",
        legal_entity_id: str = "ISSUER",
    ) -> "FixedCouponBond":
        """Build a bond from a BondConventions preset."""
        return cls.from_schedule(
            start,
            end,
            conventions.frequency,
            fixed_rate,
            conventions.day_count,
            conventions.yield_convention,
            notional=notional,
            business_day=conventions.business_day,
            holidays=holidays,
            settlement_days=conventions.settlement_days,
            ex_coupon_days=conventions.ex_coupon_days,
            ex_coupon_business_days=conventions.ex_coupon_business_days,
            ex_coupon_adjustment=conventions.ex_coupon_adjustment,
            currency=conventions.currency,
            security_id=security_id,
            legal_entity_id=legal_entity_id,
        )

    def __repr__(self) -> str:
        return (f"FixedCouponBond({self.security_id}, {self.fixed_rate:.4%}, "
                f"{self.unadjusted_start_date} to {self.unadjusted_end_date}, "
                f"{self.yield_convention.name})")


def _reference_period(period_end: date, frequency: int) -> Tuple[date, date]:
    """Regular coupon period ending on period_end."""
    return DateUtils.add_months(period_end, -(12 // frequency)), period_end


__all__ = [
    "CouponPeriod",
    "NominalPayment",
    "FixedCouponBond",
]
