"""
Day count, business day and yield conventions for fixed-coupon bonds.

Supported Day Counts:
- ACT/360: Actual days / 360
- ACT/365F: Actual days / 365
- ACT/ACT ISDA: Actual days / actual days in each calendar year
- ACT/ACT ICMA: Actual days / (frequency * days in the reference coupon period)
- NL/365: Actual days excluding 29 February / 365 (JGB)
- 30/360: 30 days per month / 360

Business Day Conventions:
- Modified Following: Move to next business day, unless it falls in next month (then previous)
- Following: Move to next business day
- Preceding: Move to previous business day

Yield Conventions:
- US_STREET: US Treasury street convention, simple discounting in the final period
- GB_BUMP_DMO: UK gilt DMO convention, compounded to the final payment
- DE_BONDS: German Bund convention, simple discounting in the final period
- JP_SIMPLE: Japanese simple yield on the clean price
"""

from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Optional
import calendar


class DayCount(Enum):
    """Day count convention enumeration."""
    ACT_360 = "ACT/360"
    ACT_365 = "ACT/365F"
    ACT_ACT = "ACT/ACT ISDA"
    ACT_ACT_ICMA = "ACT/ACT ICMA"
    NL_365 = "NL/365"
    THIRTY_360 = "30/360"

    @classmethod
    def from_string(cls, s: str) -> "DayCount":
        """Parse day count from string representation."""
        mapping = {
            "ACT/360": cls.ACT_360,
            "ACT360": cls.ACT_360,
            "ACT/365": cls.ACT_365,
            "ACT/365F": cls.ACT_365,
            "ACT365F": cls.ACT_365,
            "ACT/ACT": cls.ACT_ACT,
            "ACT/ACTISDA": cls.ACT_ACT,
            "ACT/ACTICMA": cls.ACT_ACT_ICMA,
            "NL/365": cls.NL_365,
            "NL365": cls.NL_365,
            "30/360": cls.THIRTY_360,
            "30360": cls.THIRTY_360,
        }
        key = s.upper().replace(" ", "")
        if key in mapping:
            return mapping[key]
        raise ValueError(f"Unknown day count convention: {s}")

    @property
    def needs_reference_period(self) -> bool:
        """True if the year fraction depends on the coupon period."""
        return self is DayCount.ACT_ACT_ICMA


class BusinessDayConvention(Enum):
    """Business day adjustment convention."""
    MODIFIED_FOLLOWING = "ModifiedFollowing"
    FOLLOWING = "Following"
    PRECEDING = "Preceding"
    UNADJUSTED = "Unadjusted"


class CompoundingConvention(Enum):
    """Compounding applied to a z-spread over the zero rate."""
    CONTINUOUS = "Continuous"
    PERIODIC = "Periodic"


class YieldConvention(Enum):
    """
    Yield quotation convention of a fixed-coupon bond.

    Each member selects one discounting geometry in
    ``bondlib.pricers.yield_conventions``.
    """
    US_STREET = "US-Street"
    GB_BUMP_DMO = "GB-Bump-DMO"
    DE_BONDS = "DE-Bonds"
    JP_SIMPLE = "JP-Simple"

    @classmethod
    def from_string(cls, s: str) -> "YieldConvention":
        """Parse yield convention from name or value."""
        key = s.upper().replace("-", "_").replace(" ", "_")
        for member in cls:
            if member.name == key or member.value.upper().replace("-", "_") == key:
                return member
        raise ValueError(f"Unknown yield convention: {s}")


@dataclass(frozen=True)
class BondConventions:
    """
    Container for market conventions of a government bond.

    Attributes:
        day_count: Day count convention for accrual
        business_day: Business day adjustment for accrual and payment dates
        frequency: Coupons per year
        yield_convention: Yield quotation convention
        settlement_days: Business days from trade to settlement
        ex_coupon_days: Ex-coupon offset from the payment date (negative or zero)
        ex_coupon_business_days: Whether ex_coupon_days counts business days
        ex_coupon_adjustment: Adjustment applied to calendar-day ex-coupon dates
        currency: ISO currency code
    """
    day_count: DayCount = DayCount.ACT_ACT_ICMA
    business_day: BusinessDayConvention = BusinessDayConvention.FOLLOWING
    frequency: int = 2
    yield_convention: YieldConvention = YieldConvention.US_STREET
    settlement_days: int = 1
    ex_coupon_days: int = 0
    ex_coupon_business_days: bool = False
    ex_coupon_adjustment: BusinessDayConvention = BusinessDayConvention.PRECEDING
    currency: str = "USD"

    @classmethod
    def us_treasury(cls) -> "BondConventions":
        """US Treasury notes and bonds."""
        return cls(
            day_count=DayCount.ACT_ACT_ICMA,
            business_day=BusinessDayConvention.FOLLOWING,
            frequency=2,
            yield_convention=YieldConvention.US_STREET,
            settlement_days=1,
            currency="USD",
        )

    @classmethod
    def uk_gilt(cls) -> "BondConventions":
        """UK gilts, seven calendar days ex-dividend."""
        return cls(
            day_count=DayCount.ACT_ACT_ICMA,
            business_day=BusinessDayConvention.FOLLOWING,
            frequency=2,
            yield_convention=YieldConvention.GB_BUMP_DMO,
            settlement_days=1,
            ex_coupon_days=-7,
            ex_coupon_business_days=False,
            ex_coupon_adjustment=BusinessDayConvention.PRECEDING,
            currency="GBP",
        )

    @classmethod
    def de_bund(cls) -> "BondConventions":
        """German Bunds, annual coupons."""
        return cls(
            day_count=DayCount.ACT_ACT_ICMA,
            business_day=BusinessDayConvention.FOLLOWING,
            frequency=1,
            yield_convention=YieldConvention.DE_BONDS,
            settlement_days=3,
            currency="EUR",
        )

    @classmethod
    def jp_jgb(cls) -> "BondConventions":
        """Japanese government bonds, simple yield."""
        return cls(
            day_count=DayCount.NL_365,
            business_day=BusinessDayConvention.FOLLOWING,
            frequency=2,
            yield_convention=YieldConvention.JP_SIMPLE,
            settlement_days=3,
            currency="JPY",
        )


def _days_in_year(year: int) -> int:
    return 366 if calendar.isleap(year) else 365


def _count_leap_days(start: date, end: date) -> int:
    """Number of 29 February dates in (start, end]."""
    count = 0
    for year in range(start.year, end.year + 1):
        if calendar.isleap(year):
            feb29 = date(year, 2, 29)
            if start < feb29 <= end:
                count += 1
    return count


def year_fraction(
    start: date,
    end: date,
    day_count: DayCount,
    reference_start: Optional[date] = None,
    reference_end: Optional[date] = None,
    frequency: Optional[int] = None,
) -> float:
    """
    Calculate year fraction between two dates using specified day count convention.

    Args:
        start: Start date
        end: End date
        day_count: Day count convention
        reference_start: Start of the reference coupon period (ACT/ACT ICMA only)
        reference_end: End of the reference coupon period (ACT/ACT ICMA only)
        frequency: Coupons per year (ACT/ACT ICMA only)

    Returns:
        Year fraction as float, 0 when end is not after start
    """
    if start >= end:
        return 0.0

    actual_days = (end - start).days

    if day_count == DayCount.ACT_360:
        return actual_days / 360.0

    elif day_count == DayCount.ACT_365:
        return actual_days / 365.0

    elif day_count == DayCount.NL_365:
        return (actual_days - _count_leap_days(start, end)) / 365.0

    elif day_count == DayCount.ACT_ACT:
        if start.year == end.year:
            return actual_days / _days_in_year(start.year)
        total = (date(start.year + 1, 1, 1) - start).days / _days_in_year(start.year)
        total += end.year - start.year - 1
        total += (end - date(end.year, 1, 1)).days / _days_in_year(end.year)
        return total

    elif day_count == DayCount.ACT_ACT_ICMA:
        if reference_start is None or reference_end is None or not frequency:
            raise ValueError("ACT/ACT ICMA requires a reference period and frequency")
        reference_days = (reference_end - reference_start).days
        if reference_days <= 0:
            raise ValueError(f"Invalid reference period: {reference_start} to {reference_end}")
        return actual_days / (frequency * reference_days)

    elif day_count == DayCount.THIRTY_360:
        d1 = min(start.day, 30)
        d2 = end.day
        if end.day == 31 and d1 == 30:
            d2 = 30
        return (360 * (end.year - start.year) + 30 * (end.month - start.month) + (d2 - d1)) / 360.0

    else:
        raise ValueError(f"Unknown day count: {day_count}")


def relative_year_fraction(start: date, end: date, day_count: DayCount) -> float:
    """
    Signed year fraction: negative when end is before start.

    Only defined for day counts that need no reference period.
    """
    if end < start:
        return -year_fraction(end, start, day_count)
    return year_fraction(start, end, day_count)


def is_business_day(d: date, holidays: Optional[set] = None) -> bool:
    """
    Check if a date is a business day.

    Uses weekend-only calendar by default (Saturday/Sunday are non-business days).
    """
    if d.weekday() >= 5:
        return False
    if holidays and d in holidays:
        return False
    return True


def adjust_business_day(
    d: date,
    convention: BusinessDayConvention,
    holidays: Optional[set] = None
) -> date:
    """
    Adjust a date according to business day convention.

    Args:
        d: Date to adjust
        convention: Business day adjustment rule
        holidays: Optional set of holiday dates

    Returns:
        Adjusted date
    """
    if convention == BusinessDayConvention.UNADJUSTED or is_business_day(d, holidays):
        return d

    if convention == BusinessDayConvention.FOLLOWING:
        adjusted = d
        while not is_business_day(adjusted, holidays):
            adjusted += timedelta(days=1)
        return adjusted

    elif convention == BusinessDayConvention.PRECEDING:
        adjusted = d
        while not is_business_day(adjusted, holidays):
            adjusted -= timedelta(days=1)
        return adjusted

    elif convention == BusinessDayConvention.MODIFIED_FOLLOWING:
        adjusted = d
        while not is_business_day(adjusted, holidays):
            adjusted += timedelta(days=1)

        # If we crossed into next month, go preceding instead
        if adjusted.month != d.month:
            adjusted = d
            while not is_business_day(adjusted, holidays):
                adjusted -= timedelta(days=1)
        return adjusted

    return d


__all__ = [
    "DayCount",
    "BusinessDayConvention",
    "CompoundingConvention",
    "YieldConvention",
    "BondConventions",
    "year_fraction",
    "relative_year_fraction",
    "is_business_day",
    "adjust_business_day",
]
