"""
Date utilities for bond schedules.

Provides:
- Month arithmetic
- Business day offsets (settlement and ex-coupon lags)
- Unadjusted coupon schedule generation (short initial stub)
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import List, Optional, Tuple
import calendar

from .conventions import (
    BusinessDayConvention,
    adjust_business_day,
    is_business_day,
)


class DateUtils:
    """Utility class for date manipulation in bond contexts."""

    @staticmethod
    def add_months(start: date, months: int) -> date:
        """Add (or subtract) calendar months, clipping to month end."""
        year = start.year + (start.month + months - 1) // 12
        month = (start.month + months - 1) % 12 + 1
        day = min(start.day, calendar.monthrange(year, month)[1])
        return date(year, month, day)

    @staticmethod
    def add_business_days(start: date, days: int, holidays: Optional[set] = None) -> date:
        """
        Move a date by a signed number of business days.

        A zero offset rolls a non-business day forward to the next business day.
        """
        result = start
        if days == 0:
            return adjust_business_day(result, BusinessDayConvention.FOLLOWING, holidays)
        step = timedelta(days=1 if days > 0 else -1)
        moved = 0
        while moved < abs(days):
            result += step
            if is_business_day(result, holidays):
                moved += 1
        return result

    @staticmethod
    def generate_unadjusted_schedule(start: date, end: date, frequency: int) -> List[date]:
        """
        Generate unadjusted accrual dates from start to end inclusive.

        Dates are rolled backward from the end date so that any irregular
        period is a short initial stub.

        Args:
            start: First accrual start date
            end: Maturity (last accrual end date)
            frequency: Coupons per year (1, 2, 4 or 12)

        Returns:
            Sorted list of dates, first is start, last is end
        """
        if frequency <= 0 or 12 % frequency != 0:
            raise ValueError(f"Unsupported coupon frequency: {frequency}")
        if end <= start:
            raise ValueError("Schedule end must be after start")

        months_per_period = 12 // frequency
        dates = [end]
        k = 1
        while True:
            prev_date = DateUtils.add_months(end, -k * months_per_period)
            if prev_date <= start:
                break
            dates.insert(0, prev_date)
            k += 1
        dates.insert(0, start)
        return dates


@dataclass(frozen=True)
class ScheduleInfo:
    """Unadjusted and adjusted accrual dates of a coupon schedule."""
    unadjusted_dates: List[date]
    adjusted_dates: List[date]
    frequency: int

    @property
    def num_periods(self) -> int:
        return len(self.unadjusted_dates) - 1

    def period(self, i: int) -> Tuple[date, date]:
        """Unadjusted (start, end) of period i."""
        return self.unadjusted_dates[i], self.unadjusted_dates[i + 1]


def generate_bond_schedule(
    start: date,
    maturity: date,
    frequency: int,
    business_day: BusinessDayConvention = BusinessDayConvention.FOLLOWING,
    holidays: Optional[set] = None
) -> ScheduleInfo:
    """
    Generate a bond coupon schedule.

    Every accrual date, including the start and maturity dates, is adjusted
    with the same business day convention. Unadjusted dates are kept for
    accrual and year fraction calculations.
    """
    unadjusted = DateUtils.generate_unadjusted_schedule(start, maturity, frequency)
    adjusted = [adjust_business_day(d, business_day, holidays) for d in unadjusted]
    return ScheduleInfo(unadjusted_dates=unadjusted, adjusted_dates=adjusted, frequency=frequency)


__all__ = [
    "DateUtils",
    "ScheduleInfo",
    "generate_bond_schedule",
]
