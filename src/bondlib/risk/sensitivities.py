"""
Risk measures for fixed-coupon bonds.

Computes the standard bond risk report from curves and an optional market price:
- Present value, dirty and clean price, accrued interest
- Yield, modified and Macaulay duration, convexity
- Z-spread to the market price
- PV01 by curve node (analytic point sensitivities)

Output format follows desk conventions for risk reporting.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Optional

import logging

import pandas as pd

from ..bonds import FixedCouponBond
from ..conventions import CompoundingConvention
from ..exceptions import UnsupportedConventionError
from ..market_state import LegalEntityDiscountingProvider
from ..pricers.bonds import FixedCouponBondPricer

logger = logging.getLogger(__name__)

ONE_BP = 1e-4


@dataclass
class BondRiskMeasures:
    """
    Risk metrics for a single bond.

    Attributes:
        security_id: Bond identifier
        valuation_date: Market data date
        settlement_date: Settlement date of the quoted prices
        present_value: PV against the issuer curve
        dirty_price: Dirty price used for yield measures (market or curve)
        clean_price: Clean price matching dirty_price
        accrued_interest: Accrued interest at settlement
        yield_: Yield under the bond's convention
        modified_duration: Modified duration (years)
        macaulay_duration: Macaulay duration, None where the convention has none
        convexity: Convexity
        z_spread: Spread to the market price, None without a market price
        dv01: PV change for a 1bp fall of every issuer curve node
        pv01: PV change per 1bp rise of each curve node
    """
    security_id: str
    valuation_date: date
    settlement_date: date
    present_value: float
    dirty_price: float
    clean_price: float
    accrued_interest: float
    yield_: float
    modified_duration: float
    macaulay_duration: Optional[float]
    convexity: float
    z_spread: Optional[float]
    dv01: float
    pv01: pd.DataFrame = field(default_factory=pd.DataFrame)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for reporting."""
        return {
            "security_id": self.security_id,
            "valuation_date": self.valuation_date.isoformat(),
            "settlement_date": self.settlement_date.isoformat(),
            "present_value": self.present_value,
            "dirty_price": self.dirty_price,
            "clean_price": self.clean_price,
            "accrued_interest": self.accrued_interest,
            "yield": self.yield_,
            "modified_duration": self.modified_duration,
            "macaulay_duration": self.macaulay_duration,
            "convexity": self.convexity,
            "z_spread": self.z_spread,
            "dv01": self.dv01,
            "pv01": self.pv01.to_dict(orient="records"),
        }


class BondRiskCalculator:
    """
    Calculator for bond risk measures.

    Attributes:
        pricer: Bond pricer
        compounding: Compounding of the reported z-spread
        periods_per_year: Periods per year for periodic z-spreads
    """

    def __init__(
        self,
        pricer: Optional[FixedCouponBondPricer] = None,
        compounding: CompoundingConvention = CompoundingConvention.CONTINUOUS,
        periods_per_year: int = 0,
    ):
        self.pricer = pricer or FixedCouponBondPricer()
        self.compounding = compounding
        self.periods_per_year = periods_per_year

    def compute(
        self,
        bond: FixedCouponBond,
        provider: LegalEntityDiscountingProvider,
        clean_price: Optional[float] = None,
        settlement: Optional[date] = None,
    ) -> BondRiskMeasures:
        """
        Compute risk measures of a bond.

        Args:
            bond: Bond to analyse
            provider: Issuer and repo curves
            clean_price: Market clean price; the curve price is used if None
            settlement: Settlement date, from the bond's settlement days by default
        """
        pricer = self.pricer
        if settlement is None:
            settlement = pricer.settlement_date(bond, provider.valuation_date)

        pv = pricer.present_value(bond, provider)
        accrued = pricer.accrued_interest(bond, settlement)
        if clean_price is None:
            dirty = pricer.dirty_price_from_curves(bond, provider, settlement)
            z_spread = None
        else:
            dirty = pricer.dirty_price_from_clean_price(bond, settlement, clean_price)
            z_spread = pricer.z_spread_from_curves_and_dirty_price(
                bond, provider, dirty, self.compounding, self.periods_per_year, settlement
            )
        clean = pricer.clean_price_from_dirty_price(bond, settlement, dirty)

        yield_ = pricer.yield_from_dirty_price(bond, settlement, dirty)
        modified = pricer.modified_duration_from_yield(bond, settlement, yield_)
        try:
            macaulay = pricer.macaulay_duration_from_yield(bond, settlement, yield_)
        except UnsupportedConventionError as exc:
            logger.debug("No Macaulay duration for %s: %s", bond.security_id, exc)
            macaulay = None
        convexity = pricer.convexity_from_yield(bond, settlement, yield_)

        pv01 = pricer.present_value_parameter_sensitivity(bond, provider).multiplied_by(ONE_BP).to_frame()
        pv01 = pv01.rename(columns={"sensitivity": "pv01"})
        dv01 = -float(pv01["pv01"].sum()) if not pv01.empty else 0.0

        return BondRiskMeasures(
            security_id=bond.security_id,
            valuation_date=provider.valuation_date,
            settlement_date=settlement,
            present_value=pv,
            dirty_price=dirty,
            clean_price=clean,
            accrued_interest=accrued,
            yield_=yield_,
            modified_duration=modified,
            macaulay_duration=macaulay,
            convexity=convexity,
            z_spread=z_spread,
            dv01=dv01,
            pv01=pv01,
        )


__all__ = [
    "BondRiskMeasures",
    "BondRiskCalculator",
]
