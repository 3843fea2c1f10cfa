"""
BondLib: Fixed-Coupon Bond Price, Yield & Spread Analytics Library

A modular library for:
- Pricing fixed-coupon bonds against issuer and repo discount curves
- Converting between dirty/clean price, yield and z-spread
- Yield conventions: US street, UK DMO, German Bund, Japanese simple
- Curve sensitivities (analytic and bump-and-reprice) and bond risk reports
"""

__version__ = "0.1.0"

# Core modules
from .conventions import (
    DayCount,
    BusinessDayConvention,
    CompoundingConvention,
    YieldConvention,
    BondConventions,
    year_fraction,
    relative_year_fraction,
)
from .dates import DateUtils, ScheduleInfo, generate_bond_schedule
from .config import PricerSettings
from .exceptions import (
    BondLibError,
    UnsupportedConventionError,
    SettlementDateError,
    RootFindingError,
    MarketDataError,
)

# Bonds and market data
from .bonds import CouponPeriod, NominalPayment, FixedCouponBond
from .curves import Curve, create_flat_curve, LinearInterpolator, CubicSplineInterpolator
from .market_state import DiscountFactors, LegalEntityDiscountingProvider

# Numerics
from .math import ValueDerivatives, BrentRootFinder, NewtonRaphsonRootFinder

# Sensitivities
from .sensitivity import (
    ZeroRateSensitivity,
    PointSensitivities,
    CurveParameterSensitivity,
    CurveParameterSensitivities,
)

# Pricers
from .pricers import FixedCouponBondPricer

# Risk
from .risk import (
    BumpEngine,
    FiniteDifferenceSensitivityCalculator,
    BondRiskCalculator,
    BondRiskMeasures,
)

__all__ = [
    "__version__",
    "DayCount",
    "BusinessDayConvention",
    "CompoundingConvention",
    "YieldConvention",
    "BondConventions",
    "year_fraction",
    "relative_year_fraction",
    "DateUtils",
    "ScheduleInfo",
    "generate_bond_schedule",
    "PricerSettings",
    "BondLibError",
    "UnsupportedConventionError",
    "SettlementDateError",
    "RootFindingError",
    "MarketDataError",
    "CouponPeriod",
    "NominalPayment",
    "FixedCouponBond",
    "Curve",
    "create_flat_curve",
    "LinearInterpolator",
    "CubicSplineInterpolator",
    "DiscountFactors",
    "LegalEntityDiscountingProvider",
    "ValueDerivatives",
    "BrentRootFinder",
    "NewtonRaphsonRootFinder",
    "ZeroRateSensitivity",
    "PointSensitivities",
    "CurveParameterSensitivity",
    "CurveParameterSensitivities",
    "FixedCouponBondPricer",
    "BumpEngine",
    "FiniteDifferenceSensitivityCalculator",
    "BondRiskCalculator",
    "BondRiskMeasures",
]
