"""
Market state for bond pricing.

Provides:
- DiscountFactors: discounting view of one zero-rate curve, with z-spread
  variants and zero-rate point sensitivities
- LegalEntityDiscountingProvider: issuer and repo curves keyed by
  (group, currency), resolved from legal entity and security identifiers

Pricers only see curves through these two classes.
"""

from datetime import date
from typing import Dict, List, Optional, Tuple

import logging

import numpy as np

from .conventions import CompoundingConvention
from .curves.curve import Curve
from .exceptions import MarketDataError
from .sensitivity.parameters import CurveParameterSensitivities, CurveParameterSensitivity
from .sensitivity.points import PointSensitivities, ZeroRateSensitivity

logger = logging.getLogger(__name__)

# Below this year fraction a spread discount factor is taken as 1
SMALL_YEAR_FRACTION = 1e-9

CurveKey = Tuple[str, str]


class DiscountFactors:
    """
    Discount factors of a continuously-compounded zero-rate curve.

    Attributes:
        curve: Underlying zero-rate curve
    """

    def __init__(self, curve: Curve):
        self.curve = curve

    @property
    def valuation_date(self) -> date:
        return self.curve.anchor_date

    @property
    def currency(self) -> str:
        return self.curve.currency

    @property
    def curve_name(self) -> str:
        return self.curve.name

    def relative_year_fraction(self, d: date) -> float:
        """Signed year fraction from the valuation date to d."""
        return self.curve.time(d)

    def discount_factor(self, d: date) -> float:
        return self.curve.discount_factor(self.relative_year_fraction(d))

    def zero_rate(self, d: date) -> float:
        return self.curve.zero_rate(self.relative_year_fraction(d))

    def discount_factor_with_spread(
        self,
        d: date,
        z_spread: float,
        compounding: CompoundingConvention,
        periods_per_year: int = 0,
    ) -> float:
        """
        Discount factor with a z-spread over the zero rate.

        Continuous: DF * exp(-z t). Periodic: the zero rate is converted to
        an m-periodic rate, shifted by z and converted back.

        Args:
            d: Payment date
            z_spread: Spread (decimal)
            compounding: How the spread is compounded
            periods_per_year: Compounding periods for periodic spreads
        """
        t = self.relative_year_fraction(d)
        if t < SMALL_YEAR_FRACTION:
            return 1.0
        df = self.curve.discount_factor(t)
        if compounding == CompoundingConvention.CONTINUOUS:
            return float(df * np.exp(-z_spread * t))
        m = self._periods(compounding, periods_per_year)
        periodic_plus_one = df ** (-1.0 / (m * t)) + z_spread / m
        return float(periodic_plus_one ** (-m * t))

    def zero_rate_point_sensitivity(self, d: date) -> ZeroRateSensitivity:
        """d DF(d) / d zero rate at the time of d."""
        t = self.relative_year_fraction(d)
        df = self.curve.discount_factor(t)
        return ZeroRateSensitivity(self.curve_name, self.currency, t, -t * df)

    def zero_rate_point_sensitivity_with_spread(
        self,
        d: date,
        z_spread: float,
        compounding: CompoundingConvention,
        periods_per_year: int = 0,
    ) -> ZeroRateSensitivity:
        """d DF_spread(d) / d zero rate, zero below the small year fraction."""
        t = self.relative_year_fraction(d)
        if t < SMALL_YEAR_FRACTION:
            return ZeroRateSensitivity(self.curve_name, self.currency, t, 0.0)
        df = self.curve.discount_factor(t)
        if compounding == CompoundingConvention.CONTINUOUS:
            sensitivity = -t * df * np.exp(-z_spread * t)
        else:
            m = self._periods(compounding, periods_per_year)
            df_periodic = df ** (-1.0 / (m * t))
            base = df_periodic + z_spread / m
            sensitivity = -t * base ** (-m * t - 1.0) * df_periodic
        return ZeroRateSensitivity(self.curve_name, self.currency, t, float(sensitivity))

    def parameter_sensitivity(self, point: ZeroRateSensitivity) -> CurveParameterSensitivity:
        """Project a zero-rate point sensitivity onto the curve nodes."""
        weights = self.curve.zero_rate_node_weights(point.year_fraction)
        return CurveParameterSensitivity(
            self.curve_name, self.currency, self.curve.get_node_times(), weights * point.sensitivity
        )

    @staticmethod
    def _periods(compounding: CompoundingConvention, periods_per_year: int) -> int:
        if periods_per_year <= 0:
            raise ValueError(f"{compounding.name} spread needs positive periods per year, got {periods_per_year}")
        return periods_per_year

    def __repr__(self) -> str:
        return f"DiscountFactors(curve={self.curve_name}, valuation={self.valuation_date})"


class LegalEntityDiscountingProvider:
    """
    Issuer and repo curves for legal-entity based discounting.

    Issuer curves are looked up through legal entity -> issuer group. Repo
    curves are looked up through security -> repo group first, then legal
    entity -> repo group.

    Attributes:
        valuation_date: Valuation date shared by every curve
        issuer_curves: Curves keyed by (issuer group, currency)
        issuer_groups: Legal entity id -> issuer group
        repo_curves: Curves keyed by (repo group, currency)
        repo_security_groups: Security id -> repo group
        repo_legal_entity_groups: Legal entity id -> repo group
    """

    def __init__(
        self,
        valuation_date: date,
        issuer_curves: Dict[CurveKey, Curve],
        issuer_groups: Dict[str, str],
        repo_curves: Dict[CurveKey, Curve],
        repo_security_groups: Optional[Dict[str, str]] = None,
        repo_legal_entity_groups: Optional[Dict[str, str]] = None,
    ):
        self.valuation_date = valuation_date
        self.issuer_curves = dict(issuer_curves)
        self.issuer_groups = dict(issuer_groups)
        self.repo_curves = dict(repo_curves)
        self.repo_security_groups = dict(repo_security_groups or {})
        self.repo_legal_entity_groups = dict(repo_legal_entity_groups or {})

        self._by_name: Dict[str, Curve] = {}
        for curve in list(self.issuer_curves.values()) + list(self.repo_curves.values()):
            if curve.anchor_date != valuation_date:
                raise ValueError(
                    f"Curve {curve.name} is anchored at {curve.anchor_date}, expected {valuation_date}"
                )
            existing = self._by_name.get(curve.name)
            if existing is not None and existing is not curve:
                raise ValueError(f"Duplicate curve name: {curve.name}")
            self._by_name[curve.name] = curve

    def issuer_curve_discount_factors(self, legal_entity_id: str, currency: str) -> DiscountFactors:
        group = self.issuer_groups.get(legal_entity_id)
        if group is None:
            raise MarketDataError("issuer", legal_entity_id)
        curve = self.issuer_curves.get((group, currency))
        if curve is None:
            raise MarketDataError("issuer", (group, currency))
        return DiscountFactors(curve)

    def repo_curve_discount_factors(self, security_id: str, legal_entity_id: str, currency: str) -> DiscountFactors:
        group = self.repo_security_groups.get(security_id)
        if group is None:
            group = self.repo_legal_entity_groups.get(legal_entity_id)
        if group is None:
            raise MarketDataError("repo", (security_id, legal_entity_id))
        curve = self.repo_curves.get((group, currency))
        if curve is None:
            raise MarketDataError("repo", (group, currency))
        return DiscountFactors(curve)

    def curve(self, name: str) -> Curve:
        try:
            return self._by_name[name]
        except KeyError:
            raise MarketDataError("named", name) from None

    def curve_names(self) -> List[str]:
        return list(self._by_name)

    def parameter_sensitivity(self, points: PointSensitivities) -> CurveParameterSensitivities:
        """Project point sensitivities onto the nodes of the named curves."""
        result = []
        for point in points.normalized():
            result.append(DiscountFactors(self.curve(point.curve_name)).parameter_sensitivity(point))
        return CurveParameterSensitivities(result)

    def bumped(self, curve_name: str, node_index: int, shift: float) -> "LegalEntityDiscountingProvider":
        """Copy of this provider with one node of one curve shifted."""
        logger.debug("Bumped %s node %s by %s", curve_name, node_index, shift)
        return self.replaced(curve_name, self.curve(curve_name).shifted(node_index, shift))

    def bumped_parallel(self, curve_name: str, shift: float) -> "LegalEntityDiscountingProvider":
        """Copy of this provider with every node of one curve shifted."""
        return self.replaced(curve_name, self.curve(curve_name).bump_parallel(shift * 10000.0))

    def replaced(self, curve_name: str, replacement: Curve) -> "LegalEntityDiscountingProvider":
        """Copy of this provider with the named curve replaced wherever it is used."""
        original = self.curve(curve_name)

        def swap(curves: Dict[CurveKey, Curve]) -> Dict[CurveKey, Curve]:
            return {key: replacement if c is original else c for key, c in curves.items()}

        return LegalEntityDiscountingProvider(
            self.valuation_date,
            swap(self.issuer_curves),
            self.issuer_groups,
            swap(self.repo_curves),
            self.repo_security_groups,
            self.repo_legal_entity_groups,
        )

    def __repr__(self) -> str:
        return f"LegalEntityDiscountingProvider(valuation={self.valuation_date}, curves={self.curve_names()})"


__all__ = [
    "SMALL_YEAR_FRACTION",
    "DiscountFactors",
    "LegalEntityDiscountingProvider",
]
