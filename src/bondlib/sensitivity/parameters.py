"""
Sensitivities to curve parameters (node zero rates).

Produced by projecting point sensitivities through the curve interpolation,
or by bump-and-reprice in ``bondlib.risk.bumping``.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List

import numpy as np
import pandas as pd


@dataclass(frozen=True)
class CurveParameterSensitivity:
    """
    Sensitivity of a value to each node of one curve.

    Attributes:
        curve_name: Identity of the curve
        currency: Currency of the curve
        node_times: Node year fractions
        sensitivity: d(value) / d(node zero rate), one entry per node
    """
    curve_name: str
    currency: str
    node_times: np.ndarray
    sensitivity: np.ndarray

    def __post_init__(self):
        if len(self.node_times) != len(self.sensitivity):
            raise ValueError("Node times and sensitivities must have same length")

    def plus(self, other: "CurveParameterSensitivity") -> "CurveParameterSensitivity":
        if other.curve_name != self.curve_name or len(other.sensitivity) != len(self.sensitivity):
            raise ValueError(f"Cannot combine sensitivities of {self.curve_name} and {other.curve_name}")
        return CurveParameterSensitivity(
            self.curve_name, self.currency, self.node_times, self.sensitivity + other.sensitivity
        )

    def multiplied_by(self, factor: float) -> "CurveParameterSensitivity":
        return CurveParameterSensitivity(
            self.curve_name, self.currency, self.node_times, self.sensitivity * factor
        )

    def total(self) -> float:
        return float(np.sum(self.sensitivity))


class CurveParameterSensitivities:
    """Parameter sensitivities keyed by curve name."""

    def __init__(self, sensitivities: Iterable[CurveParameterSensitivity] = ()):
        self._by_curve: Dict[str, CurveParameterSensitivity] = {}
        for s in sensitivities:
            self._add(s)

    def _add(self, s: CurveParameterSensitivity) -> None:
        existing = self._by_curve.get(s.curve_name)
        self._by_curve[s.curve_name] = s if existing is None else existing.plus(s)

    @classmethod
    def empty(cls) -> "CurveParameterSensitivities":
        return cls()

    def combined_with(self, other: "CurveParameterSensitivities") -> "CurveParameterSensitivities":
        return CurveParameterSensitivities(list(self) + list(other))

    def multiplied_by(self, factor: float) -> "CurveParameterSensitivities":
        return CurveParameterSensitivities(s.multiplied_by(factor) for s in self)

    def get(self, curve_name: str) -> CurveParameterSensitivity:
        try:
            return self._by_curve[curve_name]
        except KeyError:
            raise KeyError(f"No sensitivity for curve: {curve_name}") from None

    def curve_names(self) -> List[str]:
        return list(self._by_curve)

    def total(self) -> float:
        return sum(s.total() for s in self)

    def equal_with_tolerance(self, other: "CurveParameterSensitivities", tolerance: float) -> bool:
        """
        Compare node by node; a curve missing on one side counts as zeros.
        """
        names = set(self._by_curve) | set(other.curve_names())
        for name in names:
            mine = self._by_curve.get(name)
            theirs = other._by_curve.get(name)
            if mine is None or theirs is None:
                present = mine if mine is not None else theirs
                if np.any(np.abs(present.sensitivity) > tolerance):
                    return False
                continue
            if len(mine.sensitivity) != len(theirs.sensitivity):
                return False
            if np.any(np.abs(mine.sensitivity - theirs.sensitivity) > tolerance):
                return False
        return True

    def to_frame(self) -> pd.DataFrame:
        """One row per (curve, node)."""
        rows = []
        for s in self:
            for t, value in zip(s.node_times, s.sensitivity):
                rows.append({
                    "curve": s.curve_name,
                    "currency": s.currency,
                    "node_time": float(t),
                    "sensitivity": float(value),
                })
        return pd.DataFrame(rows, columns=["curve", "currency", "node_time", "sensitivity"])

    def __iter__(self) -> Iterator[CurveParameterSensitivity]:
        return iter(self._by_curve.values())

    def __len__(self) -> int:
        return len(self._by_curve)

    def __repr__(self) -> str:
        return f"CurveParameterSensitivities(curves={self.curve_names()})"


__all__ = [
    "CurveParameterSensitivity",
    "CurveParameterSensitivities",
]
