"""
Value paired with first-order derivatives.

Used by every "AD" (adjoint) function in the pricers. The order of the
derivatives is fixed by each call site and documented there.
"""

from dataclasses import dataclass, field
from typing import Sequence, Union

import numpy as np


@dataclass(frozen=True)
class ValueDerivatives:
    """
    A scalar value and its partial derivatives.

    Attributes:
        value: Function value
        derivatives: Partial derivatives w.r.t. the declared inputs
    """
    value: float
    derivatives: np.ndarray = field(default_factory=lambda: np.zeros(0))

    @classmethod
    def of(cls, value: float, derivatives: Union[Sequence[float], np.ndarray, float]) -> "ValueDerivatives":
        """Create from a value and a sequence (or single) derivative."""
        arr = np.atleast_1d(np.asarray(derivatives, dtype=np.float64))
        return cls(value=float(value), derivatives=arr)

    def derivative(self, index: int = 0) -> float:
        """Derivative w.r.t. input ``index``."""
        return float(self.derivatives[index])

    def __repr__(self) -> str:
        return f"ValueDerivatives(value={self.value}, derivatives={self.derivatives.tolist()})"


__all__ = ["ValueDerivatives"]
