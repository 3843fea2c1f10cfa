"""Exceptions raised by the bond pricing engine."""


class BondLibError(Exception):
    """Base exception for all bondlib errors."""

    pass


class UnsupportedConventionError(BondLibError, NotImplementedError):
    """A yield convention has no formula for the requested operation."""

    def __init__(self, convention, operation: str):
        self.convention = convention
        self.operation = operation
        name = getattr(convention, "name", str(convention))
        super().__init__(f"The convention {name} is not supported for {operation}")


class SettlementDateError(BondLibError, ValueError):
    """Settlement date falls outside the coupon periods of the bond."""

    def __init__(self, settlement_date, message: str = "Date outside range of bond"):
        self.settlement_date = settlement_date
        super().__init__(f"{message}: {settlement_date}")


class RootFindingError(BondLibError, RuntimeError):
    """Bracketing or root solving failed to converge."""

    pass


class MarketDataError(BondLibError, KeyError):
    """No curve available for the requested key."""

    def __init__(self, kind: str, key):
        self.kind = kind
        self.key = key
        super().__init__(f"No {kind} curve for {key}")

    def __str__(self) -> str:
        return self.args[0]
