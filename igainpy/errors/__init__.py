"""Errors raised by the market and its ledgers."""
from .errors import (
    AlreadyInitializedError,
    CannotTradeError,
    InsufficientBalanceError,
    InsufficientLiquidityError,
    MarketError,
    NotClaimableError,
    NotClosableError,
    SlippageError,
)
