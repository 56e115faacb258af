"""Define Python user-defined exceptions."""


class MarketError(Exception):
    """Base class for every error the market raises back to a caller as an aborted operation."""


class CannotTradeError(MarketError):
    """If a trade is attempted while the epoch is not open.  This covers calls before the market is initialized,
    calls at or after the close time, and calls after the market has been closed.
    """

    def __init__(self, message: str = "cannot buy"):
        super().__init__(message)


class NotClosableError(MarketError):
    """If the market is closed before its close time, or closed a second time."""


class NotClaimableError(MarketError):
    """If a claim is made before the market has been closed."""


class AlreadyInitializedError(MarketError):
    """If the market is initialized more than once."""


class SlippageError(MarketError):
    """If the output requirement is not met.  Often this is a minimum amount out as slippage protection,
    but for exact-output trades and withdrawals it is a maximum amount in.
    """

    def __init__(self, message: str = "SLIPPAGE_DETECTED"):
        super().__init__(message)


class InsufficientBalanceError(MarketError):
    """If a wallet does not hold enough tokens to cover a burn or a transfer."""


class InsufficientLiquidityError(MarketError):
    """If a trade would empty one of the pools."""
