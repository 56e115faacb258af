"""Types shared across the market, agents and simulator"""
from __future__ import annotations  # types will be strings by default in 3.11

from dataclasses import dataclass, field
from enum import Enum
from functools import wraps
from typing import Any, Callable

from fixedpointmath import FixedPoint


def freezable(frozen: bool = False, no_new_attribs: bool = False) -> Callable[[type], type]:
    r"""Class decorator for config-like dataclasses.

    ``no_new_attribs`` turns typos in override keys into AttributeError; ``frozen`` (or a later call
    to ``freeze()``) rejects every assignment.
    """

    def decorator(cls: type) -> type:
        @wraps(cls, updated=())
        class Freezable(cls):
            """cls with assignment guards"""

            def __init__(self, *args, **kwargs) -> None:
                super().__init__(*args, **kwargs)
                object.__setattr__(self, "_no_new_attribs", no_new_attribs)
                object.__setattr__(self, "_frozen", frozen)

            def __setattr__(self, attrib: str, value: Any) -> None:
                if getattr(self, "_frozen", False):
                    raise AttributeError(f"{type(self).__name__} is frozen, cannot set '{attrib}'.")
                if getattr(self, "_no_new_attribs", False) and not hasattr(self, attrib):
                    raise AttributeError(f"{type(self).__name__} has no attribute '{attrib}' to set.")
                super().__setattr__(attrib, value)

            def freeze(self) -> None:
                """Reject all further assignments"""
                object.__setattr__(self, "_frozen", True)

        return Freezable

    return decorator


class MarketActionType(Enum):
    r"""The descriptor of an action in a market"""

    MINT = "mint"
    BURN = "burn"

    MINT_A = "mint_a"
    MINT_EXACT_A = "mint_exact_a"
    MINT_B = "mint_b"
    MINT_EXACT_B = "mint_exact_b"

    BURN_A = "burn_a"
    BURN_B = "burn_b"

    SWAP_A_TO_B = "swap_a_to_b"
    SWAP_B_TO_A = "swap_b_to_a"

    MINT_LP = "mint_lp"
    BURN_LP = "burn_lp"
    DEPOSIT_LP = "deposit_lp"
    WITHDRAW_LP = "withdraw_lp"

    CLAIM = "claim"


@dataclass
class MarketAction:
    r"""Market action specification

    Attributes
    ----------
    action_type : MarketActionType
        Type of action to execute.
    trade_amount : FixedPoint
        Primary amount for the action; the base deposit, the tokens burned, or the exact output wanted.
    bound : FixedPoint
        Slippage bound.  A minimum output for most actions, a maximum input for exact mints and withdrawals.
    second_amount : FixedPoint
        The B leg for deposit_lp and withdraw_lp; unused otherwise.
    """

    action_type: MarketActionType
    trade_amount: FixedPoint = field(default_factory=lambda: FixedPoint("0.0"))
    bound: FixedPoint = field(default_factory=lambda: FixedPoint("0.0"))
    second_amount: FixedPoint = field(default_factory=lambda: FixedPoint("0.0"))


@freezable(frozen=True, no_new_attribs=True)
@dataclass
class TradeResult:
    r"""The realized outcome of a single market call, as recorded by the simulator"""

    block_time: int
    wallet_address: str
    action_type: MarketActionType
    trade_amount: FixedPoint
    realized_amount: FixedPoint
    pool_a: FixedPoint
    pool_b: FixedPoint
    lp_total_supply: FixedPoint
    fee_multiplier: FixedPoint
