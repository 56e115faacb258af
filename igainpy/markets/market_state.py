"""State owned by a single market: reserves, LP supply, epoch times and settlement prices"""
from __future__ import annotations  # types will be strings by default in 3.11

import logging
from copy import deepcopy
from dataclasses import dataclass, field

from fixedpointmath import FixedPoint

from igainpy.markets.epoch import EpochState


@dataclass
class MarketDeltas:
    r"""Changes to the pools made by one trade"""

    d_pool_a: FixedPoint = field(default_factory=lambda: FixedPoint("0.0"))
    d_pool_b: FixedPoint = field(default_factory=lambda: FixedPoint("0.0"))
    d_lp_total_supply: FixedPoint = field(default_factory=lambda: FixedPoint("0.0"))

    def __str__(self) -> str:
        return (
            f"MarketDeltas(d_pool_a={self.d_pool_a}, d_pool_b={self.d_pool_b}, "
            f"d_lp_total_supply={self.d_lp_total_supply})"
        )


@dataclass
class MarketState:
    r"""The state of the bonding curve market

    Implements a class for all that that the market contract would hold.

    Attributes
    ----------
    pool_a : FixedPoint
        Virtual A reserves backing the curve.
    pool_b : FixedPoint
        Virtual B reserves backing the curve.
    lp_total_supply : FixedPoint
        Outstanding LP shares; each share is a claim on both pools.
    open_time : int
        Timestamp at which trading opened.
    close_time : int
        Timestamp after which trading stops and the market can be closed.
    min_fee : FixedPoint
        Fee fraction charged at the open time.
    max_fee : FixedPoint
        Fee fraction charged at the close time.
    leverage : FixedPoint
        Multiplier applied to the accrued yield when the B price is settled.
    state : EpochState
        Current lifecycle state.
    start_income_index : FixedPoint
        Yield source index when the market opened.
    price_a : FixedPoint
        Base paid per A at settlement; zero until closed.
    price_b : FixedPoint
        Base paid per B at settlement; zero until closed.
    """

    # dataclasses can have many attributes
    # pylint: disable=too-many-instance-attributes

    pool_a: FixedPoint = field(default_factory=lambda: FixedPoint("0.0"))
    pool_b: FixedPoint = field(default_factory=lambda: FixedPoint("0.0"))
    lp_total_supply: FixedPoint = field(default_factory=lambda: FixedPoint("0.0"))
    open_time: int = 0
    close_time: int = 0
    min_fee: FixedPoint = field(default_factory=lambda: FixedPoint("0.0"))
    max_fee: FixedPoint = field(default_factory=lambda: FixedPoint("0.0"))
    leverage: FixedPoint = field(default_factory=lambda: FixedPoint("0.0"))
    state: EpochState = EpochState.UNINITIALIZED
    start_income_index: FixedPoint = field(default_factory=lambda: FixedPoint("0.0"))
    price_a: FixedPoint = field(default_factory=lambda: FixedPoint("0.0"))
    price_b: FixedPoint = field(default_factory=lambda: FixedPoint("0.0"))

    @property
    def invariant(self) -> int:
        """Constant-product invariant pool_a * pool_b, on scaled values"""
        return self.pool_a.scaled_value * self.pool_b.scaled_value

    @property
    def spot_price_a(self) -> FixedPoint:
        """Marginal price of one A in base, since one A plus one B is always worth one base"""
        return self.pool_b / (self.pool_a + self.pool_b)

    @property
    def spot_price_b(self) -> FixedPoint:
        """Marginal price of one B in base"""
        return self.pool_a / (self.pool_a + self.pool_b)

    def apply_delta(self, delta: MarketDeltas) -> None:
        r"""Applies a delta to the market state."""
        self.pool_a += delta.d_pool_a
        self.pool_b += delta.d_pool_b
        self.lp_total_supply += delta.d_lp_total_supply
        self.check_market_non_zero()

    def check_market_non_zero(self) -> None:
        """Reserves must stay positive while the market is open"""
        if self.state == EpochState.OPEN:
            assert self.pool_a > FixedPoint("0.0"), f"pool_a must be positive, not {self.pool_a}"
            assert self.pool_b > FixedPoint("0.0"), f"pool_b must be positive, not {self.pool_b}"
        assert self.lp_total_supply >= FixedPoint("0.0"), f"lp_total_supply is negative: {self.lp_total_supply}"

    def copy(self) -> MarketState:
        """Returns a new copy of self"""
        return deepcopy(self)

    def log_state(self) -> None:
        """Log the market state at debug level"""
        logging.debug(
            "pool_a=%s, pool_b=%s, lp_total_supply=%s, state=%s",
            self.pool_a,
            self.pool_b,
            self.lp_total_supply,
            self.state.value,
        )
