"""Settlement strategies that turn accrued yield into final A and B prices"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from fixedpointmath import FixedPoint

from igainpy.math import ONE_18, from_scaled


def calc_yield_accrued(start_index: FixedPoint, end_index: FixedPoint) -> FixedPoint:
    """Fractional growth of the income index, floored at zero"""
    if start_index <= FixedPoint("0.0"):
        raise ValueError(f"start_index must be positive, not {start_index}")
    growth = end_index.scaled_value * ONE_18 // start_index.scaled_value - ONE_18
    return from_scaled(max(growth, 0))


class SettlementStrategy(ABC):
    """Computes per-token payouts once the market is closed.

    Implementations return ``(price_a, price_b)`` in base per token; the two prices must sum to one
    so the base held by the market always covers every outstanding A and B pair.
    """

    @abstractmethod
    def compute_settlement(
        self, pool_a: FixedPoint, pool_b: FixedPoint, leverage: FixedPoint, yield_accrued: FixedPoint
    ) -> tuple[FixedPoint, FixedPoint]:
        """Final price of one A and one B"""

    def settle(
        self, pool_a: FixedPoint, pool_b: FixedPoint, leverage: FixedPoint, yield_accrued: FixedPoint
    ) -> tuple[FixedPoint, FixedPoint]:
        """Run compute_settlement and check that the prices split one unit of base"""
        price_a, price_b = self.compute_settlement(pool_a, pool_b, leverage, yield_accrued)
        if price_a < FixedPoint("0.0") or price_b < FixedPoint("0.0"):
            raise ValueError(f"settlement prices must be non-negative, not {price_a=}, {price_b=}")
        if price_a + price_b != FixedPoint("1.0"):
            raise ValueError(f"settlement prices must sum to 1, not {price_a=} + {price_b=}")
        logging.info(
            "%s settled yield_accrued=%s as price_a=%s, price_b=%s",
            type(self).__name__,
            yield_accrued,
            price_a,
            price_b,
        )
        return price_a, price_b


class LeveragedYieldSettlement(SettlementStrategy):
    r"""B receives the accrued yield amplified by leverage, capped at one base; A receives the rest.

    .. math::
        p_b = \min(L \cdot y, 1), \qquad p_a = 1 - p_b
    """

    def compute_settlement(
        self, pool_a: FixedPoint, pool_b: FixedPoint, leverage: FixedPoint, yield_accrued: FixedPoint
    ) -> tuple[FixedPoint, FixedPoint]:
        price_b = min(yield_accrued.scaled_value * leverage.scaled_value // ONE_18, ONE_18)
        return from_scaled(ONE_18 - price_b), from_scaled(price_b)


class FixedPriceSettlement(SettlementStrategy):
    """Settles at a price for B decided up front, e.g. by an oracle or a test"""

    def __init__(self, price_b: FixedPoint):
        if not FixedPoint("0.0") <= price_b <= FixedPoint("1.0"):
            raise ValueError(f"price_b must be in [0, 1], not {price_b}")
        self.price_b = price_b

    def compute_settlement(
        self, pool_a: FixedPoint, pool_b: FixedPoint, leverage: FixedPoint, yield_accrued: FixedPoint
    ) -> tuple[FixedPoint, FixedPoint]:
        return FixedPoint("1.0") - self.price_b, self.price_b
