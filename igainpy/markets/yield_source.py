"""Yield sources that accrue interest on the deposited base asset"""
from __future__ import annotations

from abc import ABC, abstractmethod

from fixedpointmath import FixedPoint

from igainpy.time import BlockTime

SECONDS_IN_YEAR = 365 * 24 * 60 * 60  # 31_536_000


class YieldSource(ABC):
    """Reports a normalized income index that starts near 1 and grows as yield accrues.

    Yield accrued between two times is ``index(t1) / index(t0) - 1``.
    """

    @abstractmethod
    def normalized_income(self) -> FixedPoint:
        """Current income index"""


class ConstantRateYieldSource(YieldSource):
    """A yield source with a simple (non-compounding) variable rate that can be changed at any time.

    Arguments
    ---------
    block_time : BlockTime
        Clock the index accrues against.
    variable_rate : FixedPoint
        Annualized rate as a decimal.
    """

    def __init__(self, block_time: BlockTime, variable_rate: FixedPoint):
        self.block_time = block_time
        self._index = FixedPoint("1.0")
        self._last_update = block_time.time
        self._variable_rate = variable_rate

    @property
    def variable_rate(self) -> FixedPoint:
        """Annualized rate currently applied"""
        return self._variable_rate

    def set_variable_rate(self, variable_rate: FixedPoint) -> None:
        """Accrue at the old rate up to now, then switch"""
        self._accrue()
        self._variable_rate = variable_rate

    def normalized_income(self) -> FixedPoint:
        self._accrue()
        return self._index

    def _accrue(self) -> None:
        elapsed = self.block_time.time - self._last_update
        if elapsed > 0:
            year_fraction = FixedPoint(f"{elapsed}.0") / FixedPoint(f"{SECONDS_IN_YEAR}.0")
            self._index += self._index * self._variable_rate * year_fraction
            self._last_update = self.block_time.time
