"""Policy that holds its budget and never trades.

The simulator uses it for the initial LP, which seeds the pools and only acts again at settlement.
"""
from __future__ import annotations  # types will be strings by default in 3.11

from typing import TYPE_CHECKING

from igainpy.agents.agent import Agent

if TYPE_CHECKING:
    from igainpy.markets import Market
    from igainpy.types import MarketAction


class NoActionPolicy(Agent):
    """An agent whose action is always empty."""

    def action(self, market: Market) -> list[MarketAction]:
        # pylint: disable=unused-argument
        return []
