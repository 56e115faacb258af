"""Deterministically trade things."""
from __future__ import annotations

from typing import TYPE_CHECKING

from fixedpointmath import FixedPoint

from igainpy.agents.agent import Agent
from igainpy.types import MarketAction, MarketActionType

if TYPE_CHECKING:
    from igainpy.markets import Market


class DeterministicPolicy(Agent):
    """Executes one entry of a fixed trade list per block, then stops.

    Each entry is ``(action_type, trade_amount)`` or ``(action_type, trade_amount, bound)``;
    amounts are anything FixedPoint accepts.
    """

    def __init__(
        self,
        wallet_address: str,
        budget: FixedPoint,
        trade_list: list[tuple] | None = None,
    ):
        self.trade_list = list(trade_list) if trade_list is not None else [("mint_lp", "100.0"), ("mint_a", "100.0")]
        self.starting_length = len(self.trade_list)
        super().__init__(wallet_address, budget)

    def action(self, market: Market) -> list[MarketAction]:
        if not self.trade_list:
            self.done_trading = True
            return []
        action_type, amount, *rest = self.trade_list.pop(0)
        bound = FixedPoint(rest[0]) if rest else None
        return [self.create_agent_action(MarketActionType(action_type), FixedPoint(amount), bound)]
