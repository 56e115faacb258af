"""Agent that makes random trades"""
from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
from fixedpointmath import FixedPoint
from numpy.random import Generator as Rng

from igainpy.agents.agent import Agent
from igainpy.types import MarketAction, MarketActionType

if TYPE_CHECKING:
    from igainpy.markets import Market


class RandomPolicy(Agent):
    """Random agent.

    Each block it trades with probability ``trade_chance``, picking uniformly among the actions its
    balances allow and sizing the trade as a random fraction of what it holds.  Slippage bounds are
    left at zero.
    """

    def __init__(
        self,
        wallet_address: str,
        budget: FixedPoint,
        rng: Rng | None = None,
        trade_chance: float = 0.5,
    ):
        self.rng = rng if rng is not None else np.random.default_rng()
        self.trade_chance = trade_chance
        super().__init__(wallet_address, budget)

    def get_available_actions(self, market: Market) -> list[MarketActionType]:
        """Actions this agent holds enough tokens to attempt"""
        zero = FixedPoint("0.0")
        held_a = market.a_token.balance_of(self.wallet_address)
        held_b = market.b_token.balance_of(self.wallet_address)
        available = []
        if market.base_token.balance_of(self.wallet_address) > zero:
            available += [MarketActionType.MINT, MarketActionType.MINT_A, MarketActionType.MINT_B]
            available += [MarketActionType.MINT_LP]
        if held_a > zero:
            available += [MarketActionType.BURN_A, MarketActionType.SWAP_A_TO_B]
        if held_b > zero:
            available += [MarketActionType.BURN_B, MarketActionType.SWAP_B_TO_A]
        if held_a > zero and held_b > zero:
            available += [MarketActionType.BURN]
        if market.lp_token.balance_of(self.wallet_address) > zero:
            available += [MarketActionType.BURN_LP]
        return available

    def _balance_for(self, market: Market, action_type: MarketActionType) -> FixedPoint:
        if action_type in (
            MarketActionType.MINT,
            MarketActionType.MINT_A,
            MarketActionType.MINT_B,
            MarketActionType.MINT_LP,
        ):
            return market.base_token.balance_of(self.wallet_address)
        if action_type == MarketActionType.BURN:
            return min(
                market.a_token.balance_of(self.wallet_address), market.b_token.balance_of(self.wallet_address)
            )
        if action_type in (MarketActionType.BURN_A, MarketActionType.SWAP_A_TO_B):
            return market.a_token.balance_of(self.wallet_address)
        if action_type in (MarketActionType.BURN_B, MarketActionType.SWAP_B_TO_A):
            return market.b_token.balance_of(self.wallet_address)
        return market.lp_token.balance_of(self.wallet_address)

    def action(self, market: Market) -> list[MarketAction]:
        if self.rng.uniform() > self.trade_chance:
            return []
        available_actions = self.get_available_actions(market)
        if not available_actions:
            return []
        action_type = available_actions[self.rng.integers(len(available_actions))]
        fraction = FixedPoint(str(round(float(self.rng.uniform(0.01, 0.5)), 6)))
        trade_amount = self._balance_for(market, action_type) * fraction
        if trade_amount <= FixedPoint("0.0"):
            return []
        return [self.create_agent_action(action_type, trade_amount)]
