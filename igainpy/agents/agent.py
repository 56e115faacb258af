"""Implements abstract classes that control agent behavior"""
from __future__ import annotations  # types will be strings by default in 3.11

import logging
from typing import TYPE_CHECKING

from fixedpointmath import FixedPoint

from igainpy.types import MarketAction, MarketActionType

if TYPE_CHECKING:
    from igainpy.markets import Market


class Agent:
    r"""Implements a class that controls agent behavior; the agent trades from a single wallet address

    Arguments
    ---------
    wallet_address : str
        Address of the agent's wallet in every token ledger.
    budget : FixedPoint
        Amount of base the simulator funds the agent with.
    """

    def __init__(self, wallet_address: str, budget: FixedPoint):
        self.wallet_address = wallet_address
        self.budget = budget
        self.done_trading = False

    def action(self, market: Market) -> list[MarketAction]:
        r"""Abstract method meant to be implemented by the specific policy

        Specify action from the policy

        Arguments
        ---------
        market : Market
            The market the agent trades against; read its pools and the agent's balances to decide.

        Returns
        -------
        list[MarketAction]
            List of actions to execute in order.
        """
        raise NotImplementedError

    def create_agent_action(
        self,
        action_type: MarketActionType,
        trade_amount: FixedPoint,
        bound: FixedPoint | None = None,
        second_amount: FixedPoint | None = None,
    ) -> MarketAction:
        r"""Creates and returns a MarketAction object which represents a trade that this agent can make"""
        return MarketAction(
            action_type=action_type,
            trade_amount=trade_amount,
            bound=bound if bound is not None else FixedPoint("0.0"),
            second_amount=second_amount if second_amount is not None else FixedPoint("0.0"),
        )

    def get_trades(self, market: Market) -> list[MarketAction]:
        """Helper function for computing an agent's trades from the current market state"""
        if self.done_trading:
            return []
        actions = self.action(market)
        logging.debug("agent %s wants %s", self.wallet_address, [action.action_type.value for action in actions])
        return actions

    def __repr__(self) -> str:
        return f"{type(self).__name__}(wallet_address={self.wallet_address!r}, budget={self.budget})"
