"""Simulator class wraps the market and agent objects with a block-by-block trading loop"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np
import pandas as pd
from fixedpointmath import FixedPoint

from igainpy.agents.policies import NoActionPolicy
from igainpy.analysis import calc_spot_price_a, calc_spot_price_b
from igainpy.config import MarketConfig, SimulationConfig
from igainpy.errors import MarketError
from igainpy.markets import ConstantRateYieldSource, Market
from igainpy.markets.epoch import EpochState
from igainpy.time import BlockTime
from igainpy.tokens import Token
from igainpy.types import MarketAction, MarketActionType, TradeResult
from igainpy.utils.logs import setup_logging

if TYPE_CHECKING:
    from igainpy.agents import Agent

INIT_LP_ADDRESS = "init_lp"


class Simulator:
    r"""Stores environment variables & market simulation outputs for the trading loop

    Arguments
    ---------
    config : SimulationConfig
        Simulation knobs.
    market : Market
        An initialized market.
    agents : list[Agent]
        Agents that act every block.
    """

    def __init__(self, config: SimulationConfig, market: Market, agents: list[Agent]):
        self.config = config
        self.market = market
        self.agents = agents
        self.rng = np.random.default_rng(config.random_seed)
        self.trade_history: list[TradeResult] = []
        self.failed_trades: list[tuple[str, MarketAction, str]] = []

    def fund_agents(self) -> None:
        """Mint each agent's budget of base into its wallet"""
        for agent in self.agents:
            self.market.base_token.mint(agent.wallet_address, agent.budget)
            logging.debug("funded %s with %s base", agent.wallet_address, agent.budget)

    def run_simulation(self) -> None:
        r"""Run the trading loop for config.num_blocks blocks, or until the market stops trading"""
        logging.info(
            "%s: running %d blocks with %d agents", self.config.title, self.config.num_blocks, len(self.agents)
        )
        for block_number in range(self.config.num_blocks):
            if self.market.state != EpochState.OPEN or self.market.block_time.time >= self.market.close_time:
                logging.info("trading stopped at block %d", block_number)
                break
            agents = list(self.agents)
            if self.config.shuffle_agents:
                agents = [agents[index] for index in self.rng.permutation(len(agents))]
            for agent in agents:
                for action in agent.get_trades(self.market):
                    self.execute_action(agent, action)
            self.market.market_state.log_state()
            self.market.block_time.tick()
        if self.config.close_at_end:
            self.settle()

    def execute_action(self, agent: Agent, action: MarketAction) -> FixedPoint | None:
        """Execute one action, recording it; market errors are logged unless halt_on_errors is set"""
        block_time = self.market.block_time.time
        fee_multiplier = self.market.fee() if self.market.state == EpochState.OPEN else FixedPoint("0.0")
        try:
            realized_amount = self.market.perform_action(agent.wallet_address, action)
        except MarketError as err:
            if self.config.halt_on_errors:
                raise
            logging.warning(
                "agent %s failed %s for %s: %s",
                agent.wallet_address,
                action.action_type.value,
                action.trade_amount,
                err,
            )
            self.failed_trades.append((agent.wallet_address, action, repr(err)))
            return None
        self.trade_history.append(
            TradeResult(
                block_time=block_time,
                wallet_address=agent.wallet_address,
                action_type=action.action_type,
                trade_amount=action.trade_amount,
                realized_amount=realized_amount,
                pool_a=self.market.pool_a,
                pool_b=self.market.pool_b,
                lp_total_supply=self.market.lp_total_supply,
                fee_multiplier=fee_multiplier,
            )
        )
        return realized_amount

    def settle(self) -> None:
        """Advance to the close time if needed, close the market, and claim for every agent"""
        if self.market.state != EpochState.OPEN:
            return
        if self.market.block_time.time < self.market.close_time:
            self.market.block_time.set_time(self.market.close_time)
        self.market.close()
        for agent in self.agents:
            self.execute_action(agent, MarketAction(action_type=MarketActionType.CLAIM))

    @property
    def history_df(self) -> pd.DataFrame:
        """Successful trades as a DataFrame, with float amounts and spot prices after each trade"""
        history = pd.DataFrame(
            [
                {
                    "block_time": trade.block_time,
                    "wallet_address": trade.wallet_address,
                    "action_type": trade.action_type.value,
                    "trade_amount": float(trade.trade_amount),
                    "realized_amount": float(trade.realized_amount),
                    "pool_a": float(trade.pool_a),
                    "pool_b": float(trade.pool_b),
                    "lp_total_supply": float(trade.lp_total_supply),
                    "fee_multiplier": float(trade.fee_multiplier),
                }
                for trade in self.trade_history
            ],
            columns=[
                "block_time",
                "wallet_address",
                "action_type",
                "trade_amount",
                "realized_amount",
                "pool_a",
                "pool_b",
                "lp_total_supply",
                "fee_multiplier",
            ],
        )
        history["spot_price_a"] = calc_spot_price_a(history["pool_a"], history["pool_b"])
        history["spot_price_b"] = calc_spot_price_b(history["pool_a"], history["pool_b"])
        return history


def get_simulator(
    market_config: MarketConfig,
    simulation_config: SimulationConfig,
    agents: list[Agent],
    seed_a: FixedPoint = FixedPoint("1000.0"),
    seed_b: FixedPoint = FixedPoint("1000.0"),
    leverage: FixedPoint = FixedPoint("5.0"),
    duration: int = 86400 * 7,
    variable_rate: FixedPoint = FixedPoint("0.05"),
    start_time: int = 0,
) -> Simulator:
    r"""Construct a funded simulator around a freshly initialized market

    Both configs are frozen.  An initial LP agent that never trades seeds the pools, so it is first
    in the agent list and claims its share at settlement like everyone else.

    Arguments
    ---------
    market_config : MarketConfig
        Fee, block time and logging parameters.
    simulation_config : SimulationConfig
        Trading loop parameters.
    agents : list[Agent]
        Trading agents; each is funded with its budget in base.
    seed_a : FixedPoint
        Initial A reserves.
    seed_b : FixedPoint
        Initial B reserves.
    leverage : FixedPoint
        Settlement leverage on the accrued yield.
    duration : int
        Epoch length in seconds.
    variable_rate : FixedPoint
        Annualized rate of the constant-rate yield source.
    start_time : int
        Block timestamp at which the market opens.

    Returns
    -------
    Simulator
        Ready for run_simulation.
    """
    # pylint: disable=too-many-arguments
    if market_config.log_filename is not None:
        setup_logging(log_filename=market_config.log_filename, log_level=market_config.log_level, log_stdout=False)
    market_config.freeze()  # type: ignore
    simulation_config.freeze()  # type: ignore
    block_time = BlockTime(start_time=start_time, step_size=market_config.block_time_step)
    base_token = Token("Simulated base", "BASE")
    market = Market(block_time, config=market_config)
    init_lp_agent = NoActionPolicy(wallet_address=INIT_LP_ADDRESS, budget=max(seed_a, seed_b))
    simulator = Simulator(simulation_config, market, [init_lp_agent] + list(agents))
    market.base_token = base_token  # fund_agents mints through the market's base ledger
    simulator.fund_agents()
    market.initialize(
        INIT_LP_ADDRESS,
        base_token,
        ConstantRateYieldSource(block_time, variable_rate),
        asset="BASE",
        treasury="treasury",
        name=simulation_config.title,
        leverage=leverage,
        duration=duration,
        seed_a=seed_a,
        seed_b=seed_b,
    )
    return simulator
