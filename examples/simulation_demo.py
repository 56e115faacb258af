# %% imports
import logging

import matplotlib.pyplot as plt
import numpy as np
from fixedpointmath import FixedPoint

from igainpy.agents.policies import DeterministicPolicy, RandomPolicy
from igainpy.analysis import calc_fee_curve, plot_fee_curve, plot_pools, summarize_trades
from igainpy.config import MarketConfig, SimulationConfig, apply_overrides
from igainpy.simulators import get_simulator
from igainpy.utils.logs import close_logging, setup_logging

NUM_RANDOM_AGENTS = 5
SECONDS_IN_DAY = 24 * 60 * 60

setup_logging(log_level=logging.WARNING)

# %% configure
market_config = MarketConfig(min_fee=FixedPoint("0.003"), max_fee=FixedPoint("0.03"), block_time_step=600)
simulation_config = apply_overrides(
    SimulationConfig(), {"title": "IRS-demo", "num_blocks": 1_000, "random_seed": 42, "halt_on_errors": False}
)
rng = np.random.default_rng(simulation_config.random_seed)

# %% agents
agents = [RandomPolicy(f"random_{index}", FixedPoint("1000.0"), rng=rng) for index in range(NUM_RANDOM_AGENTS)]
agents.append(
    DeterministicPolicy(
        "whale",
        FixedPoint("5000.0"),
        [("mint_lp", "2500.0"), ("mint_b", "500.0", "600.0"), ("swap_b_to_a", "100.0")],
    )
)

# %% run
simulator = get_simulator(
    market_config,
    simulation_config,
    agents,
    seed_a=FixedPoint("10000.0"),
    seed_b=FixedPoint("10000.0"),
    leverage=FixedPoint("10.0"),
    duration=7 * SECONDS_IN_DAY,
    variable_rate=FixedPoint("0.08"),
    start_time=1_700_000_000,
)
simulator.run_simulation()
history = simulator.history_df
print(f"{len(history)} trades succeeded, {len(simulator.failed_trades)} failed")
print(summarize_trades(history))
print(f"settled at price_a={simulator.market.market_state.price_a}, price_b={simulator.market.market_state.price_b}")

# %% plot
plot_pools(history[history["action_type"] != "claim"].reset_index(drop=True))
plot_fee_curve(
    calc_fee_curve(
        simulator.market.open_time, simulator.market.close_time, market_config.min_fee, market_config.max_fee
    )
)
plt.show()
close_logging()
