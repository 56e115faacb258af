"""Calculate prices, fees and volumes from market history."""
from __future__ import annotations

import numpy as np
import pandas as pd
from fixedpointmath import FixedPoint

from igainpy.markets.fees import calc_fee_multiplier
from igainpy.math import ONE_18


def calc_spot_price_a(pool_a: pd.Series, pool_b: pd.Series) -> pd.Series:
    """Spot price of A in base; one A plus one B is always redeemable for one base."""
    return pool_b / (pool_a + pool_b)


def calc_spot_price_b(pool_a: pd.Series, pool_b: pd.Series) -> pd.Series:
    """Spot price of B in base."""
    return pool_a / (pool_a + pool_b)


def calc_invariant(pool_a: pd.Series, pool_b: pd.Series) -> pd.Series:
    """Constant-product invariant, in float units."""
    return pool_a * pool_b


def calc_fee_curve(
    open_time: int, close_time: int, min_fee: FixedPoint, max_fee: FixedPoint, num_points: int = 50
) -> pd.DataFrame:
    """Sample the fee schedule across the epoch.

    Returns
    -------
    pd.DataFrame
        One row per sample with the ``timestamp``, the applied ``fee`` and the retained
        ``fee_multiplier``, both as floats.
    """
    timestamps = np.linspace(open_time, close_time, num_points).astype(np.int64)
    multipliers = np.array(
        [
            calc_fee_multiplier(open_time, close_time, int(timestamp), min_fee.scaled_value, max_fee.scaled_value)
            for timestamp in timestamps
        ],
        dtype=object,
    )
    fee_multiplier = multipliers.astype(np.float64) / ONE_18
    return pd.DataFrame({"timestamp": timestamps, "fee": 1 - fee_multiplier, "fee_multiplier": fee_multiplier})


def summarize_trades(history: pd.DataFrame) -> pd.DataFrame:
    """Count and volume of trades by action type."""
    if history.empty:
        return pd.DataFrame(columns=["action_type", "num_trades", "volume"])
    summary = (
        history.groupby("action_type")
        .agg(num_trades=("trade_amount", "count"), volume=("trade_amount", "sum"))
        .reset_index()
    )
    return summary
