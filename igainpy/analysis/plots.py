"""Plots of pool history and the fee schedule"""
from __future__ import annotations

import matplotlib.pyplot as plt
import pandas as pd
from matplotlib.figure import Figure


def plot_pools(history: pd.DataFrame) -> Figure:
    """Pool reserves and spot prices after each recorded trade"""
    figure, (pool_axis, price_axis) = plt.subplots(2, 1, figsize=(12, 8), sharex=True)
    pool_axis.step(history.index, history["pool_a"], where="post", label="pool_a")
    pool_axis.step(history.index, history["pool_b"], where="post", label="pool_b")
    pool_axis.set_ylabel("reserves")
    pool_axis.legend()
    price_axis.plot(history.index, history["spot_price_a"], "o-", label="price_a")
    price_axis.plot(history.index, history["spot_price_b"], "o-", label="price_b")
    price_axis.set_ylim(0, 1)
    price_axis.set_xlabel("trade number")
    price_axis.set_ylabel("spot price in base")
    price_axis.legend()
    return figure


def plot_fee_curve(curve: pd.DataFrame) -> Figure:
    """Applied fee across the epoch, as sampled by calc_fee_curve"""
    figure = plt.figure(figsize=(6, 6))
    axis = figure.gca()
    axis.plot(curve["timestamp"] - curve["timestamp"].iloc[0], curve["fee"])
    axis.set_xlabel("seconds since open")
    axis.set_ylabel("fee")
    axis.yaxis.set_major_formatter(plt.FuncFormatter(lambda x, loc: f"{x * 100:.2f}%"))
    return figure
