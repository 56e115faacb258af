"""Analysis of market history"""
from .calc_prices import calc_fee_curve, calc_invariant, calc_spot_price_a, calc_spot_price_b, summarize_trades
from .plots import plot_fee_curve, plot_pools
