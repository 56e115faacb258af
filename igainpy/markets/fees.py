"""Time-decaying fee schedule.

The fee grows linearly from min_fee at the open time to max_fee at the close time, so trades that
wait for the outcome to become clear pay more.  Functions return the retained multiplier
``1 - fee`` rather than the fee itself because that is what the pricing formulas consume.
"""
from __future__ import annotations

import logging

from fixedpointmath import FixedPoint

from igainpy.math import ONE_18, from_scaled


def calc_fee_multiplier(open_time: int, close_time: int, tx_time: int, min_fee: int, max_fee: int) -> int:
    r"""Retained fraction of traded value, as a scaled value in [0, 1e18].

    .. math::
        r = 1 - \Big(f_{min} + (f_{max} - f_{min}) \dfrac{t - t_{open}}{t_{close} - t_{open}}\Big)

    A degenerate epoch (``close_time <= open_time``) charges the maximum fee.

    Arguments
    ---------
    open_time : int
        Epoch open timestamp, in seconds.
    close_time : int
        Epoch close timestamp, in seconds.
    tx_time : int
        Timestamp of the call being priced.
    min_fee : int
        Scaled fee fraction at the open time.
    max_fee : int
        Scaled fee fraction at the close time.

    Returns
    -------
    int
        The scaled retained multiplier.
    """
    if close_time <= open_time:
        return ONE_18 - max_fee
    applied_fee = min_fee + (max_fee - min_fee) * (tx_time - open_time) // (close_time - open_time)
    return ONE_18 - applied_fee


class FeeSchedule:
    """Fee parameters of one market, evaluated against a call timestamp"""

    def __init__(self, min_fee: FixedPoint, max_fee: FixedPoint):
        if not FixedPoint("0.0") <= min_fee <= max_fee <= FixedPoint("1.0"):
            raise ValueError(f"fees must satisfy 0 <= min_fee <= max_fee <= 1, not {min_fee=} and {max_fee=}")
        self.min_fee = min_fee
        self.max_fee = max_fee

    def fee_multiplier(self, open_time: int, close_time: int, tx_time: int) -> FixedPoint:
        """Retained multiplier at tx_time"""
        multiplier = calc_fee_multiplier(
            open_time, close_time, tx_time, self.min_fee.scaled_value, self.max_fee.scaled_value
        )
        logging.debug("fee multiplier at %d in [%d, %d] is %d", tx_time, open_time, close_time, multiplier)
        return from_scaled(multiplier)
