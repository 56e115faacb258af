"""Epoch lifecycle: which operations a market accepts at a given time"""
from __future__ import annotations

from enum import Enum

from igainpy.errors import AlreadyInitializedError, CannotTradeError, NotClaimableError, NotClosableError


class EpochState(Enum):
    r"""Lifecycle state of a market; CLOSED is terminal and is the state in which claims are paid"""

    UNINITIALIZED = "uninitialized"
    OPEN = "open"
    CLOSED = "closed"


def check_can_initialize(state: EpochState) -> None:
    """Initialize is only allowed once"""
    if state != EpochState.UNINITIALIZED:
        raise AlreadyInitializedError(f"market is already {state.value}")


def check_can_trade(state: EpochState, close_time: int, block_time: int) -> None:
    """Trades need an open epoch whose close time has not been reached"""
    if state != EpochState.OPEN or block_time >= close_time:
        raise CannotTradeError()


def check_can_close(state: EpochState, close_time: int, block_time: int) -> None:
    """Close needs an open epoch whose close time has passed"""
    if state != EpochState.OPEN:
        raise NotClosableError(f"cannot close a market that is {state.value}")
    if block_time < close_time:
        raise NotClosableError(f"cannot close before {close_time}, block time is {block_time}")


def check_can_claim(state: EpochState) -> None:
    """Claims are only paid after close"""
    if state != EpochState.CLOSED:
        raise NotClaimableError(f"cannot claim while the market is {state.value}")
