"""Configuration dataclasses for markets and simulations"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from fixedpointmath import FixedPoint

from igainpy.types import freezable


@freezable(frozen=False, no_new_attribs=True)
@dataclass
class MarketConfig:
    """Data object for storing market parameters that are fixed once the market is initialized"""

    min_fee: FixedPoint = field(
        default_factory=lambda: FixedPoint("0.003"),
        metadata={"description": "fee fraction charged at the open time, as a decimal of 1"},
    )
    max_fee: FixedPoint = field(
        default_factory=lambda: FixedPoint("0.03"),
        metadata={"description": "fee fraction charged at the close time, as a decimal of 1"},
    )
    block_time_step: int = field(default=12, metadata={"description": "seconds between blocks"})
    log_level: int = field(
        default=logging.INFO, metadata={"description": "Logging level, as defined by stdlib logging"}
    )
    log_filename: str | None = field(default=None, metadata={"description": "filename for output logs"})

    def __post_init__(self) -> None:
        self.check_fees()

    def __getitem__(self, key):
        return getattr(self, key)

    def __setitem__(self, key, value) -> None:
        setattr(self, key, value)

    def check_fees(self) -> None:
        r"""Verify that 0 <= min_fee <= max_fee <= 1"""
        if not FixedPoint("0.0") <= self.min_fee <= self.max_fee <= FixedPoint("1.0"):
            raise ValueError(
                f"ERROR: fees must satisfy 0 <= min_fee <= max_fee <= 1, not {self.min_fee=} and {self.max_fee=}"
            )


@freezable(frozen=False, no_new_attribs=True)
@dataclass
class SimulationConfig:
    """Data object for storing user simulation config parameters"""

    title: str = field(default="igainpy simulation", metadata={"description": "Text description of the simulation"})
    num_blocks: int = field(default=100, metadata={"description": "number of blocks to run; agents act each block"})
    random_seed: int = field(default=1, metadata={"description": "int to be used for the random seed"})
    halt_on_errors: bool = field(
        default=False, metadata={"description": "If True, re-raise market errors instead of logging them"}
    )
    shuffle_agents: bool = field(
        default=True, metadata={"description": "Shuffle order of action (as if random gas paid)"}
    )
    close_at_end: bool = field(
        default=True, metadata={"description": "Close the market and claim for every agent once close time passes"}
    )

    def __getitem__(self, key):
        return getattr(self, key)

    def __setitem__(self, key, value) -> None:
        setattr(self, key, value)


def apply_overrides(config, overrides: dict | None = None):
    """Set each key in overrides on the config, then return it.

    Unknown keys raise AttributeError because configs disallow new attributes.
    """
    for key, value in (overrides or {}).items():
        config[key] = value
    if isinstance(config, MarketConfig):
        config.check_fees()
    return config
