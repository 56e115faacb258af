"""Market, pricing model, fee schedule and settlement"""
from .epoch import EpochState
from .fees import FeeSchedule, calc_fee_multiplier
from .market import Market
from .market_state import MarketDeltas, MarketState
from .pricing_model import BondingCurvePricingModel
from .settlement import FixedPriceSettlement, LeveragedYieldSettlement, SettlementStrategy
from .yield_source import ConstantRateYieldSource, YieldSource
