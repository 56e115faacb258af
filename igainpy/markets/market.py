"""Market simulator for the dual-token bonding curve

Every public call follows the same order: read the block time once, check the epoch gate, price the
trade on the pools, check slippage, liquidity and every balance the call will debit, and only then
commit the new pools and move tokens.  A call that raises leaves the market and the ledgers untouched.
"""
from __future__ import annotations  # types will be strings by default in 3.11

import logging

from fixedpointmath import FixedPoint

from igainpy.config import MarketConfig
from igainpy.errors import InsufficientLiquidityError, SlippageError
from igainpy.markets import epoch
from igainpy.markets.epoch import EpochState
from igainpy.markets.fees import FeeSchedule
from igainpy.markets.market_state import MarketDeltas, MarketState
from igainpy.markets.pricing_model import BondingCurvePricingModel
from igainpy.markets.settlement import LeveragedYieldSettlement, SettlementStrategy, calc_yield_accrued
from igainpy.markets.yield_source import YieldSource
from igainpy.math import ONE_18, from_scaled, mul_div_down
from igainpy.time import BlockTime
from igainpy.tokens import Token
from igainpy.types import MarketAction, MarketActionType

ZERO = FixedPoint("0.0")


class Market:
    r"""Dual-token bonding curve market

    Arguments
    ---------
    block_time : BlockTime
        Clock read once per call.
    config : MarketConfig | None
        Fee parameters; defaults to MarketConfig().
    settlement : SettlementStrategy | None
        Turns accrued yield into final A and B prices; defaults to LeveragedYieldSettlement().
    pricing_model : BondingCurvePricingModel | None
        Curve math; defaults to BondingCurvePricingModel().
    address : str
        Wallet address under which the market holds its base.
    """

    # pylint: disable=too-many-instance-attributes
    # pylint: disable=too-many-public-methods

    def __init__(
        self,
        block_time: BlockTime,
        config: MarketConfig | None = None,
        settlement: SettlementStrategy | None = None,
        pricing_model: BondingCurvePricingModel | None = None,
        address: str = "igain_market",
    ):
        self.block_time = block_time
        self.config = config or MarketConfig()
        self.fee_schedule = FeeSchedule(self.config.min_fee, self.config.max_fee)
        self.settlement = settlement or LeveragedYieldSettlement()
        self.pricing_model = pricing_model or BondingCurvePricingModel()
        self.address = address
        self.market_state = MarketState()
        self.base_token: Token | None = None
        self.a_token: Token | None = None
        self.b_token: Token | None = None
        self.lp_token: Token | None = None
        self.yield_source: YieldSource | None = None
        self.asset: str = ""
        self.treasury: str = ""
        self.name: str = ""

    ### Accessors ###
    @property
    def open_time(self) -> int:
        """Timestamp at which trading opened"""
        return self.market_state.open_time

    @property
    def close_time(self) -> int:
        """Timestamp at which trading stops"""
        return self.market_state.close_time

    @property
    def min_fee(self) -> FixedPoint:
        """Fee fraction at the open time"""
        return self.market_state.min_fee

    @property
    def max_fee(self) -> FixedPoint:
        """Fee fraction at the close time"""
        return self.market_state.max_fee

    @property
    def pool_a(self) -> FixedPoint:
        """A reserves"""
        return self.market_state.pool_a

    @property
    def pool_b(self) -> FixedPoint:
        """B reserves"""
        return self.market_state.pool_b

    @property
    def lp_total_supply(self) -> FixedPoint:
        """Outstanding LP shares"""
        return self.market_state.lp_total_supply

    @property
    def leverage(self) -> FixedPoint:
        """Settlement leverage"""
        return self.market_state.leverage

    @property
    def state(self) -> EpochState:
        """Lifecycle state"""
        return self.market_state.state

    def fee(self) -> FixedPoint:
        """Retained fee multiplier at the current block time"""
        return self.fee_schedule.fee_multiplier(self.open_time, self.close_time, self.block_time.time)

    ### Lifecycle ###
    def initialize(
        self,
        wallet_address: str,
        base_token: Token,
        yield_source: YieldSource,
        asset: str,
        treasury: str,
        name: str,
        leverage: FixedPoint,
        duration: int,
        seed_a: FixedPoint,
        seed_b: FixedPoint,
    ) -> tuple[Token, Token, Token]:
        r"""Open the epoch and seed the pools.

        The initializer deposits ``max(seed_a, seed_b)`` base and receives that many LP shares.
        The pools take ``seed_a`` A and ``seed_b`` B out of the minted pairs and the unmatched
        leg is minted to the initializer.

        Returns
        -------
        tuple[Token, Token, Token]
            The A, B and LP ledgers created for this market.
        """
        epoch.check_can_initialize(self.market_state.state)
        if seed_a <= ZERO or seed_b <= ZERO:
            raise ValueError(f"seed reserves must be positive, not {seed_a=}, {seed_b=}")
        if duration < 0:
            raise ValueError(f"duration must be non-negative, not {duration}")
        if leverage < ZERO:
            raise ValueError(f"leverage must be non-negative, not {leverage}")
        now = self.block_time.time
        seed = max(seed_a, seed_b)
        base_token.require_balance(wallet_address, seed)
        self.base_token = base_token
        self.yield_source = yield_source
        self.asset = asset
        self.treasury = treasury
        self.name = name
        self.a_token = Token(f"iGain A token {name}", f"iG-A {name}", decimals=base_token.decimals)
        self.b_token = Token(f"iGain B token {name}", f"iG-B {name}", decimals=base_token.decimals)
        self.lp_token = Token(f"iGain LP token {name}", f"iGLP {name}", decimals=base_token.decimals)
        self.market_state = MarketState(
            pool_a=seed_a,
            pool_b=seed_b,
            lp_total_supply=seed,
            open_time=now,
            close_time=now + int(duration),
            min_fee=self.config.min_fee,
            max_fee=self.config.max_fee,
            leverage=leverage,
            state=EpochState.OPEN,
            start_income_index=yield_source.normalized_income(),
        )
        base_token.transfer(wallet_address, self.address, seed)
        self.a_token.mint(wallet_address, seed - seed_a)
        self.b_token.mint(wallet_address, seed - seed_b)
        self.lp_token.mint(wallet_address, seed)
        logging.info(
            "initialized %s at %d for %d seconds with pool_a=%s, pool_b=%s, leverage=%s",
            name,
            now,
            duration,
            seed_a,
            seed_b,
            leverage,
        )
        return self.a_token, self.b_token, self.lp_token

    def close(self) -> tuple[FixedPoint, FixedPoint]:
        """Stop trading and fix the settlement prices from the yield accrued since initialize.

        Returns
        -------
        tuple[FixedPoint, FixedPoint]
            The settled price of one A and one B.
        """
        epoch.check_can_close(self.market_state.state, self.market_state.close_time, self.block_time.time)
        assert self.yield_source is not None, "an open market always has a yield source"
        yield_accrued = calc_yield_accrued(self.market_state.start_income_index, self.yield_source.normalized_income())
        price_a, price_b = self.settlement.settle(
            self.market_state.pool_a, self.market_state.pool_b, self.market_state.leverage, yield_accrued
        )
        new_state = self.market_state.copy()
        new_state.state = EpochState.CLOSED
        new_state.price_a = price_a
        new_state.price_b = price_b
        self.market_state = new_state
        logging.info("closed %s at %d", self.name, self.block_time.time)
        return price_a, price_b

    def claim(self, wallet_address: str) -> FixedPoint:
        r"""Redeem everything the wallet holds at the settled prices.

        LP shares are first converted into their slice of both pools, then all A and B are burned
        and ``a * price_a + b * price_b`` base is paid out.
        """
        epoch.check_can_claim(self.market_state.state)
        lp_in = self.lp_token.balance_of(wallet_address)
        lp_a, lp_b = ZERO, ZERO
        if lp_in > ZERO:
            lp_a = from_scaled(
                mul_div_down(
                    self.market_state.pool_a.scaled_value,
                    lp_in.scaled_value,
                    self.market_state.lp_total_supply.scaled_value,
                )
            )
            lp_b = from_scaled(
                mul_div_down(
                    self.market_state.pool_b.scaled_value,
                    lp_in.scaled_value,
                    self.market_state.lp_total_supply.scaled_value,
                )
            )
        held_a = self.a_token.balance_of(wallet_address)
        held_b = self.b_token.balance_of(wallet_address)
        total_a = held_a + lp_a
        total_b = held_b + lp_b
        amount = from_scaled(
            (
                total_a.scaled_value * self.market_state.price_a.scaled_value
                + total_b.scaled_value * self.market_state.price_b.scaled_value
            )
            // ONE_18
        )
        self.base_token.require_balance(self.address, amount)
        new_state = self.market_state.copy()
        new_state.apply_delta(MarketDeltas(d_pool_a=-lp_a, d_pool_b=-lp_b, d_lp_total_supply=-lp_in))
        self.market_state = new_state
        self.lp_token.burn(wallet_address, lp_in)
        self.a_token.burn(wallet_address, held_a)
        self.b_token.burn(wallet_address, held_b)
        self.base_token.transfer(self.address, wallet_address, amount)
        logging.debug("%s claimed %s base for a=%s, b=%s", wallet_address, amount, total_a, total_b)
        return amount

    ### Pair mint and burn ###
    def mint(self, wallet_address: str, amount_in: FixedPoint) -> FixedPoint:
        """Deposit base for the same amount of A and of B; the pools are not touched"""
        self._check_trade()
        self._check_amount(amount_in)
        self.base_token.require_balance(wallet_address, amount_in)
        self.base_token.transfer(wallet_address, self.address, amount_in)
        self.a_token.mint(wallet_address, amount_in)
        self.b_token.mint(wallet_address, amount_in)
        return amount_in

    def burn(self, wallet_address: str, amount_in: FixedPoint) -> FixedPoint:
        """Redeem the same amount of A and of B for base; the inverse of mint"""
        self._check_trade()
        self._check_amount(amount_in)
        self.a_token.require_balance(wallet_address, amount_in)
        self.b_token.require_balance(wallet_address, amount_in)
        self.base_token.require_balance(self.address, amount_in)
        self.a_token.burn(wallet_address, amount_in)
        self.b_token.burn(wallet_address, amount_in)
        self.base_token.transfer(self.address, wallet_address, amount_in)
        return amount_in

    ### Single-sided mints ###
    def mint_a(self, wallet_address: str, amount_in: FixedPoint, min_out: FixedPoint) -> FixedPoint:
        """Deposit base and take the whole credit as A by selling the B leg into the curve"""
        return self._mint_single(wallet_address, amount_in, min_out, out_is_a=True)

    def mint_b(self, wallet_address: str, amount_in: FixedPoint, min_out: FixedPoint) -> FixedPoint:
        """Deposit base and take the whole credit as B by selling the A leg into the curve"""
        return self._mint_single(wallet_address, amount_in, min_out, out_is_a=False)

    def mint_exact_a(self, wallet_address: str, desired_out: FixedPoint, max_in: FixedPoint) -> FixedPoint:
        """Mint exactly desired_out A for the smallest base deposit, which must not exceed max_in"""
        return self._mint_single_exact(wallet_address, desired_out, max_in, out_is_a=True)

    def mint_exact_b(self, wallet_address: str, desired_out: FixedPoint, max_in: FixedPoint) -> FixedPoint:
        """Mint exactly desired_out B for the smallest base deposit, which must not exceed max_in"""
        return self._mint_single_exact(wallet_address, desired_out, max_in, out_is_a=False)

    def _mint_single(
        self, wallet_address: str, amount_in: FixedPoint, min_out: FixedPoint, out_is_a: bool
    ) -> FixedPoint:
        fee = self._check_trade()
        self._check_amount(amount_in)
        pool_in, pool_out = self._pools(out_is_a)
        amount_out = self.pricing_model.calc_mint_out_given_in(amount_in, pool_in, pool_out, fee)
        if amount_out < min_out:
            raise SlippageError()
        self.base_token.require_balance(wallet_address, amount_in)
        self._commit(self._deltas(out_is_a, d_pool_in=amount_in, d_pool_out=amount_in - amount_out))
        self.base_token.transfer(wallet_address, self.address, amount_in)
        self._token(out_is_a).mint(wallet_address, amount_out)
        return amount_out

    def _mint_single_exact(
        self, wallet_address: str, desired_out: FixedPoint, max_in: FixedPoint, out_is_a: bool
    ) -> FixedPoint:
        fee = self._check_trade()
        self._check_amount(desired_out)
        pool_in, pool_out = self._pools(out_is_a)
        amount_in = self.pricing_model.calc_mint_in_given_out(desired_out, pool_in, pool_out, fee)
        if amount_in > max_in:
            raise SlippageError()
        if self.pricing_model.calc_mint_out_given_in(amount_in, pool_in, pool_out, fee) < desired_out:
            raise SlippageError()
        self.base_token.require_balance(wallet_address, amount_in)
        self._commit(self._deltas(out_is_a, d_pool_in=amount_in, d_pool_out=amount_in - desired_out))
        self.base_token.transfer(wallet_address, self.address, amount_in)
        self._token(out_is_a).mint(wallet_address, desired_out)
        return amount_in

    ### Single-sided burns ###
    def burn_a(self, wallet_address: str, amount_in: FixedPoint, min_out: FixedPoint) -> FixedPoint:
        """Burn A for base, selling part of it into the curve to pair with B"""
        return self._burn_single(wallet_address, amount_in, min_out, in_is_a=True)

    def burn_b(self, wallet_address: str, amount_in: FixedPoint, min_out: FixedPoint) -> FixedPoint:
        """Burn B for base, selling part of it into the curve to pair with A"""
        return self._burn_single(wallet_address, amount_in, min_out, in_is_a=False)

    def _burn_single(
        self, wallet_address: str, amount_in: FixedPoint, min_out: FixedPoint, in_is_a: bool
    ) -> FixedPoint:
        fee = self._check_trade()
        self._check_amount(amount_in)
        # the unpaired part of the burn is sold into its own pool, the paired tokens come from the other
        pool_in, pool_out = self._pools(out_is_a=not in_is_a)
        base_out = self.pricing_model.calc_burn_out_given_in(amount_in, pool_in, pool_out, fee)
        if base_out < min_out:
            raise SlippageError()
        self._token(in_is_a).require_balance(wallet_address, amount_in)
        self.base_token.require_balance(self.address, base_out)
        self._commit(self._deltas(not in_is_a, d_pool_in=amount_in - base_out, d_pool_out=-base_out))
        self._token(in_is_a).burn(wallet_address, amount_in)
        self.base_token.transfer(self.address, wallet_address, base_out)
        return base_out

    ### Swaps ###
    def swap_a_to_b(self, wallet_address: str, amount_in: FixedPoint, min_out: FixedPoint) -> FixedPoint:
        """Sell A for B on the curve"""
        return self._swap(wallet_address, amount_in, min_out, in_is_a=True)

    def swap_b_to_a(self, wallet_address: str, amount_in: FixedPoint, min_out: FixedPoint) -> FixedPoint:
        """Sell B for A on the curve"""
        return self._swap(wallet_address, amount_in, min_out, in_is_a=False)

    def _swap(self, wallet_address: str, amount_in: FixedPoint, min_out: FixedPoint, in_is_a: bool) -> FixedPoint:
        fee = self._check_trade()
        self._check_amount(amount_in)
        # selling A means the B pool pays out, the same orientation as a mint of B
        pool_in, pool_out = self._pools(out_is_a=not in_is_a)
        amount_out = self.pricing_model.calc_swap_out_given_in(amount_in, pool_in, pool_out, fee)
        if amount_out < min_out:
            raise SlippageError()
        self._token(in_is_a).require_balance(wallet_address, amount_in)
        self._commit(self._deltas(not in_is_a, d_pool_in=amount_in, d_pool_out=-amount_out))
        self._token(in_is_a).burn(wallet_address, amount_in)
        self._token(not in_is_a).mint(wallet_address, amount_out)
        return amount_out

    ### Liquidity ###
    def mint_lp(self, wallet_address: str, amount_in: FixedPoint, min_out: FixedPoint) -> FixedPoint:
        """Deposit base into both pools for LP shares, discounted by the current fee"""
        fee = self._check_trade()
        self._check_amount(amount_in)
        self._check_lp_supply()
        lp_out = self.pricing_model.calc_lp_out_given_base_in(
            amount_in, self.market_state.pool_a, self.market_state.pool_b, self.market_state.lp_total_supply, fee
        )
        if lp_out < min_out:
            raise SlippageError()
        self.base_token.require_balance(wallet_address, amount_in)
        self._commit(MarketDeltas(d_pool_a=amount_in, d_pool_b=amount_in, d_lp_total_supply=lp_out))
        self.base_token.transfer(wallet_address, self.address, amount_in)
        self.lp_token.mint(wallet_address, lp_out)
        return lp_out

    def burn_lp(self, wallet_address: str, lp_in: FixedPoint, min_out: FixedPoint) -> FixedPoint:
        """Redeem LP shares for base withdrawn equally from both pools, discounted by the current fee"""
        fee = self._check_trade()
        self._check_amount(lp_in)
        self.lp_token.require_balance(wallet_address, lp_in)
        base_out = self.pricing_model.calc_base_out_given_lp_in(
            lp_in, self.market_state.pool_a, self.market_state.pool_b, self.market_state.lp_total_supply, fee
        )
        if base_out < min_out:
            raise SlippageError()
        self.base_token.require_balance(self.address, base_out)
        self._commit(MarketDeltas(d_pool_a=-base_out, d_pool_b=-base_out, d_lp_total_supply=-lp_in))
        self.lp_token.burn(wallet_address, lp_in)
        self.base_token.transfer(self.address, wallet_address, base_out)
        return base_out

    def deposit_lp(
        self, wallet_address: str, amount_a: FixedPoint, amount_b: FixedPoint, min_lp: FixedPoint
    ) -> FixedPoint:
        """Add A and B to the pools for LP shares, fee free"""
        self._check_trade()
        self._check_amount(amount_a)
        self._check_amount(amount_b)
        self._check_lp_supply()
        lp_out = self.pricing_model.calc_lp_out_given_tokens_in(
            amount_a, amount_b, self.market_state.pool_a, self.market_state.pool_b, self.market_state.lp_total_supply
        )
        if lp_out < min_lp:
            raise SlippageError()
        self.a_token.require_balance(wallet_address, amount_a)
        self.b_token.require_balance(wallet_address, amount_b)
        self._commit(MarketDeltas(d_pool_a=amount_a, d_pool_b=amount_b, d_lp_total_supply=lp_out))
        self.a_token.burn(wallet_address, amount_a)
        self.b_token.burn(wallet_address, amount_b)
        self.lp_token.mint(wallet_address, lp_out)
        return lp_out

    def withdraw_lp(
        self, wallet_address: str, amount_a: FixedPoint, amount_b: FixedPoint, max_lp: FixedPoint
    ) -> FixedPoint:
        """Take A and B out of the pools by burning LP shares, fee free"""
        self._check_trade()
        self._check_amount(amount_a)
        self._check_amount(amount_b)
        if amount_a >= self.market_state.pool_a or amount_b >= self.market_state.pool_b:
            raise InsufficientLiquidityError(
                f"cannot withdraw {amount_a=}, {amount_b=} "
                f"from pool_a={self.market_state.pool_a}, pool_b={self.market_state.pool_b}"
            )
        lp_in = self.pricing_model.calc_lp_in_given_tokens_out(
            amount_a, amount_b, self.market_state.pool_a, self.market_state.pool_b, self.market_state.lp_total_supply
        )
        if lp_in > max_lp:
            raise SlippageError()
        self.lp_token.require_balance(wallet_address, lp_in)
        self._commit(MarketDeltas(d_pool_a=-amount_a, d_pool_b=-amount_b, d_lp_total_supply=-lp_in))
        self.lp_token.burn(wallet_address, lp_in)
        self.a_token.mint(wallet_address, amount_a)
        self.b_token.mint(wallet_address, amount_b)
        return lp_in

    ### Dispatch ###
    def perform_action(self, wallet_address: str, action: MarketAction) -> FixedPoint:
        r"""Execute a typed market action and return the realized amount"""
        # pylint: disable=too-many-return-statements
        action_type = action.action_type
        if action_type == MarketActionType.MINT:
            return self.mint(wallet_address, action.trade_amount)
        if action_type == MarketActionType.BURN:
            return self.burn(wallet_address, action.trade_amount)
        if action_type == MarketActionType.MINT_A:
            return self.mint_a(wallet_address, action.trade_amount, action.bound)
        if action_type == MarketActionType.MINT_EXACT_A:
            return self.mint_exact_a(wallet_address, action.trade_amount, action.bound)
        if action_type == MarketActionType.MINT_B:
            return self.mint_b(wallet_address, action.trade_amount, action.bound)
        if action_type == MarketActionType.MINT_EXACT_B:
            return self.mint_exact_b(wallet_address, action.trade_amount, action.bound)
        if action_type == MarketActionType.BURN_A:
            return self.burn_a(wallet_address, action.trade_amount, action.bound)
        if action_type == MarketActionType.BURN_B:
            return self.burn_b(wallet_address, action.trade_amount, action.bound)
        if action_type == MarketActionType.SWAP_A_TO_B:
            return self.swap_a_to_b(wallet_address, action.trade_amount, action.bound)
        if action_type == MarketActionType.SWAP_B_TO_A:
            return self.swap_b_to_a(wallet_address, action.trade_amount, action.bound)
        if action_type == MarketActionType.MINT_LP:
            return self.mint_lp(wallet_address, action.trade_amount, action.bound)
        if action_type == MarketActionType.BURN_LP:
            return self.burn_lp(wallet_address, action.trade_amount, action.bound)
        if action_type == MarketActionType.DEPOSIT_LP:
            return self.deposit_lp(wallet_address, action.trade_amount, action.second_amount, action.bound)
        if action_type == MarketActionType.WITHDRAW_LP:
            return self.withdraw_lp(wallet_address, action.trade_amount, action.second_amount, action.bound)
        if action_type == MarketActionType.CLAIM:
            return self.claim(wallet_address)
        raise ValueError(f'ERROR: Unknown action type "{action_type}".')

    ### Internals ###
    def _check_trade(self) -> FixedPoint:
        """Gate a trade on the epoch and return the fee multiplier at this call's block time"""
        now = self.block_time.time
        epoch.check_can_trade(self.market_state.state, self.market_state.close_time, now)
        return self.fee_schedule.fee_multiplier(self.market_state.open_time, self.market_state.close_time, now)

    @staticmethod
    def _check_amount(amount: FixedPoint) -> None:
        if amount < ZERO:
            raise ValueError(f"amounts must be non-negative, not {amount}")

    def _check_lp_supply(self) -> None:
        """Shares are priced against the outstanding supply, so an emptied supply cannot take deposits"""
        if self.market_state.lp_total_supply <= ZERO:
            raise InsufficientLiquidityError("every LP share has been redeemed, deposits would mint nothing")

    def _pools(self, out_is_a: bool) -> tuple[FixedPoint, FixedPoint]:
        """(pool_in, pool_out) for a trade that pays out A when out_is_a, else B"""
        if out_is_a:
            return self.market_state.pool_b, self.market_state.pool_a
        return self.market_state.pool_a, self.market_state.pool_b

    @staticmethod
    def _deltas(out_is_a: bool, d_pool_in: FixedPoint, d_pool_out: FixedPoint) -> MarketDeltas:
        if out_is_a:
            return MarketDeltas(d_pool_a=d_pool_out, d_pool_b=d_pool_in)
        return MarketDeltas(d_pool_a=d_pool_in, d_pool_b=d_pool_out)

    def _token(self, is_a: bool) -> Token:
        return self.a_token if is_a else self.b_token

    def _commit(self, delta: MarketDeltas) -> None:
        """Apply delta to a copy of the state and swap it in, refusing to empty a pool"""
        pool_a = self.market_state.pool_a + delta.d_pool_a
        pool_b = self.market_state.pool_b + delta.d_pool_b
        if pool_a <= ZERO or pool_b <= ZERO:
            raise InsufficientLiquidityError(f"trade would leave {pool_a=}, {pool_b=}")
        new_state = self.market_state.copy()
        new_state.apply_delta(delta)
        logging.debug("%s\npre_trade_market=%s", delta, self.market_state)
        self.market_state = new_state
