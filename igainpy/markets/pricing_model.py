"""The constant-product bonding curve shared by the A and B tokens.

One unit of base always mints one A and one B, so every A/B trade is a trade on the curve
:math:`x y = k` where :math:`x` and :math:`y` are the A and B pools.  All of the functions below
work on scaled integers and floor every division, so results favor the pool.
"""
from __future__ import annotations  # types will be strings by default in 3.11

import logging

from fixedpointmath import FixedPoint

from igainpy.math import ONE_18, div_up, from_scaled, sqrt_floor


def calc_swap_out(amount_in: int, pool_in: int, pool_out: int, fee: int) -> int:
    r"""Output of selling amount_in into pool_in for tokens from pool_out.

    .. math::
        out = \dfrac{\Delta x \cdot r \cdot y}{x \cdot 10^{18} + \Delta x \cdot r}
    """
    amount_in_with_fee = amount_in * fee
    return amount_in_with_fee * pool_out // (pool_in * ONE_18 + amount_in_with_fee)


def calc_mint_out(amount_in: int, pool_in: int, pool_out: int, fee: int) -> int:
    r"""Single-sided mint: deposit amount_in base, keep the pool_out leg and sell the pool_in leg.

    For mint_a the B leg is sold, so ``pool_in`` is the B pool and ``pool_out`` the A pool;
    mint_b calls this with the pools swapped.
    """
    return amount_in + calc_swap_out(amount_in, pool_in, pool_out, fee)


def calc_mint_in(desired_out: int, pool_in: int, pool_out: int, fee: int) -> int:
    r"""Smallest base deposit whose single-sided mint yields at least desired_out.

    Since ``floor(v) >= n`` is the same as ``v >= n`` for integer ``n``, the condition
    ``calc_mint_out(x) >= D`` is exactly the quadratic

    .. math::
        r x^2 + (10^{18} x_{in} + r (y_{out} - D)) x - 10^{18} D x_{in} \geq 0

    The positive root seeds the answer; the forward formula then settles the last unit so that the
    result always agrees with calc_mint_out.
    """
    if desired_out <= 0:
        return 0
    if fee == 0:
        return desired_out
    b = pool_in * ONE_18 + fee * (pool_out - desired_out)
    discriminant = b * b + 4 * fee * desired_out * pool_in * ONE_18
    amount_in = max((sqrt_floor(discriminant) - b) // (2 * fee), 0)
    amount_in = min(amount_in, desired_out)
    while calc_mint_out(amount_in, pool_in, pool_out, fee) < desired_out:
        amount_in += 1
    while amount_in > 0 and calc_mint_out(amount_in - 1, pool_in, pool_out, fee) >= desired_out:
        amount_in -= 1
    return amount_in


def calc_burn_out(amount_in: int, pool_in: int, pool_out: int, fee: int) -> int:
    r"""Base paid for burning amount_in of the token whose pool is pool_in.

    Part of the burned tokens are sold into the curve for the other token, and every matched pair is
    redeemed for one base.  The payout ``p`` is the largest integer with
    ``calc_swap_out(amount_in - p, pool_in, pool_out) >= p``, which is the smaller root of

    .. math::
        r p^2 - (r y_{out} + 10^{18} x_{in} + r \Delta) p + r \Delta y_{out} \geq 0
    """
    if amount_in <= 0 or fee == 0:
        return 0
    b = fee * pool_out + pool_in * ONE_18 + amount_in * fee
    discriminant = b * b - 4 * fee * fee * amount_in * pool_out
    payout = (b - sqrt_floor(discriminant)) // (2 * fee)
    payout = min(max(payout, 0), amount_in)
    while payout > 0 and calc_swap_out(amount_in - payout, pool_in, pool_out, fee) < payout:
        payout -= 1
    while payout < amount_in and calc_swap_out(amount_in - payout - 1, pool_in, pool_out, fee) >= payout + 1:
        payout += 1
    return payout


def calc_lp_out_given_base_in(amount_in: int, pool_a: int, pool_b: int, lp_total_supply: int, fee: int) -> int:
    r"""LP shares for depositing amount_in base into both pools.

    .. math::
        g = \dfrac{\sqrt{(x + \Delta)(y + \Delta)} \cdot 10^{18}}{\sqrt{x y}}, \qquad
        lp = (g - 10^{18}) \dfrac{S}{10^{18}} \dfrac{r}{10^{18}}
    """
    growth = sqrt_floor((pool_a + amount_in) * (pool_b + amount_in)) * ONE_18 // sqrt_floor(pool_a * pool_b)
    return (growth - ONE_18) * lp_total_supply // ONE_18 * fee // ONE_18


def calc_base_out_given_lp_in(lp_in: int, pool_a: int, pool_b: int, lp_total_supply: int, fee: int) -> int:
    r"""Base paid for redeeming lp_in shares, withdrawn equally from both pools.

    The fee-discounted share ``s = lp_in * r / S`` of the invariant's square root leaves the pool,
    so the payout is the largest ``x`` with

    .. math::
        \lfloor\sqrt{(x_a - x)(x_b - x)}\rfloor \geq \Big\lceil \sqrt{x_a x_b} (1 - s) \Big\rceil

    Neither pool is ever emptied.
    """
    if lp_in <= 0:
        return 0
    share = min(lp_in * fee // lp_total_supply, ONE_18)
    target = div_up(sqrt_floor(pool_a * pool_b) * (ONE_18 - share), ONE_18)
    target_product = target * target
    max_out = min(pool_a, pool_b) - 1
    discriminant = (pool_a - pool_b) ** 2 + 4 * target_product
    payout = (pool_a + pool_b - sqrt_floor(discriminant)) // 2
    payout = min(max(payout, 0), max_out)
    while payout > 0 and (pool_a - payout) * (pool_b - payout) < target_product:
        payout -= 1
    while payout < max_out and (pool_a - payout - 1) * (pool_b - payout - 1) >= target_product:
        payout += 1
    return payout


def calc_lp_out_given_tokens_in(amount_a: int, amount_b: int, pool_a: int, pool_b: int, lp_total_supply: int) -> int:
    """Fee-free LP shares for depositing both legs, limited by the scarcer side."""
    return min(amount_a * lp_total_supply // pool_a, amount_b * lp_total_supply // pool_b)


def calc_lp_in_given_tokens_out(amount_a: int, amount_b: int, pool_a: int, pool_b: int, lp_total_supply: int) -> int:
    """Fee-free LP shares burned to withdraw both legs, rounded up in favor of the pool."""
    return max(div_up(amount_a * lp_total_supply, pool_a), div_up(amount_b * lp_total_supply, pool_b))


class BondingCurvePricingModel:
    """Bonding Curve Pricing Model

    FixedPoint front end to the integer curve functions in this module.  ``pool_in`` is always the
    pool that receives the sold tokens and ``pool_out`` the pool that pays out, so the A and B
    versions of each trade are the same call with the pools swapped.
    """

    def model_name(self) -> str:
        """Unique name given to the model, can be based on member variable states"""
        return "Bonding Curve"

    def model_type(self) -> str:
        """Unique identifier given to the model, should be lower snake_cased name"""
        return "bonding_curve"

    def calc_swap_out_given_in(
        self, amount_in: FixedPoint, pool_in: FixedPoint, pool_out: FixedPoint, fee: FixedPoint
    ) -> FixedPoint:
        """Tokens out of pool_out for selling amount_in into pool_in"""
        return from_scaled(
            calc_swap_out(amount_in.scaled_value, pool_in.scaled_value, pool_out.scaled_value, fee.scaled_value)
        )

    def calc_mint_out_given_in(
        self, amount_in: FixedPoint, pool_in: FixedPoint, pool_out: FixedPoint, fee: FixedPoint
    ) -> FixedPoint:
        """Tokens received for a single-sided mint of amount_in base"""
        return from_scaled(
            calc_mint_out(amount_in.scaled_value, pool_in.scaled_value, pool_out.scaled_value, fee.scaled_value)
        )

    def calc_mint_in_given_out(
        self, desired_out: FixedPoint, pool_in: FixedPoint, pool_out: FixedPoint, fee: FixedPoint
    ) -> FixedPoint:
        """Base required for a single-sided mint of at least desired_out tokens"""
        amount_in = calc_mint_in(
            desired_out.scaled_value, pool_in.scaled_value, pool_out.scaled_value, fee.scaled_value
        )
        logging.debug("mint of %s out needs %d in (pool_in=%s, pool_out=%s)", desired_out, amount_in, pool_in, pool_out)
        return from_scaled(amount_in)

    def calc_burn_out_given_in(
        self, amount_in: FixedPoint, pool_in: FixedPoint, pool_out: FixedPoint, fee: FixedPoint
    ) -> FixedPoint:
        """Base paid for a single-sided burn of amount_in tokens"""
        return from_scaled(
            calc_burn_out(amount_in.scaled_value, pool_in.scaled_value, pool_out.scaled_value, fee.scaled_value)
        )

    def calc_lp_out_given_base_in(
        self,
        amount_in: FixedPoint,
        pool_a: FixedPoint,
        pool_b: FixedPoint,
        lp_total_supply: FixedPoint,
        fee: FixedPoint,
    ) -> FixedPoint:
        """LP shares for a base deposit into both pools"""
        return from_scaled(
            calc_lp_out_given_base_in(
                amount_in.scaled_value,
                pool_a.scaled_value,
                pool_b.scaled_value,
                lp_total_supply.scaled_value,
                fee.scaled_value,
            )
        )

    def calc_base_out_given_lp_in(
        self,
        lp_in: FixedPoint,
        pool_a: FixedPoint,
        pool_b: FixedPoint,
        lp_total_supply: FixedPoint,
        fee: FixedPoint,
    ) -> FixedPoint:
        """Base paid for redeeming LP shares"""
        return from_scaled(
            calc_base_out_given_lp_in(
                lp_in.scaled_value,
                pool_a.scaled_value,
                pool_b.scaled_value,
                lp_total_supply.scaled_value,
                fee.scaled_value,
            )
        )

    def calc_lp_out_given_tokens_in(
        self,
        amount_a: FixedPoint,
        amount_b: FixedPoint,
        pool_a: FixedPoint,
        pool_b: FixedPoint,
        lp_total_supply: FixedPoint,
    ) -> FixedPoint:
        """LP shares for depositing A and B directly"""
        return from_scaled(
            calc_lp_out_given_tokens_in(
                amount_a.scaled_value,
                amount_b.scaled_value,
                pool_a.scaled_value,
                pool_b.scaled_value,
                lp_total_supply.scaled_value,
            )
        )

    def calc_lp_in_given_tokens_out(
        self,
        amount_a: FixedPoint,
        amount_b: FixedPoint,
        pool_a: FixedPoint,
        pool_b: FixedPoint,
        lp_total_supply: FixedPoint,
    ) -> FixedPoint:
        """LP shares burned to withdraw A and B directly"""
        return from_scaled(
            calc_lp_in_given_tokens_out(
                amount_a.scaled_value,
                amount_b.scaled_value,
                pool_a.scaled_value,
                pool_b.scaled_value,
                lp_total_supply.scaled_value,
            )
        )
