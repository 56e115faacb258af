"""Testing for burns, swaps and liquidity operations on the market"""
import unittest

from fixedpointmath import FixedPoint

from igainpy.errors import InsufficientBalanceError, InsufficientLiquidityError, SlippageError
from igainpy.markets import FixedPriceSettlement
from igainpy.markets.pricing_model import calc_swap_out
from igainpy.math import ONE_18, div_up, from_scaled
from tests.utils_for_tests import OPERATOR, USER, setup_market

ZERO = FixedPoint("0.0")


class MarketTradeTestCase(unittest.TestCase):
    """Market seeded with 1000 of each pool, 30 minutes into the epoch"""

    def setUp(self):
        self.market, self.base = setup_market(
            seed_a=FixedPoint("1000.0"), seed_b=FixedPoint("1000.0"), min_fee=FixedPoint("0.003")
        )
        self.market.block_time.tick(1800)

    def snapshot(self) -> tuple:
        """Everything a failed call must leave untouched"""
        return (
            self.market.pool_a,
            self.market.pool_b,
            self.market.lp_total_supply,
            self.base.balance_of(USER),
            self.base.balance_of(self.market.address),
            self.market.a_token.balance_of(USER),
            self.market.b_token.balance_of(USER),
            self.market.lp_token.balance_of(USER),
        )

    def held_base_matches_supply(self) -> bool:
        """Base held covers the A supply plus the A pool, and likewise for B"""
        held = self.base.balance_of(self.market.address)
        return (
            held == self.market.a_token.total_supply + self.market.pool_a
            and held == self.market.b_token.total_supply + self.market.pool_b
        )


class TestBurn(MarketTradeTestCase):
    """Single-sided burns"""

    def test_burn_a_payout_is_largest_matched_pair(self):
        """The payout is the most base whose pair can be bought with the rest of the burn"""
        self.market.mint_a(USER, FixedPoint("20.0"), ZERO)
        amount = FixedPoint("10.0")
        fee = self.market.fee().scaled_value
        pool_a = self.market.pool_a.scaled_value
        pool_b = self.market.pool_b.scaled_value
        invariant = self.market.market_state.invariant
        base_out = self.market.burn_a(USER, amount, ZERO).scaled_value
        amount_in = amount.scaled_value
        self.assertGreater(base_out, 0)
        self.assertLessEqual(base_out, amount_in)
        self.assertGreaterEqual(calc_swap_out(amount_in - base_out, pool_a, pool_b, fee), base_out)
        self.assertLess(calc_swap_out(amount_in - base_out - 1, pool_a, pool_b, fee), base_out + 1)
        self.assertGreaterEqual(self.market.market_state.invariant, invariant)
        self.assertTrue(self.held_base_matches_supply())

    def test_burn_b_moves_pools(self):
        """burn_b adds the unpaired B to the B pool and takes the paired A out of the A pool"""
        self.market.mint_b(USER, FixedPoint("20.0"), ZERO)
        pool_a, pool_b = self.market.pool_a, self.market.pool_b
        amount = FixedPoint("10.0")
        base_out = self.market.burn_b(USER, amount, ZERO)
        self.assertEqual(self.market.pool_b, pool_b + amount - base_out)
        self.assertEqual(self.market.pool_a, pool_a - base_out)
        self.assertTrue(self.held_base_matches_supply())

    def test_burn_a_and_burn_b_of_a_pair_pay_at_most_the_pair(self):
        """Burning a minted pair one leg at a time never pays more than burning the pair"""
        self.market.mint(USER, FixedPoint("10.0"))
        out_a = self.market.burn_a(USER, FixedPoint("10.0"), ZERO)
        out_b = self.market.burn_b(USER, FixedPoint("10.0"), ZERO)
        self.assertLessEqual(out_a + out_b, FixedPoint("10.0"))

    def test_burn_slippage(self):
        """A min_out above the payout is refused without side effects"""
        self.market.mint_a(USER, FixedPoint("20.0"), ZERO)
        quote = self.market.pricing_model.calc_burn_out_given_in(
            FixedPoint("10.0"), self.market.pool_a, self.market.pool_b, self.market.fee()
        )
        before = self.snapshot()
        with self.assertRaises(SlippageError):
            self.market.burn_a(USER, FixedPoint("10.0"), quote + from_scaled(1))
        self.assertEqual(self.snapshot(), before)

    def test_burn_more_than_held(self):
        """Burning more than the wallet holds is refused without side effects"""
        self.market.mint_a(USER, FixedPoint("1.0"), ZERO)
        before = self.snapshot()
        with self.assertRaises(InsufficientBalanceError):
            self.market.burn_a(USER, FixedPoint("5.0"), ZERO)
        self.assertEqual(self.snapshot(), before)

    def test_pair_burn_inverts_pair_mint(self):
        """burn returns the market and the wallet to where mint found them"""
        before = self.snapshot()
        self.market.mint(USER, FixedPoint("3.0"))
        self.assertEqual(self.market.burn(USER, FixedPoint("3.0")), FixedPoint("3.0"))
        self.assertEqual(self.snapshot(), before)

    def test_pair_mint_leaves_the_curve_alone(self):
        """mint moves base and both legs without touching the pools or the invariant"""
        pool_a, pool_b = self.market.pool_a, self.market.pool_b
        invariant = self.market.market_state.invariant
        self.market.mint(USER, FixedPoint("10.0"))
        self.assertEqual((self.market.pool_a, self.market.pool_b), (pool_a, pool_b))
        self.assertEqual(self.market.market_state.invariant, invariant)
        self.assertTrue(self.held_base_matches_supply())


class TestSwap(MarketTradeTestCase):
    """Swaps in both directions"""

    def test_swap_a_to_b(self):
        """Swapping pays the closed-form output and never lowers the invariant"""
        self.market.mint_a(USER, FixedPoint("20.0"), ZERO)
        fee = self.market.fee().scaled_value
        pool_a = self.market.pool_a.scaled_value
        pool_b = self.market.pool_b.scaled_value
        amount = FixedPoint("5.0").scaled_value
        expected = amount * fee * pool_b // (pool_a * ONE_18 + amount * fee)
        invariant = self.market.market_state.invariant
        amount_out = self.market.swap_a_to_b(USER, FixedPoint("5.0"), from_scaled(expected))
        self.assertEqual(amount_out, from_scaled(expected))
        self.assertEqual(self.market.b_token.balance_of(USER), amount_out)
        self.assertEqual(self.market.pool_a, from_scaled(pool_a + amount))
        self.assertEqual(self.market.pool_b, from_scaled(pool_b - expected))
        self.assertGreaterEqual(self.market.market_state.invariant, invariant)
        self.assertTrue(self.held_base_matches_supply())

    def test_swap_b_to_a_round_trip_loses(self):
        """Swapping out and back never returns more than was put in"""
        self.market.mint_b(USER, FixedPoint("20.0"), ZERO)
        held_b = self.market.b_token.balance_of(USER)
        amount_a = self.market.swap_b_to_a(USER, FixedPoint("5.0"), ZERO)
        amount_b = self.market.swap_a_to_b(USER, amount_a, ZERO)
        self.assertLessEqual(amount_b, FixedPoint("5.0"))
        self.assertEqual(self.market.b_token.balance_of(USER), held_b - FixedPoint("5.0") + amount_b)

    def test_swap_slippage(self):
        """A min_out above the quote is refused without side effects"""
        self.market.mint_b(USER, FixedPoint("20.0"), ZERO)
        before = self.snapshot()
        with self.assertRaises(SlippageError):
            self.market.swap_b_to_a(USER, FixedPoint("5.0"), FixedPoint("10.0"))
        self.assertEqual(self.snapshot(), before)


class TestInvariant(MarketTradeTestCase):
    """The pool product never shrinks across single-sided mints and swaps"""

    def assert_invariant_kept(self, trade, *args):
        invariant = self.market.market_state.invariant
        trade(USER, *args)
        self.assertGreaterEqual(self.market.market_state.invariant, invariant)
        self.assertTrue(self.held_base_matches_supply())

    def test_mint_a(self):
        self.assert_invariant_kept(self.market.mint_a, FixedPoint("25.0"), ZERO)

    def test_mint_b(self):
        self.assert_invariant_kept(self.market.mint_b, FixedPoint("25.0"), ZERO)

    def test_swap_b_to_a(self):
        self.market.mint_b(USER, FixedPoint("20.0"), ZERO)
        self.assert_invariant_kept(self.market.swap_b_to_a, FixedPoint("5.0"), ZERO)

    def test_mints_after_a_pair_mint(self):
        """Late in the epoch, with a pair already minted, every trade still keeps the product"""
        self.market.mint(USER, FixedPoint("10.0"))
        self.market.block_time.tick(40000)
        self.assert_invariant_kept(self.market.mint_a, FixedPoint("7.0"), ZERO)
        self.assert_invariant_kept(self.market.mint_b, FixedPoint("3.0"), ZERO)
        self.assert_invariant_kept(self.market.swap_b_to_a, FixedPoint("4.0"), ZERO)
        self.assert_invariant_kept(self.market.burn_a, FixedPoint("2.0"), ZERO)


class TestLiquidity(MarketTradeTestCase):
    """mint_lp, burn_lp, deposit_lp and withdraw_lp"""

    def test_mint_lp_then_burn_lp_pays_at_most_the_deposit(self):
        """Depositing base for LP and redeeming it straight away does not profit"""
        lp_out = self.market.mint_lp(USER, FixedPoint("50.0"), ZERO)
        self.assertGreater(lp_out, ZERO)
        base_out = self.market.burn_lp(USER, lp_out, ZERO)
        self.assertLessEqual(base_out, FixedPoint("50.0"))
        self.assertEqual(self.market.lp_token.balance_of(USER), ZERO)
        self.assertTrue(self.held_base_matches_supply())

    def test_burn_lp_keeps_pools_positive(self):
        """Redeeming every share still leaves both pools positive"""
        lp_in = self.market.lp_token.balance_of(OPERATOR)
        base_out = self.market.burn_lp(OPERATOR, lp_in, ZERO)
        self.assertLess(base_out, FixedPoint("1000.0"))
        self.assertGreater(self.market.pool_a, ZERO)
        self.assertGreater(self.market.pool_b, ZERO)

    def test_burn_lp_slippage_and_balance(self):
        """burn_lp refuses a high min_out and shares the wallet does not hold"""
        self.market.mint_lp(USER, FixedPoint("50.0"), ZERO)
        before = self.snapshot()
        with self.assertRaises(SlippageError):
            self.market.burn_lp(USER, self.market.lp_token.balance_of(USER), FixedPoint("50.0"))
        with self.assertRaises(InsufficientBalanceError):
            self.market.burn_lp(USER, FixedPoint("1000.0"), ZERO)
        self.assertEqual(self.snapshot(), before)

    def test_deposit_lp_is_limited_by_the_scarcer_leg(self):
        """LP shares follow the smaller of the two proportional contributions"""
        self.market.mint(USER, FixedPoint("10.0"))
        pool_a = self.market.pool_a.scaled_value
        pool_b = self.market.pool_b.scaled_value
        total_supply = self.market.lp_total_supply.scaled_value
        amount_a, amount_b = FixedPoint("10.0"), FixedPoint("4.0")
        expected = min(
            amount_a.scaled_value * total_supply // pool_a, amount_b.scaled_value * total_supply // pool_b
        )
        lp_out = self.market.deposit_lp(USER, amount_a, amount_b, from_scaled(expected))
        self.assertEqual(lp_out, from_scaled(expected))
        self.assertEqual(self.market.a_token.balance_of(USER), ZERO)
        self.assertEqual(self.market.b_token.balance_of(USER), FixedPoint("6.0"))
        self.assertEqual(self.market.pool_a, from_scaled(pool_a) + amount_a)
        self.assertEqual(self.market.lp_total_supply, from_scaled(total_supply + expected))

    def test_deposit_lp_slippage(self):
        """A min_lp above the quote is refused"""
        self.market.mint(USER, FixedPoint("10.0"))
        with self.assertRaises(SlippageError):
            self.market.deposit_lp(USER, FixedPoint("10.0"), FixedPoint("10.0"), FixedPoint("10.0"))

    def test_withdraw_lp_burns_shares_rounded_up(self):
        """withdraw_lp burns the larger of the two proportional share counts, rounded up"""
        pool_a = self.market.pool_a.scaled_value
        pool_b = self.market.pool_b.scaled_value
        total_supply = self.market.lp_total_supply.scaled_value
        amount_a, amount_b = FixedPoint("3.0"), FixedPoint("7.0")
        expected = max(
            div_up(amount_a.scaled_value * total_supply, pool_a),
            div_up(amount_b.scaled_value * total_supply, pool_b),
        )
        lp_in = self.market.withdraw_lp(OPERATOR, amount_a, amount_b, FixedPoint("1000.0"))
        self.assertEqual(lp_in, from_scaled(expected))
        self.assertEqual(self.market.a_token.balance_of(OPERATOR), amount_a)
        self.assertEqual(self.market.b_token.balance_of(OPERATOR), amount_b)
        self.assertEqual(self.market.pool_b, from_scaled(pool_b) - amount_b)

    def test_withdraw_lp_bounds(self):
        """withdraw_lp refuses to burn more than max_lp or to empty a pool"""
        with self.assertRaises(SlippageError):
            self.market.withdraw_lp(OPERATOR, FixedPoint("3.0"), FixedPoint("7.0"), FixedPoint("6.0"))
        with self.assertRaises(InsufficientLiquidityError):
            self.market.withdraw_lp(OPERATOR, FixedPoint("1000.0"), ZERO, FixedPoint("1000.0"))
        with self.assertRaises(InsufficientBalanceError):
            self.market.withdraw_lp(USER, FixedPoint("1.0"), FixedPoint("1.0"), FixedPoint("1000.0"))

    def test_deposits_refused_once_every_share_is_redeemed(self):
        """With no LP supply left, mint_lp and deposit_lp raise instead of taking funds for nothing"""
        self.market.mint(USER, FixedPoint("10.0"))
        self.market.burn_lp(OPERATOR, self.market.lp_token.balance_of(OPERATOR), ZERO)
        self.assertEqual(self.market.lp_total_supply, ZERO)
        before = self.snapshot()
        with self.assertRaises(InsufficientLiquidityError):
            self.market.mint_lp(USER, FixedPoint("10.0"), ZERO)
        with self.assertRaises(InsufficientLiquidityError):
            self.market.deposit_lp(USER, FixedPoint("5.0"), FixedPoint("5.0"), ZERO)
        self.assertEqual(self.snapshot(), before)


class TestClaim(unittest.TestCase):
    """Claims after settlement at a known price"""

    def setUp(self):
        self.market, self.base = setup_market(
            seed_a=FixedPoint("100.0"),
            seed_b=FixedPoint("100.0"),
            settlement=FixedPriceSettlement(FixedPoint("0.25")),
        )

    def test_claim_pays_settled_prices(self):
        """Holders get a * price_a + b * price_b and lose their tokens"""
        amount_a = self.market.mint_a(USER, FixedPoint("10.0"), ZERO)
        amount_b = self.market.mint_b(USER, FixedPoint("2.0"), ZERO)
        self.market.block_time.set_time(self.market.close_time)
        self.market.close()
        user_base = self.base.balance_of(USER)
        expected = from_scaled(
            (
                amount_a.scaled_value * FixedPoint("0.75").scaled_value
                + amount_b.scaled_value * FixedPoint("0.25").scaled_value
            )
            // ONE_18
        )
        self.assertEqual(self.market.claim(USER), expected)
        self.assertEqual(self.base.balance_of(USER), user_base + expected)
        self.assertEqual(self.market.a_token.balance_of(USER), ZERO)
        self.assertEqual(self.market.b_token.balance_of(USER), ZERO)

    def test_everyone_can_claim(self):
        """The base held covers every holder, LPs included"""
        self.market.mint_a(USER, FixedPoint("10.0"), ZERO)
        self.market.swap_a_to_b(USER, FixedPoint("3.0"), ZERO)
        self.market.mint_lp(USER, FixedPoint("5.0"), ZERO)
        self.market.block_time.set_time(self.market.close_time)
        self.market.close()
        self.market.claim(USER)
        self.market.claim(OPERATOR)
        self.assertEqual(self.market.lp_total_supply, ZERO)
        self.assertGreaterEqual(self.base.balance_of(self.market.address), ZERO)
        self.assertEqual(self.market.claim(USER), ZERO)

    def test_everyone_can_claim_after_pair_mints(self):
        """Pair mints and burns stay covered through settlement for every holder"""
        self.market.mint(USER, FixedPoint("10.0"))
        self.market.mint_a(USER, FixedPoint("4.0"), ZERO)
        self.market.swap_b_to_a(USER, FixedPoint("6.0"), ZERO)
        self.market.burn(USER, FixedPoint("2.0"))
        self.market.mint(OPERATOR, FixedPoint("3.0"))
        self.market.block_time.set_time(self.market.close_time)
        self.market.close()
        self.assertGreater(self.market.claim(USER), ZERO)
        self.assertGreater(self.market.claim(OPERATOR), ZERO)
        self.assertEqual(self.market.lp_total_supply, ZERO)
        self.assertEqual(self.market.a_token.total_supply, ZERO)
        self.assertEqual(self.market.b_token.total_supply, ZERO)
        self.assertGreaterEqual(self.base.balance_of(self.market.address), ZERO)
