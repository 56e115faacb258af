"""Testing for config dataclasses, shared types and the block clock"""
import logging
import os
import tempfile
import unittest

from fixedpointmath import FixedPoint

from igainpy.config import MarketConfig, SimulationConfig, apply_overrides
from igainpy.time import BlockTime
from igainpy.types import MarketActionType, TradeResult
from igainpy.utils.logs import close_logging, setup_logging


class TestMarketConfig(unittest.TestCase):
    """Fee validation and attribute rules"""

    def test_defaults(self):
        """0.3% at open, 3% at close"""
        config = MarketConfig()
        self.assertEqual(config.min_fee, FixedPoint("0.003"))
        self.assertEqual(config["max_fee"], FixedPoint("0.03"))

    def test_invalid_fees(self):
        """min_fee above max_fee is refused at construction and on override"""
        with self.assertRaises(ValueError):
            MarketConfig(min_fee=FixedPoint("0.05"), max_fee=FixedPoint("0.01"))
        with self.assertRaises(ValueError):
            apply_overrides(MarketConfig(), {"min_fee": FixedPoint("0.5")})

    def test_no_new_attribs(self):
        """Unknown keys are refused"""
        with self.assertRaises(AttributeError):
            apply_overrides(SimulationConfig(), {"num_blockz": 3})

    def test_freeze(self):
        """A frozen config cannot change"""
        config = SimulationConfig()
        apply_overrides(config, {"num_blocks": 3, "halt_on_errors": True})
        self.assertEqual(config.num_blocks, 3)
        config.freeze()  # pylint: disable=no-member # type: ignore
        with self.assertRaises(AttributeError):
            config.num_blocks = 4

    def test_direct_assignment(self):
        """Known fields can be set on an unfrozen config, unknown ones cannot"""
        config = MarketConfig()
        config.min_fee = FixedPoint("0.001")
        self.assertEqual(config.min_fee, FixedPoint("0.001"))
        with self.assertRaises(AttributeError):
            config.min_feee = FixedPoint("0.002")  # pylint: disable=attribute-defined-outside-init
        config.freeze()  # pylint: disable=no-member # type: ignore
        with self.assertRaises(AttributeError):
            config.min_fee = FixedPoint("0.002")
        self.assertEqual(config.min_fee, FixedPoint("0.001"))


class TestTypes(unittest.TestCase):
    """Shared types"""

    def test_trade_result_is_frozen(self):
        """Recorded trades are immutable"""
        result = TradeResult(
            block_time=0,
            wallet_address="alice",
            action_type=MarketActionType.MINT_A,
            trade_amount=FixedPoint("1.0"),
            realized_amount=FixedPoint("1.9"),
            pool_a=FixedPoint("1.1"),
            pool_b=FixedPoint("2.0"),
            lp_total_supply=FixedPoint("1.0"),
            fee_multiplier=FixedPoint("0.997"),
        )
        with self.assertRaises(AttributeError):
            result.realized_amount = FixedPoint("2.0")

    def test_action_type_from_string(self):
        """Policies name actions by their value"""
        self.assertEqual(MarketActionType("swap_b_to_a"), MarketActionType.SWAP_B_TO_A)


class TestBlockTime(unittest.TestCase):
    """The clock only moves forward"""

    def test_tick(self):
        """Default step is one block"""
        block_time = BlockTime(start_time=100, step_size=12)
        block_time.tick()
        self.assertEqual(block_time.time, 112)
        block_time.tick(88)
        self.assertEqual(block_time.time, 200)

    def test_backwards(self):
        """Moving backwards is refused"""
        block_time = BlockTime(start_time=100)
        with self.assertRaises(ValueError):
            block_time.set_time(99)
        with self.assertRaises(ValueError):
            block_time.tick(-1)


class TestLogging(unittest.TestCase):
    """setup_logging writes to the requested file"""

    def test_log_file(self):
        """Messages land in the file and the file is removed on close"""
        with tempfile.TemporaryDirectory() as tmp_dir:
            log_filename = os.path.join(tmp_dir, "logs", "test_log.log")
            setup_logging(log_filename=log_filename, log_level=logging.INFO, log_stdout=False)
            logging.info("market opened")
            with open(log_filename, encoding="utf-8") as file:
                self.assertIn("market opened", file.read())
            close_logging(delete_logs=True)
            self.assertFalse(os.path.exists(log_filename))
