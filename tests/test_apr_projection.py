from __future__ import annotations

from decimal import Decimal
import unittest

from position_engine.domain.entities.pool import PoolSnapshot, PoolVolumeMetrics, Token
from position_engine.domain.entities.position import Position, PositionRange
from position_engine.domain.exceptions import PreconditionViolationError
from position_engine.domain.services.apr_projection import (
    is_position_out_of_range,
    project_position_apr,
)
from position_engine.domain.services.univ3_math import get_sqrt_ratio_at_tick


TOKEN_A = Token(address="0x0000000000000000000000000000000000000001", decimals=18)
TOKEN_B = Token(address="0x0000000000000000000000000000000000000002", decimals=18)


def _snapshot(tick: int = 0, pool_liquidity: int = 9 * 10**18) -> PoolSnapshot:
    return PoolSnapshot(
        sqrt_price_x96=get_sqrt_ratio_at_tick(tick),
        current_tick=tick,
        liquidity=pool_liquidity,
        fee_tier_bps=3000,
        tick_spacing=60,
        token0=TOKEN_A,
        token1=TOKEN_B,
    )


def _position(liquidity: int = 10**18) -> Position:
    return Position(
        liquidity=liquidity,
        range=PositionRange(tick_lower=-600, tick_upper=600),
        is_token0_quote=False,
    )


def _volume(token0: int = 10**21, token1: int = 10**21) -> PoolVolumeMetrics:
    return PoolVolumeMetrics(volume_token0=token0, volume_token1=token1)


class AprProjectionTests(unittest.TestCase):
    def test_in_range_position_earns_its_liquidity_share(self):
        result = project_position_apr(_snapshot(), _position(), _volume())

        self.assertTrue(result.has_valid_data)
        self.assertFalse(result.is_out_of_range)
        self.assertEqual(result.daily_fees_token0, 3 * 10**18)
        self.assertEqual(result.daily_fees_token1, 3 * 10**18)
        self.assertEqual(result.user_share, Decimal("0.1"))
        self.assertEqual(result.user_fees_token0, 3 * 10**17)
        self.assertEqual(result.user_fees_token1, 3 * 10**17)
        self.assertEqual(result.user_fees_quote_value, 6 * 10**17)
        self.assertGreater(result.position_value_quote, 0)
        self.assertEqual(
            result.daily_apr,
            Decimal(result.user_fees_quote_value) / Decimal(result.position_value_quote),
        )
        self.assertEqual(result.annualized_apr, result.daily_apr * 365)

    def test_annualization_days_are_configurable(self):
        result = project_position_apr(_snapshot(), _position(), _volume(), annualization_days=360)
        self.assertEqual(result.annualized_apr, result.daily_apr * 360)

    def test_zero_volume_is_valid_and_zero(self):
        result = project_position_apr(_snapshot(), _position(), _volume(0, 0))

        self.assertTrue(result.has_valid_data)
        self.assertEqual(result.daily_apr, Decimal("0"))
        self.assertEqual(result.annualized_apr, Decimal("0"))
        self.assertEqual(result.user_fees_quote_value, 0)

    def test_zero_position_liquidity_has_no_valid_data(self):
        result = project_position_apr(_snapshot(), _position(liquidity=0), _volume())

        self.assertFalse(result.has_valid_data)
        self.assertEqual(result.daily_apr, Decimal("0"))
        self.assertEqual(result.annualized_apr, Decimal("0"))

    def test_out_of_range_position_earns_nothing(self):
        result = project_position_apr(_snapshot(tick=600), _position(), _volume())

        self.assertTrue(result.is_out_of_range)
        self.assertTrue(result.has_valid_data)
        self.assertEqual(result.daily_fees_token0, 3 * 10**18)
        self.assertEqual(result.user_fees_token0, 0)
        self.assertEqual(result.daily_apr, Decimal("0"))

    def test_only_position_in_pool_takes_all_fees(self):
        result = project_position_apr(_snapshot(pool_liquidity=0), _position(), _volume())
        self.assertEqual(result.user_share, Decimal("1"))
        self.assertEqual(result.user_fees_token0, 3 * 10**18)

    def test_negative_volume_is_rejected(self):
        with self.assertRaises(PreconditionViolationError):
            project_position_apr(_snapshot(), _position(), _volume(-1, 0))


class OutOfRangeTests(unittest.TestCase):
    def test_upper_tick_is_exclusive(self):
        self.assertFalse(is_position_out_of_range(-600, -600, 600))
        self.assertFalse(is_position_out_of_range(599, -600, 600))
        self.assertTrue(is_position_out_of_range(600, -600, 600))
        self.assertTrue(is_position_out_of_range(-601, -600, 600))
