from __future__ import annotations

import unittest

from position_engine.domain.entities.ledger import PnLBreakdown
from position_engine.domain.entities.pool import PoolSnapshot, Token
from position_engine.domain.entities.position import Position, PositionRange
from position_engine.domain.exceptions import PreconditionViolationError
from position_engine.domain.services.position_valuation import (
    calculate_position_state_at_tick,
    calculate_position_states,
    calculate_position_value,
    current_position_value,
    ensure_position_matches_pool,
)
from position_engine.domain.services.univ3_math import Q96, get_sqrt_ratio_at_tick


TOKEN_A = Token(address="0x0000000000000000000000000000000000000001", decimals=18, symbol="AAA")
TOKEN_B = Token(address="0x0000000000000000000000000000000000000002", decimals=18, symbol="BBB")


def _snapshot(tick: int = 0, tick_spacing: int = 60) -> PoolSnapshot:
    return PoolSnapshot(
        sqrt_price_x96=get_sqrt_ratio_at_tick(tick),
        current_tick=tick,
        liquidity=10**20,
        fee_tier_bps=3000,
        tick_spacing=tick_spacing,
        token0=TOKEN_A,
        token1=TOKEN_B,
    )


def _position(liquidity: int = 10**18, lower: int = -600, upper: int = 600, is_token0_quote: bool = False):
    return Position(
        liquidity=liquidity,
        range=PositionRange(tick_lower=lower, tick_upper=upper),
        is_token0_quote=is_token0_quote,
    )


class PositionValueTests(unittest.TestCase):
    def test_value_rises_with_price_when_token1_is_quote(self):
        values = [
            calculate_position_value(10**18, get_sqrt_ratio_at_tick(tick), -600, 600, True)
            for tick in range(-900, 901, 30)
        ]
        self.assertEqual(values, sorted(values))

    def test_value_falls_with_pool_tick_when_token0_is_quote(self):
        values = [
            calculate_position_value(10**18, get_sqrt_ratio_at_tick(tick), -600, 600, False)
            for tick in range(-900, 901, 30)
        ]
        self.assertEqual(values, sorted(values, reverse=True))

    def test_value_at_unit_price_is_sum_of_amounts(self):
        value = calculate_position_value(10**18, Q96, -600, 600, True)
        self.assertGreater(value, 0)
        self.assertEqual(value, calculate_position_value(10**18, Q96, -600, 600, False))

    def test_zero_liquidity_is_worth_nothing(self):
        self.assertEqual(calculate_position_value(0, Q96, -600, 600, True), 0)

    def test_current_value_uses_snapshot_price(self):
        snapshot = _snapshot(tick=120)
        position = _position()
        self.assertEqual(
            current_position_value(snapshot, position),
            calculate_position_value(10**18, snapshot.sqrt_price_x96, -600, 600, True),
        )


class PositionStateTests(unittest.TestCase):
    def test_states_cover_both_range_edges_and_current_tick(self):
        states = calculate_position_states(_snapshot(tick=60), _position(), None)

        self.assertEqual(states.lower_range.tick, -600)
        self.assertEqual(states.current.tick, 60)
        self.assertEqual(states.upper_range.tick, 600)
        # Base is token0: all base at the lower edge, all quote at the upper edge.
        self.assertEqual(states.lower_range.quote_amount, 0)
        self.assertGreater(states.lower_range.base_amount, 0)
        self.assertEqual(states.upper_range.base_amount, 0)
        self.assertGreater(states.upper_range.quote_amount, 0)
        self.assertLess(states.lower_range.price, states.current.price)
        self.assertLess(states.current.price, states.upper_range.price)

    def test_pnl_without_breakdown_is_position_value(self):
        state = calculate_position_state_at_tick(_snapshot(), _position(), None, 0)
        self.assertEqual(state.pnl_excluding_fees, state.position_value)
        self.assertEqual(state.pnl_including_fees, state.position_value)

    def test_unclaimed_fees_only_count_at_current_tick(self):
        snapshot = _snapshot(tick=0)
        position = _position()
        breakdown = PnLBreakdown(
            current_value=current_position_value(snapshot, position),
            current_cost_basis=1000,
            realized_pnl=50,
            collected_fees=25,
            unclaimed_fees=10,
        )

        current = calculate_position_state_at_tick(snapshot, position, breakdown, 0)
        self.assertEqual(current.pnl_excluding_fees, 50 + current.position_value - 1000 + 25)
        self.assertEqual(current.pnl_including_fees, current.pnl_excluding_fees + 10)

        upper = calculate_position_state_at_tick(snapshot, position, breakdown, 600)
        self.assertEqual(upper.pnl_including_fees, upper.pnl_excluding_fees)

    def test_quote_token0_swaps_base_and_quote_amounts(self):
        states = calculate_position_states(_snapshot(), _position(is_token0_quote=True), None)
        # Base is token1 now: the lower edge holds only token0, which is the quote.
        self.assertEqual(states.lower_range.base_amount, 0)
        self.assertGreater(states.lower_range.quote_amount, 0)
        self.assertGreater(states.lower_range.price, states.upper_range.price)


class EnsurePositionMatchesPoolTests(unittest.TestCase):
    def test_accepts_consistent_inputs(self):
        ensure_position_matches_pool(_snapshot(), _position())

    def test_rejects_misaligned_range(self):
        with self.assertRaises(PreconditionViolationError):
            ensure_position_matches_pool(_snapshot(), _position(lower=-100, upper=600))

    def test_rejects_tick_inconsistent_with_sqrt_price(self):
        snapshot = PoolSnapshot(
            sqrt_price_x96=Q96,
            current_tick=500,
            liquidity=0,
            fee_tier_bps=3000,
            tick_spacing=60,
            token0=TOKEN_A,
            token1=TOKEN_B,
        )
        with self.assertRaises(PreconditionViolationError):
            ensure_position_matches_pool(snapshot, _position())

    def test_rejects_negative_liquidity(self):
        with self.assertRaises(PreconditionViolationError):
            ensure_position_matches_pool(_snapshot(), _position(liquidity=-1))
