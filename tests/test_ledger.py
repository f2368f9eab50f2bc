from __future__ import annotations

import logging

import pytest

from position_engine.domain.entities.ledger import (
    CollectEvent,
    DecreaseLiquidityEvent,
    IncreaseLiquidityEvent,
)
from position_engine.domain.exceptions import OrderingViolationError, PreconditionViolationError
from position_engine.domain.services.ledger import (
    build_pnl_breakdown,
    ensure_ascending_order,
    replay_ledger,
)
from position_engine.domain.services.univ3_math import Q96


# sqrt price of exactly 1 and of exactly 4 (token1 per token0).
PRICE_ONE = Q96
PRICE_FOUR = 2 * Q96


def _increase(block: int, liquidity: int, amount0: int, amount1: int, sqrt_price: int = PRICE_ONE, log: int = 0):
    return IncreaseLiquidityEvent(
        block_number=block,
        transaction_index=0,
        log_index=log,
        liquidity=liquidity,
        amount0=amount0,
        amount1=amount1,
        sqrt_price_x96=sqrt_price,
    )


def _decrease(block: int, liquidity: int, amount0: int, amount1: int, sqrt_price: int = PRICE_ONE, log: int = 0):
    return DecreaseLiquidityEvent(
        block_number=block,
        transaction_index=0,
        log_index=log,
        liquidity=liquidity,
        amount0=amount0,
        amount1=amount1,
        sqrt_price_x96=sqrt_price,
    )


def _collect(block: int, amount0: int, amount1: int, sqrt_price: int = PRICE_ONE, log: int = 0):
    return CollectEvent(
        block_number=block,
        transaction_index=0,
        log_index=log,
        amount0=amount0,
        amount1=amount1,
        sqrt_price_x96=sqrt_price,
    )


def _replay(events):
    return replay_ledger(events, is_token0_quote=False, base_decimals=18)


class TestReplayLedger:
    def test_empty_ledger_is_all_zero(self):
        replay = _replay([])
        assert (replay.cost_basis, replay.realized_pnl, replay.collected_fees, replay.active_liquidity) == (
            0,
            0,
            0,
            0,
        )
        assert replay.entries == []

    def test_increase_adds_event_value_to_cost_basis(self):
        replay = _replay([_increase(1, 1000, 100, 200)])
        assert replay.cost_basis == 300
        assert replay.active_liquidity == 1000
        assert replay.realized_pnl == 0

    def test_increase_is_valued_at_its_own_price(self):
        replay = _replay([_increase(1, 1000, 100, 200, sqrt_price=PRICE_FOUR)])
        assert replay.cost_basis == 100 * 4 + 200

    def test_quote_token0_values_token1_at_inverse_price(self):
        replay = replay_ledger(
            [_increase(1, 1000, 100, 400, sqrt_price=PRICE_FOUR)],
            is_token0_quote=True,
            base_decimals=18,
        )
        assert replay.cost_basis == 100 + 400 // 4

    def test_full_decrease_at_same_price_realizes_nothing(self):
        replay = _replay([_increase(1, 1000, 100, 200), _decrease(2, 1000, 100, 200)])
        assert replay.realized_pnl == 0
        assert replay.cost_basis == 0
        assert replay.active_liquidity == 0

    def test_increase_then_decrease_restores_previous_cost_basis(self):
        before = _replay([_increase(1, 500, 50, 100)])
        after = _replay(
            [
                _increase(1, 500, 50, 100),
                _increase(2, 1000, 100, 200),
                _decrease(3, 1000, 100, 200),
            ]
        )
        assert after.realized_pnl == 0
        assert after.cost_basis == before.cost_basis == 150

    def test_partial_decrease_after_price_move_realizes_gain(self):
        replay = _replay(
            [
                _increase(1, 1000, 1000, 0),
                _decrease(2, 500, 500, 0, sqrt_price=PRICE_FOUR),
            ]
        )
        assert replay.cost_basis == 500
        assert replay.realized_pnl == 2000 - 500
        assert replay.active_liquidity == 500

    def test_collect_accumulates_fees_without_touching_cost_basis(self):
        replay = _replay([_increase(1, 1000, 100, 200), _collect(2, 5, 7), _collect(3, 1, 1)])
        assert replay.collected_fees == 14
        assert replay.cost_basis == 300
        assert replay.realized_pnl == 0

    def test_entries_record_running_totals(self):
        replay = _replay(
            [
                _increase(1, 1000, 1000, 0),
                _collect(2, 10, 0),
                _decrease(3, 500, 500, 0, sqrt_price=PRICE_FOUR),
            ]
        )
        increase, collect, decrease = replay.entries

        assert increase.event_type == "INCREASE_LIQUIDITY"
        assert increase.delta_cost_basis == 1000
        assert increase.cost_basis_after == 1000
        assert increase.pool_price == 10**18
        assert increase.liquidity_after == 1000

        assert collect.event_type == "COLLECT"
        assert collect.token_value == 10
        assert collect.collected_fees_after == 10
        assert collect.delta_cost_basis == 0

        assert decrease.ordering_key == (3, 0, 0)
        assert decrease.pool_price == 4 * 10**18
        assert decrease.delta_cost_basis == -500
        assert decrease.delta_pnl == 1500
        assert decrease.pnl_after == 1500
        assert decrease.liquidity_after == 500

    def test_replay_is_idempotent(self):
        events = [
            _increase(1, 1000, 1000, 0),
            _collect(2, 10, 0),
            _decrease(3, 400, 300, 100, sqrt_price=PRICE_FOUR),
        ]
        assert _replay(events) == _replay(events)

    def test_empty_collect_does_not_change_totals(self):
        events = [_increase(1, 1000, 1000, 0), _decrease(3, 400, 300, 100, sqrt_price=PRICE_FOUR)]
        with_noop = [events[0], _collect(2, 0, 0), events[1]]

        plain = _replay(events)
        padded = _replay(with_noop)
        assert (plain.cost_basis, plain.realized_pnl, plain.collected_fees, plain.active_liquidity) == (
            padded.cost_basis,
            padded.realized_pnl,
            padded.collected_fees,
            padded.active_liquidity,
        )

    def test_decrease_beyond_active_liquidity_is_rejected(self):
        with pytest.raises(PreconditionViolationError):
            _replay([_increase(1, 1000, 100, 200), _decrease(2, 1001, 100, 200)])

    def test_negative_amounts_are_rejected(self):
        with pytest.raises(PreconditionViolationError):
            _replay([_increase(1, 1000, -1, 200)])


class TestLedgerOrdering:
    def test_descending_blocks_raise_with_position(self):
        with pytest.raises(OrderingViolationError) as excinfo:
            _replay([_increase(5, 1000, 100, 200), _collect(4, 1, 1)])
        assert excinfo.value.index == 1
        assert excinfo.value.previous_key == (5, 0, 0)
        assert excinfo.value.current_key == (4, 0, 0)

    def test_duplicate_keys_are_rejected(self):
        with pytest.raises(OrderingViolationError):
            ensure_ascending_order([_increase(5, 1000, 100, 200), _collect(5, 1, 1)])

    def test_log_index_breaks_ties_within_a_transaction(self):
        ensure_ascending_order([_decrease(5, 10, 1, 1, log=1), _collect(5, 1, 1, log=2)])

    def test_violation_is_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="position_engine.domain.services.ledger"):
            with pytest.raises(OrderingViolationError):
                ensure_ascending_order([_collect(2, 0, 0), _collect(1, 0, 0)])
        assert "ordering_violation" in caplog.text


class TestPnlBreakdown:
    def test_breakdown_combines_replay_and_current_state(self):
        replay = _replay([_increase(1, 1000, 1000, 0), _collect(2, 10, 0)])
        breakdown = build_pnl_breakdown(replay, current_value=1200, unclaimed_fees=5)

        assert breakdown.current_cost_basis == 1000
        assert breakdown.unrealized_pnl == 200
        assert breakdown.total_pnl == 0 + 10 + 5 + 200

    def test_negative_unclaimed_fees_are_rejected(self):
        with pytest.raises(PreconditionViolationError):
            build_pnl_breakdown(_replay([]), current_value=0, unclaimed_fees=-1)
