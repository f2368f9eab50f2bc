from __future__ import annotations

from position_engine.domain.entities.ledger import PnLBreakdown
from position_engine.domain.entities.pool import PoolSnapshot
from position_engine.domain.entities.position import Position, PositionState, PositionStates
from position_engine.domain.exceptions import PreconditionViolationError
from position_engine.domain.services.liquidity import get_token_amounts_from_liquidity
from position_engine.domain.services.pair_orientation import (
    base_and_quote_tokens,
    quote_value_of_amounts,
    split_base_quote,
)
from position_engine.domain.services.univ3_math import (
    ensure_tick_matches_sqrt_price,
    get_sqrt_ratio_at_tick,
    tick_to_price,
    validate_tick_range,
)


def calculate_position_value(
    liquidity: int,
    sqrt_price_x96: int,
    tick_lower: int,
    tick_upper: int,
    base_is_token0: bool,
) -> int:
    """Position worth in raw quote units at the given sqrt price."""
    amounts = get_token_amounts_from_liquidity(liquidity, sqrt_price_x96, tick_lower, tick_upper)
    return quote_value_of_amounts(
        amounts.amount0,
        amounts.amount1,
        sqrt_price_x96,
        is_token0_quote=not base_is_token0,
    )


def current_position_value(snapshot: PoolSnapshot, position: Position) -> int:
    return calculate_position_value(
        position.liquidity,
        snapshot.sqrt_price_x96,
        position.range.tick_lower,
        position.range.tick_upper,
        position.base_is_token0,
    )


def calculate_position_state_at_tick(
    snapshot: PoolSnapshot,
    position: Position,
    breakdown: PnLBreakdown | None,
    tick: int,
) -> PositionState:
    base_token, quote_token = base_and_quote_tokens(snapshot, is_token0_quote=position.is_token0_quote)
    sqrt_price_x96 = get_sqrt_ratio_at_tick(tick)

    amounts = get_token_amounts_from_liquidity(
        position.liquidity,
        sqrt_price_x96,
        position.range.tick_lower,
        position.range.tick_upper,
    )
    base_amount, quote_amount = split_base_quote(amounts, is_token0_quote=position.is_token0_quote)
    price = tick_to_price(tick, base_token.address, quote_token.address, base_token.decimals)
    position_value = calculate_position_value(
        position.liquidity,
        sqrt_price_x96,
        position.range.tick_lower,
        position.range.tick_upper,
        position.base_is_token0,
    )

    cost_basis = breakdown.current_cost_basis if breakdown else 0
    realized_pnl = breakdown.realized_pnl if breakdown else 0
    collected_fees = breakdown.collected_fees if breakdown else 0
    unclaimed_fees = breakdown.unclaimed_fees if breakdown else 0

    unrealized_pnl = position_value - cost_basis
    # Unclaimed fees are only known for the pool's current tick.
    unclaimed_at_tick = unclaimed_fees if tick == snapshot.current_tick else 0
    pnl_excluding_fees = realized_pnl + unrealized_pnl + collected_fees

    return PositionState(
        tick=tick,
        base_amount=base_amount,
        quote_amount=quote_amount,
        price=price,
        position_value=position_value,
        pnl_including_fees=pnl_excluding_fees + unclaimed_at_tick,
        pnl_excluding_fees=pnl_excluding_fees,
    )


def calculate_position_states(
    snapshot: PoolSnapshot,
    position: Position,
    breakdown: PnLBreakdown | None,
) -> PositionStates:
    return PositionStates(
        lower_range=calculate_position_state_at_tick(
            snapshot, position, breakdown, position.range.tick_lower
        ),
        current=calculate_position_state_at_tick(snapshot, position, breakdown, snapshot.current_tick),
        upper_range=calculate_position_state_at_tick(
            snapshot, position, breakdown, position.range.tick_upper
        ),
    )


def ensure_position_matches_pool(snapshot: PoolSnapshot, position: Position) -> None:
    validate_tick_range(position.range.tick_lower, position.range.tick_upper, snapshot.tick_spacing)
    ensure_tick_matches_sqrt_price(snapshot.current_tick, snapshot.sqrt_price_x96)
    if position.liquidity < 0:
        raise PreconditionViolationError("liquidity must be non-negative.")
