from __future__ import annotations

import logging

from position_engine.domain.entities.break_even import BreakEvenResult
from position_engine.domain.entities.ledger import PnLBreakdown
from position_engine.domain.entities.pool import PoolSnapshot
from position_engine.domain.entities.position import Position
from position_engine.domain.exceptions import PreconditionViolationError
from position_engine.domain.services.pair_orientation import base_and_quote_tokens
from position_engine.domain.services.position_valuation import calculate_position_value
from position_engine.domain.services.univ3_math import (
    get_sqrt_ratio_at_tick,
    price_to_tick,
    tick_to_price,
)


logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 50
DEFAULT_SEARCH_FACTOR = 10


def break_even_target(breakdown: PnLBreakdown) -> int:
    """Quote value the position must be worth for total PnL to be zero."""
    return (
        breakdown.current_cost_basis
        - breakdown.realized_pnl
        - breakdown.collected_fees
        - breakdown.unclaimed_fees
    )


def break_even_tolerance(quote_decimals: int) -> int:
    return 10 ** (quote_decimals - 4) if quote_decimals >= 4 else 1


def calculate_break_even_price(
    breakdown: PnLBreakdown,
    snapshot: PoolSnapshot,
    position: Position,
    *,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    search_factor: int = DEFAULT_SEARCH_FACTOR,
) -> BreakEvenResult:
    """Binary search for the quote-per-base price where the position value meets the target.

    Position value is non-decreasing in the base token price, so the search
    moves up while the value is short of the target. When the bounds never
    bracket the target, or the iteration cap is hit first, the midpoint of
    the final bounds is returned with status "approximate". The value
    tolerance only decides the "exact" exit; the price bounds keep halving
    until they are one raw unit apart.
    """
    if max_iterations <= 0:
        raise PreconditionViolationError("max_iterations must be positive.")
    if search_factor <= 1:
        raise PreconditionViolationError("search_factor must be greater than 1.")

    target_value = break_even_target(breakdown)
    if target_value <= 0:
        return BreakEvenResult(status="not_required", price=None, target_value=target_value, iterations=0)

    base_token, quote_token = base_and_quote_tokens(snapshot, is_token0_quote=position.is_token0_quote)
    current_price = tick_to_price(
        snapshot.current_tick,
        base_token.address,
        quote_token.address,
        base_token.decimals,
    )

    low_price = max(current_price // search_factor, 1)
    high_price = max(current_price * search_factor, low_price + 1)
    tolerance = break_even_tolerance(quote_token.decimals)
    logger.debug(
        "break_even: search target=%s low=%s high=%s tolerance=%s",
        target_value,
        low_price,
        high_price,
        tolerance,
    )

    iterations = 0
    while iterations < max_iterations:
        iterations += 1
        mid_price = (low_price + high_price) // 2
        tick = price_to_tick(
            mid_price,
            snapshot.tick_spacing,
            base_token.address,
            quote_token.address,
            base_token.decimals,
        )
        position_value = calculate_position_value(
            position.liquidity,
            get_sqrt_ratio_at_tick(tick),
            position.range.tick_lower,
            position.range.tick_upper,
            position.base_is_token0,
        )

        if abs(position_value - target_value) <= tolerance:
            return BreakEvenResult(
                status="exact",
                price=mid_price,
                target_value=target_value,
                iterations=iterations,
            )

        if position_value < target_value:
            low_price = mid_price
        else:
            high_price = mid_price

        # Integer prices cannot be bisected below one raw unit.
        if high_price - low_price <= 1:
            break

    approximate = (low_price + high_price) // 2
    logger.info(
        "break_even: approximate price=%s target=%s iterations=%s",
        approximate,
        target_value,
        iterations,
    )
    return BreakEvenResult(
        status="approximate",
        price=approximate,
        target_value=target_value,
        iterations=iterations,
    )
