from __future__ import annotations

from position_engine.domain.entities.position import TokenAmounts
from position_engine.domain.exceptions import PreconditionViolationError
from position_engine.domain.services.univ3_math import (
    Q96,
    get_sqrt_ratio_at_tick,
    mul_div,
    mul_div_rounding_up,
    validate_tick_range,
)


def _ordered(sqrt_ratio_a: int, sqrt_ratio_b: int) -> tuple[int, int]:
    if sqrt_ratio_a > sqrt_ratio_b:
        return sqrt_ratio_b, sqrt_ratio_a
    return sqrt_ratio_a, sqrt_ratio_b


def get_amount0_delta(sqrt_ratio_a: int, sqrt_ratio_b: int, liquidity: int, round_up: bool = False) -> int:
    sqrt_lower, sqrt_upper = _ordered(sqrt_ratio_a, sqrt_ratio_b)
    if sqrt_lower <= 0:
        raise PreconditionViolationError("sqrt ratio must be positive.")
    numerator1 = liquidity << 96
    numerator2 = sqrt_upper - sqrt_lower
    if round_up:
        return -((-mul_div_rounding_up(numerator1, numerator2, sqrt_upper)) // sqrt_lower)
    return mul_div(numerator1, numerator2, sqrt_upper) // sqrt_lower


def get_amount1_delta(sqrt_ratio_a: int, sqrt_ratio_b: int, liquidity: int, round_up: bool = False) -> int:
    sqrt_lower, sqrt_upper = _ordered(sqrt_ratio_a, sqrt_ratio_b)
    if round_up:
        return mul_div_rounding_up(liquidity, sqrt_upper - sqrt_lower, Q96)
    return mul_div(liquidity, sqrt_upper - sqrt_lower, Q96)


def get_token_amounts_from_liquidity(
    liquidity: int,
    sqrt_price_x96: int,
    tick_lower: int,
    tick_upper: int,
) -> TokenAmounts:
    validate_tick_range(tick_lower, tick_upper)
    if liquidity < 0:
        raise PreconditionViolationError("liquidity must be non-negative.")
    if liquidity == 0:
        return TokenAmounts(amount0=0, amount1=0)
    if sqrt_price_x96 <= 0:
        raise PreconditionViolationError("sqrt_price_x96 must be positive.")

    sqrt_lower = get_sqrt_ratio_at_tick(tick_lower)
    sqrt_upper = get_sqrt_ratio_at_tick(tick_upper)

    if sqrt_price_x96 <= sqrt_lower:
        return TokenAmounts(
            amount0=get_amount0_delta(sqrt_lower, sqrt_upper, liquidity),
            amount1=0,
        )
    if sqrt_price_x96 < sqrt_upper:
        return TokenAmounts(
            amount0=get_amount0_delta(sqrt_price_x96, sqrt_upper, liquidity),
            amount1=get_amount1_delta(sqrt_lower, sqrt_price_x96, liquidity),
        )
    return TokenAmounts(
        amount0=0,
        amount1=get_amount1_delta(sqrt_lower, sqrt_upper, liquidity),
    )


def get_liquidity_for_amount0(sqrt_ratio_a: int, sqrt_ratio_b: int, amount0: int) -> int:
    sqrt_lower, sqrt_upper = _ordered(sqrt_ratio_a, sqrt_ratio_b)
    intermediate = mul_div(sqrt_lower, sqrt_upper, Q96)
    return mul_div(amount0, intermediate, sqrt_upper - sqrt_lower)


def get_liquidity_for_amount1(sqrt_ratio_a: int, sqrt_ratio_b: int, amount1: int) -> int:
    sqrt_lower, sqrt_upper = _ordered(sqrt_ratio_a, sqrt_ratio_b)
    return mul_div(amount1, Q96, sqrt_upper - sqrt_lower)


def get_liquidity_for_amounts(
    sqrt_price_x96: int,
    tick_lower: int,
    tick_upper: int,
    amount0: int,
    amount1: int,
) -> int:
    """Largest liquidity the given raw amounts can mint in the range."""
    validate_tick_range(tick_lower, tick_upper)
    if amount0 < 0 or amount1 < 0:
        raise PreconditionViolationError("amounts must be non-negative.")

    sqrt_lower = get_sqrt_ratio_at_tick(tick_lower)
    sqrt_upper = get_sqrt_ratio_at_tick(tick_upper)

    if sqrt_price_x96 <= sqrt_lower:
        return get_liquidity_for_amount0(sqrt_lower, sqrt_upper, amount0)
    if sqrt_price_x96 < sqrt_upper:
        liquidity0 = get_liquidity_for_amount0(sqrt_price_x96, sqrt_upper, amount0)
        liquidity1 = get_liquidity_for_amount1(sqrt_lower, sqrt_price_x96, amount1)
        return min(liquidity0, liquidity1)
    return get_liquidity_for_amount1(sqrt_lower, sqrt_upper, amount1)
