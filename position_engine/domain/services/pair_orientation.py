from __future__ import annotations

from position_engine.domain.entities.pool import PoolSnapshot, Token
from position_engine.domain.entities.position import TokenAmounts
from position_engine.domain.exceptions import PreconditionViolationError
from position_engine.domain.services.univ3_math import (
    compare_addresses,
    value_of_token0_amount_in_token1,
    value_of_token1_amount_in_token0,
)


def resolve_is_token0_quote(*, base_token_address: str, token0_address: str, token1_address: str) -> bool:
    if compare_addresses(base_token_address, token0_address) == 0:
        return False
    if compare_addresses(base_token_address, token1_address) == 0:
        return True
    raise PreconditionViolationError("base token is not part of the pool.")


def base_and_quote_tokens(snapshot: PoolSnapshot, *, is_token0_quote: bool) -> tuple[Token, Token]:
    if is_token0_quote:
        return snapshot.token1, snapshot.token0
    return snapshot.token0, snapshot.token1


def split_base_quote(amounts: TokenAmounts, *, is_token0_quote: bool) -> tuple[int, int]:
    if is_token0_quote:
        return amounts.amount1, amounts.amount0
    return amounts.amount0, amounts.amount1


def quote_value_of_amounts(
    amount0: int,
    amount1: int,
    sqrt_price_x96: int,
    *,
    is_token0_quote: bool,
) -> int:
    """Both raw amounts expressed in raw quote units at the given sqrt price (floor)."""
    if is_token0_quote:
        return amount0 + value_of_token1_amount_in_token0(amount1, sqrt_price_x96)
    return value_of_token0_amount_in_token1(amount0, sqrt_price_x96) + amount1
