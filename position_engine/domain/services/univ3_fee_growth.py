from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from position_engine.domain.entities.pool import PoolSnapshot
from position_engine.domain.entities.position import Position
from position_engine.domain.exceptions import PreconditionViolationError
from position_engine.domain.services.pair_orientation import quote_value_of_amounts


Q128 = 2**128
UINT256_MOD = 2**256


@dataclass(frozen=True)
class FeeGrowthReading:
    """Per-token fee growth values read from the pool and position manager."""

    fee_growth_global_x128: int
    fee_growth_outside_lower_x128: int
    fee_growth_outside_upper_x128: int
    fee_growth_inside_last_x128: int
    tokens_owed: int


def sub_uint256(a: int, b: int) -> int:
    return (a - b) % UINT256_MOD


def parse_uint256(value: int | str | Decimal | None) -> int:
    if value is None:
        raise PreconditionViolationError("Missing uint256 value.")
    if isinstance(value, bool):
        raise PreconditionViolationError("Unsupported uint256 value type.")
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, str):
        raw = value.strip()
        if not raw:
            raise PreconditionViolationError("Empty uint256 string.")
        try:
            parsed = int(raw, 16) if raw.lower().startswith("0x") else int(raw)
        except ValueError as exc:
            raise PreconditionViolationError(f"Invalid uint256 string {raw!r}.") from exc
    elif isinstance(value, Decimal):
        if value != value.to_integral_value():
            raise PreconditionViolationError("Decimal uint256 value must be integral.")
        parsed = int(value)
    else:
        raise PreconditionViolationError("Unsupported uint256 value type.")

    if parsed < 0 or parsed >= UINT256_MOD:
        raise PreconditionViolationError("uint256 value out of range.")
    return parsed


def fee_growth_inside(
    *,
    fee_growth_global: int,
    fee_growth_outside_lower: int,
    fee_growth_outside_upper: int,
    tick_current: int,
    tick_lower: int,
    tick_upper: int,
) -> int:
    if tick_current >= tick_lower:
        below = fee_growth_outside_lower
    else:
        below = sub_uint256(fee_growth_global, fee_growth_outside_lower)
    if tick_current < tick_upper:
        above = fee_growth_outside_upper
    else:
        above = sub_uint256(fee_growth_global, fee_growth_outside_upper)
    return sub_uint256(sub_uint256(fee_growth_global, below), above)


def uncollected_fees(
    *,
    liquidity: int,
    fee_growth_inside_x128: int,
    fee_growth_inside_last_x128: int,
    tokens_owed: int = 0,
) -> int:
    """Raw token amount owed to the position: tokens_owed plus growth since the last checkpoint."""
    if liquidity < 0 or tokens_owed < 0:
        raise PreconditionViolationError("liquidity and tokens_owed must be non-negative.")
    delta = sub_uint256(fee_growth_inside_x128, fee_growth_inside_last_x128)
    return tokens_owed + (liquidity * delta) // Q128


def _uncollected_for_token(snapshot: PoolSnapshot, position: Position, reading: FeeGrowthReading) -> int:
    inside = fee_growth_inside(
        fee_growth_global=reading.fee_growth_global_x128,
        fee_growth_outside_lower=reading.fee_growth_outside_lower_x128,
        fee_growth_outside_upper=reading.fee_growth_outside_upper_x128,
        tick_current=snapshot.current_tick,
        tick_lower=position.range.tick_lower,
        tick_upper=position.range.tick_upper,
    )
    return uncollected_fees(
        liquidity=position.liquidity,
        fee_growth_inside_x128=inside,
        fee_growth_inside_last_x128=reading.fee_growth_inside_last_x128,
        tokens_owed=reading.tokens_owed,
    )


def unclaimed_fees_value(
    snapshot: PoolSnapshot,
    position: Position,
    *,
    token0: FeeGrowthReading,
    token1: FeeGrowthReading,
) -> int:
    """Unclaimed fees of both tokens in raw quote units at the snapshot price."""
    return quote_value_of_amounts(
        _uncollected_for_token(snapshot, position, token0),
        _uncollected_for_token(snapshot, position, token1),
        snapshot.sqrt_price_x96,
        is_token0_quote=position.is_token0_quote,
    )
