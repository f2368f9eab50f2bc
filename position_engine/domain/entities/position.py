from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PositionRange:
    tick_lower: int
    tick_upper: int


@dataclass(frozen=True)
class Position:
    liquidity: int
    range: PositionRange
    is_token0_quote: bool

    @property
    def base_is_token0(self) -> bool:
        return not self.is_token0_quote


@dataclass(frozen=True)
class TokenAmounts:
    amount0: int
    amount1: int


@dataclass(frozen=True)
class PositionState:
    tick: int
    base_amount: int
    quote_amount: int
    price: int
    position_value: int
    pnl_including_fees: int
    pnl_excluding_fees: int


@dataclass(frozen=True)
class PositionStates:
    lower_range: PositionState
    current: PositionState
    upper_range: PositionState
