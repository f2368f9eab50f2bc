from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal, Union


LedgerEventType = Literal["INCREASE_LIQUIDITY", "DECREASE_LIQUIDITY", "COLLECT"]


@dataclass(frozen=True)
class IncreaseLiquidityEvent:
    block_number: int
    transaction_index: int
    log_index: int
    liquidity: int
    amount0: int
    amount1: int
    sqrt_price_x96: int
    timestamp: datetime | None = None
    transaction_hash: str | None = None

    event_type: LedgerEventType = field(default="INCREASE_LIQUIDITY", init=False)

    @property
    def ordering_key(self) -> tuple[int, int, int]:
        return (self.block_number, self.transaction_index, self.log_index)


@dataclass(frozen=True)
class DecreaseLiquidityEvent:
    block_number: int
    transaction_index: int
    log_index: int
    liquidity: int
    amount0: int
    amount1: int
    sqrt_price_x96: int
    timestamp: datetime | None = None
    transaction_hash: str | None = None

    event_type: LedgerEventType = field(default="DECREASE_LIQUIDITY", init=False)

    @property
    def ordering_key(self) -> tuple[int, int, int]:
        return (self.block_number, self.transaction_index, self.log_index)


@dataclass(frozen=True)
class CollectEvent:
    block_number: int
    transaction_index: int
    log_index: int
    amount0: int
    amount1: int
    sqrt_price_x96: int
    timestamp: datetime | None = None
    transaction_hash: str | None = None

    event_type: LedgerEventType = field(default="COLLECT", init=False)

    @property
    def ordering_key(self) -> tuple[int, int, int]:
        return (self.block_number, self.transaction_index, self.log_index)


LedgerEvent = Union[IncreaseLiquidityEvent, DecreaseLiquidityEvent, CollectEvent]


@dataclass(frozen=True)
class LedgerEntry:
    """Accounting snapshot after one replayed event. Values are raw quote units."""

    event_type: LedgerEventType
    ordering_key: tuple[int, int, int]
    timestamp: datetime | None
    pool_price: int
    token0_amount: int
    token1_amount: int
    token_value: int
    delta_cost_basis: int
    cost_basis_after: int
    delta_pnl: int
    pnl_after: int
    collected_fees_after: int
    liquidity_after: int


@dataclass(frozen=True)
class LedgerReplay:
    cost_basis: int
    realized_pnl: int
    collected_fees: int
    active_liquidity: int
    entries: list[LedgerEntry]


@dataclass(frozen=True)
class PnLBreakdown:
    current_value: int
    current_cost_basis: int
    realized_pnl: int
    collected_fees: int
    unclaimed_fees: int

    @property
    def unrealized_pnl(self) -> int:
        return self.current_value - self.current_cost_basis

    @property
    def total_pnl(self) -> int:
        return self.realized_pnl + self.collected_fees + self.unclaimed_fees + self.unrealized_pnl
