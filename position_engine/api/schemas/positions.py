from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field

from position_engine.api.schemas.common import (
    BigInt,
    FeeGrowthSchema,
    LedgerEventSchema,
    PnLBreakdownSchema,
    PoolSnapshotSchema,
    PositionSchema,
)


class PositionPnlRequest(BaseModel):
    pool: PoolSnapshotSchema
    position: PositionSchema
    events: list[LedgerEventSchema] = Field(default_factory=list)
    unclaimed_fees: BigInt | None = Field(None, ge=0, description="Unclaimed fees in raw quote units.")
    fee_growth: FeeGrowthSchema | None = Field(None, description="Fee growth reads to derive unclaimed fees.")


class PositionStateResponse(BaseModel):
    tick: int
    base_amount: BigInt
    quote_amount: BigInt
    price: BigInt
    position_value: BigInt
    pnl_including_fees: BigInt
    pnl_excluding_fees: BigInt


class PositionStatesResponse(BaseModel):
    lower_range: PositionStateResponse
    current: PositionStateResponse
    upper_range: PositionStateResponse


class PnLBreakdownResponse(BaseModel):
    current_value: BigInt
    current_cost_basis: BigInt
    realized_pnl: BigInt
    collected_fees: BigInt
    unclaimed_fees: BigInt
    unrealized_pnl: BigInt
    total_pnl: BigInt


class BreakEvenResponse(BaseModel):
    status: Literal["not_required", "exact", "approximate"]
    price: BigInt | None
    target_value: BigInt
    iterations: int
    current_price: BigInt


class PositionPnlResponse(BaseModel):
    current_price: BigInt
    breakdown: PnLBreakdownResponse
    states: PositionStatesResponse
    break_even: BreakEvenResponse


class PositionLedgerRequest(BaseModel):
    pool: PoolSnapshotSchema
    is_token0_quote: bool
    events: list[LedgerEventSchema] = Field(default_factory=list)


class LedgerEntryResponse(BaseModel):
    event_type: str
    block_number: int
    transaction_index: int
    log_index: int
    timestamp: datetime | None
    pool_price: BigInt
    token0_amount: BigInt
    token1_amount: BigInt
    token_value: BigInt
    delta_cost_basis: BigInt
    cost_basis_after: BigInt
    delta_pnl: BigInt
    pnl_after: BigInt
    collected_fees_after: BigInt
    liquidity_after: BigInt


class PositionLedgerResponse(BaseModel):
    entries: list[LedgerEntryResponse]
    cost_basis: BigInt
    realized_pnl: BigInt
    collected_fees: BigInt
    active_liquidity: BigInt


class BreakEvenRequest(BaseModel):
    pool: PoolSnapshotSchema
    position: PositionSchema
    breakdown: PnLBreakdownSchema


class PositionAprRequest(BaseModel):
    pool: PoolSnapshotSchema
    position: PositionSchema
    volume_token0: BigInt = Field(..., ge=0, description="24h token0 volume in raw units.")
    volume_token1: BigInt = Field(..., ge=0, description="24h token1 volume in raw units.")


class PositionAprResponse(BaseModel):
    daily_fees_token0: BigInt
    daily_fees_token1: BigInt
    user_share: Decimal
    user_fees_token0: BigInt
    user_fees_token1: BigInt
    user_fees_quote_value: BigInt
    position_value_quote: BigInt
    daily_apr: Decimal
    annualized_apr: Decimal
    is_out_of_range: bool
    has_valid_data: bool


class AprPeriodResponse(BaseModel):
    start_timestamp: datetime
    end_timestamp: datetime
    duration_seconds: int
    cost_basis: BigInt
    collected_fee_value: BigInt
    apr_bps: int
    event_count: int


class AprPeriodsResponse(BaseModel):
    periods: list[AprPeriodResponse]
