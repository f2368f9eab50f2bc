from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, Field, PlainSerializer


# Raw token amounts and Q64.96 values exceed JSON number precision; they travel as strings.
BigInt = Annotated[int, PlainSerializer(lambda value: str(value), return_type=str, when_used="json")]


class TokenSchema(BaseModel):
    address: str = Field(..., description="Token address (0x...).")
    decimals: int = Field(..., ge=0, le=77, description="Token decimal places.")
    symbol: str | None = Field(None, description="Token symbol.")


class PoolSnapshotSchema(BaseModel):
    sqrt_price_x96: BigInt = Field(..., gt=0, description="Current sqrt price (Q64.96).")
    current_tick: int = Field(..., description="Current pool tick.")
    liquidity: BigInt = Field(..., ge=0, description="Pool-wide active liquidity.")
    fee_tier_bps: int = Field(..., ge=0, description="Fee tier in hundredths of a basis point (3000 = 0.3%).")
    tick_spacing: int = Field(..., gt=0, description="Pool tick spacing.")
    token0: TokenSchema
    token1: TokenSchema


class PositionSchema(BaseModel):
    liquidity: BigInt = Field(..., ge=0, description="Position liquidity.")
    tick_lower: int = Field(..., description="Lower tick of the range.")
    tick_upper: int = Field(..., description="Upper tick of the range.")
    is_token0_quote: bool = Field(..., description="True when token0 is the quote token.")


class LedgerEventSchema(BaseModel):
    event_type: Literal["INCREASE_LIQUIDITY", "DECREASE_LIQUIDITY", "COLLECT"]
    block_number: int = Field(..., ge=0)
    transaction_index: int = Field(..., ge=0)
    log_index: int = Field(..., ge=0)
    liquidity: BigInt | None = Field(None, ge=0, description="Liquidity delta (increase/decrease only).")
    amount0: BigInt = Field(..., ge=0, description="Raw token0 amount.")
    amount1: BigInt = Field(..., ge=0, description="Raw token1 amount.")
    sqrt_price_x96: BigInt = Field(..., gt=0, description="Pool sqrt price at the event.")
    timestamp: datetime | None = None
    transaction_hash: str | None = None


class FeeGrowthReadingSchema(BaseModel):
    fee_growth_global_x128: BigInt = Field(..., ge=0)
    fee_growth_outside_lower_x128: BigInt = Field(..., ge=0)
    fee_growth_outside_upper_x128: BigInt = Field(..., ge=0)
    fee_growth_inside_last_x128: BigInt = Field(..., ge=0)
    tokens_owed: BigInt = Field(0, ge=0)


class FeeGrowthSchema(BaseModel):
    token0: FeeGrowthReadingSchema
    token1: FeeGrowthReadingSchema


class PnLBreakdownSchema(BaseModel):
    current_value: BigInt
    current_cost_basis: BigInt
    realized_pnl: BigInt
    collected_fees: BigInt
    unclaimed_fees: BigInt = Field(0, ge=0)
