from __future__ import annotations

from position_engine.api.schemas.common import (
    FeeGrowthReadingSchema,
    FeeGrowthSchema,
    LedgerEventSchema,
    PnLBreakdownSchema,
    PoolSnapshotSchema,
    PositionSchema,
)
from position_engine.application.dto.position_pnl import FeeGrowthInput
from position_engine.domain.entities.ledger import (
    CollectEvent,
    DecreaseLiquidityEvent,
    IncreaseLiquidityEvent,
    LedgerEvent,
    PnLBreakdown,
)
from position_engine.domain.entities.pool import PoolSnapshot, Token
from position_engine.domain.entities.position import Position, PositionRange
from position_engine.domain.exceptions import PreconditionViolationError
from position_engine.domain.services.univ3_fee_growth import FeeGrowthReading, parse_uint256


def to_pool_snapshot(schema: PoolSnapshotSchema) -> PoolSnapshot:
    return PoolSnapshot(
        sqrt_price_x96=schema.sqrt_price_x96,
        current_tick=schema.current_tick,
        liquidity=schema.liquidity,
        fee_tier_bps=schema.fee_tier_bps,
        tick_spacing=schema.tick_spacing,
        token0=Token(
            address=schema.token0.address,
            decimals=schema.token0.decimals,
            symbol=schema.token0.symbol,
        ),
        token1=Token(
            address=schema.token1.address,
            decimals=schema.token1.decimals,
            symbol=schema.token1.symbol,
        ),
    )


def to_position(schema: PositionSchema) -> Position:
    return Position(
        liquidity=schema.liquidity,
        range=PositionRange(tick_lower=schema.tick_lower, tick_upper=schema.tick_upper),
        is_token0_quote=schema.is_token0_quote,
    )


def to_ledger_event(schema: LedgerEventSchema) -> LedgerEvent:
    common = {
        "block_number": schema.block_number,
        "transaction_index": schema.transaction_index,
        "log_index": schema.log_index,
        "amount0": schema.amount0,
        "amount1": schema.amount1,
        "sqrt_price_x96": schema.sqrt_price_x96,
        "timestamp": schema.timestamp,
        "transaction_hash": schema.transaction_hash,
    }
    if schema.event_type == "COLLECT":
        return CollectEvent(**common)
    if schema.liquidity is None:
        raise PreconditionViolationError(f"{schema.event_type} event requires liquidity.")
    if schema.event_type == "INCREASE_LIQUIDITY":
        return IncreaseLiquidityEvent(liquidity=schema.liquidity, **common)
    return DecreaseLiquidityEvent(liquidity=schema.liquidity, **common)


def to_ledger_events(schemas: list[LedgerEventSchema]) -> list[LedgerEvent]:
    return [to_ledger_event(row) for row in schemas]


def _to_fee_growth_reading(schema: FeeGrowthReadingSchema) -> FeeGrowthReading:
    return FeeGrowthReading(
        fee_growth_global_x128=parse_uint256(schema.fee_growth_global_x128),
        fee_growth_outside_lower_x128=parse_uint256(schema.fee_growth_outside_lower_x128),
        fee_growth_outside_upper_x128=parse_uint256(schema.fee_growth_outside_upper_x128),
        fee_growth_inside_last_x128=parse_uint256(schema.fee_growth_inside_last_x128),
        tokens_owed=parse_uint256(schema.tokens_owed),
    )


def to_fee_growth_input(schema: FeeGrowthSchema | None) -> FeeGrowthInput | None:
    if schema is None:
        return None
    return FeeGrowthInput(
        token0=_to_fee_growth_reading(schema.token0),
        token1=_to_fee_growth_reading(schema.token1),
    )


def to_pnl_breakdown(schema: PnLBreakdownSchema) -> PnLBreakdown:
    return PnLBreakdown(
        current_value=schema.current_value,
        current_cost_basis=schema.current_cost_basis,
        realized_pnl=schema.realized_pnl,
        collected_fees=schema.collected_fees,
        unclaimed_fees=schema.unclaimed_fees,
    )
