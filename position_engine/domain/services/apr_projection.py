from __future__ import annotations

from decimal import Decimal

from position_engine.domain.entities.apr import AprProjection
from position_engine.domain.entities.pool import PoolSnapshot, PoolVolumeMetrics
from position_engine.domain.entities.position import Position
from position_engine.domain.exceptions import PreconditionViolationError
from position_engine.domain.services.pair_orientation import quote_value_of_amounts
from position_engine.domain.services.position_valuation import current_position_value
from position_engine.domain.services.univ3_math import validate_tick_range


FEE_DENOMINATOR = 1_000_000
DEFAULT_ANNUALIZATION_DAYS = 365


def _empty_projection(*, is_out_of_range: bool, has_valid_data: bool) -> AprProjection:
    return AprProjection(
        daily_fees_token0=0,
        daily_fees_token1=0,
        user_share=Decimal("0"),
        user_fees_token0=0,
        user_fees_token1=0,
        user_fees_quote_value=0,
        position_value_quote=0,
        daily_apr=Decimal("0"),
        annualized_apr=Decimal("0"),
        is_out_of_range=is_out_of_range,
        has_valid_data=has_valid_data,
    )


def is_position_out_of_range(current_tick: int, tick_lower: int, tick_upper: int) -> bool:
    return current_tick < tick_lower or current_tick >= tick_upper


def project_position_apr(
    snapshot: PoolSnapshot,
    position: Position,
    metrics: PoolVolumeMetrics,
    *,
    annualization_days: int = DEFAULT_ANNUALIZATION_DAYS,
) -> AprProjection:
    """Project daily and annualized fee yield from 24h pool volume.

    The pool liquidity reported by the indexer is assumed to exclude the
    position, so the share is L_pos / (L_pool + L_pos). This is a modeling
    assumption about the data source. APR values are fractions (0.01 = 1%)
    and annualization is simple, without compounding.
    """
    validate_tick_range(position.range.tick_lower, position.range.tick_upper)
    if position.liquidity < 0 or snapshot.liquidity < 0:
        raise PreconditionViolationError("liquidity must be non-negative.")
    if metrics.volume_token0 < 0 or metrics.volume_token1 < 0:
        raise PreconditionViolationError("volumes must be non-negative.")

    is_out_of_range = is_position_out_of_range(
        snapshot.current_tick,
        position.range.tick_lower,
        position.range.tick_upper,
    )
    if position.liquidity == 0:
        return _empty_projection(is_out_of_range=is_out_of_range, has_valid_data=False)
    if metrics.volume_token0 == 0 and metrics.volume_token1 == 0:
        return _empty_projection(is_out_of_range=is_out_of_range, has_valid_data=True)

    daily_fees_token0 = metrics.volume_token0 * snapshot.fee_tier_bps // FEE_DENOMINATOR
    daily_fees_token1 = metrics.volume_token1 * snapshot.fee_tier_bps // FEE_DENOMINATOR
    position_value_quote = current_position_value(snapshot, position)

    total_liquidity = snapshot.liquidity + position.liquidity
    if is_out_of_range or total_liquidity == 0:
        # Out-of-range liquidity earns nothing.
        return AprProjection(
            daily_fees_token0=daily_fees_token0,
            daily_fees_token1=daily_fees_token1,
            user_share=Decimal("0"),
            user_fees_token0=0,
            user_fees_token1=0,
            user_fees_quote_value=0,
            position_value_quote=position_value_quote,
            daily_apr=Decimal("0"),
            annualized_apr=Decimal("0"),
            is_out_of_range=is_out_of_range,
            has_valid_data=True,
        )

    user_share = Decimal(position.liquidity) / Decimal(total_liquidity)
    user_fees_token0 = daily_fees_token0 * position.liquidity // total_liquidity
    user_fees_token1 = daily_fees_token1 * position.liquidity // total_liquidity
    user_fees_quote_value = quote_value_of_amounts(
        user_fees_token0,
        user_fees_token1,
        snapshot.sqrt_price_x96,
        is_token0_quote=position.is_token0_quote,
    )

    daily_apr = (
        Decimal(user_fees_quote_value) / Decimal(position_value_quote)
        if position_value_quote > 0
        else Decimal("0")
    )
    return AprProjection(
        daily_fees_token0=daily_fees_token0,
        daily_fees_token1=daily_fees_token1,
        user_share=user_share,
        user_fees_token0=user_fees_token0,
        user_fees_token1=user_fees_token1,
        user_fees_quote_value=user_fees_quote_value,
        position_value_quote=position_value_quote,
        daily_apr=daily_apr,
        annualized_apr=daily_apr * Decimal(annualization_days),
        is_out_of_range=False,
        has_valid_data=True,
    )
