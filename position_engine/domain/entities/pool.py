from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Token:
    address: str
    decimals: int
    symbol: str | None = None


@dataclass(frozen=True)
class PoolSnapshot:
    sqrt_price_x96: int
    current_tick: int
    liquidity: int
    fee_tier_bps: int
    tick_spacing: int
    token0: Token
    token1: Token


@dataclass(frozen=True)
class PoolVolumeMetrics:
    volume_token0: int
    volume_token1: int
