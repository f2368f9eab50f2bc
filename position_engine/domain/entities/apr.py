from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class AprProjection:
    daily_fees_token0: int
    daily_fees_token1: int
    user_share: Decimal
    user_fees_token0: int
    user_fees_token1: int
    user_fees_quote_value: int
    position_value_quote: int
    daily_apr: Decimal
    annualized_apr: Decimal
    is_out_of_range: bool
    has_valid_data: bool


@dataclass(frozen=True)
class AprPeriod:
    start_timestamp: datetime
    end_timestamp: datetime
    duration_seconds: int
    cost_basis: int
    collected_fee_value: int
    apr_bps: int
    event_count: int
