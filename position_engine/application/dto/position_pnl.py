from __future__ import annotations

from dataclasses import dataclass

from position_engine.domain.entities.break_even import BreakEvenResult
from position_engine.domain.entities.ledger import LedgerEvent, PnLBreakdown
from position_engine.domain.entities.pool import PoolSnapshot
from position_engine.domain.entities.position import Position, PositionStates
from position_engine.domain.services.univ3_fee_growth import FeeGrowthReading


@dataclass(frozen=True)
class FeeGrowthInput:
    token0: FeeGrowthReading
    token1: FeeGrowthReading


@dataclass(frozen=True)
class GetPositionPnlInput:
    snapshot: PoolSnapshot
    position: Position
    events: list[LedgerEvent]
    unclaimed_fees: int | None = None
    fee_growth: FeeGrowthInput | None = None


@dataclass(frozen=True)
class GetPositionPnlOutput:
    current_price: int
    breakdown: PnLBreakdown
    states: PositionStates
    break_even: BreakEvenResult
