from __future__ import annotations

from dataclasses import dataclass

from position_engine.domain.entities.break_even import BreakEvenResult
from position_engine.domain.entities.ledger import PnLBreakdown
from position_engine.domain.entities.pool import PoolSnapshot
from position_engine.domain.entities.position import Position


@dataclass(frozen=True)
class GetBreakEvenPriceInput:
    snapshot: PoolSnapshot
    position: Position
    breakdown: PnLBreakdown


@dataclass(frozen=True)
class GetBreakEvenPriceOutput:
    current_price: int
    result: BreakEvenResult
