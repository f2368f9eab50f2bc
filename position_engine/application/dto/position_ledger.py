from __future__ import annotations

from dataclasses import dataclass

from position_engine.domain.entities.ledger import LedgerEntry, LedgerEvent
from position_engine.domain.entities.pool import PoolSnapshot


@dataclass(frozen=True)
class GetPositionLedgerInput:
    snapshot: PoolSnapshot
    is_token0_quote: bool
    events: list[LedgerEvent]


@dataclass(frozen=True)
class GetPositionLedgerOutput:
    entries: list[LedgerEntry]
    cost_basis: int
    realized_pnl: int
    collected_fees: int
    active_liquidity: int
