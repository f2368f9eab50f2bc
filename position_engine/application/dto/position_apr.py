from __future__ import annotations

from dataclasses import dataclass

from position_engine.domain.entities.apr import AprPeriod, AprProjection
from position_engine.domain.entities.ledger import LedgerEvent
from position_engine.domain.entities.pool import PoolSnapshot, PoolVolumeMetrics
from position_engine.domain.entities.position import Position


@dataclass(frozen=True)
class ProjectPositionAprInput:
    snapshot: PoolSnapshot
    position: Position
    metrics: PoolVolumeMetrics


@dataclass(frozen=True)
class ProjectPositionAprOutput:
    projection: AprProjection


@dataclass(frozen=True)
class GetAprPeriodsInput:
    snapshot: PoolSnapshot
    is_token0_quote: bool
    events: list[LedgerEvent]


@dataclass(frozen=True)
class GetAprPeriodsOutput:
    periods: list[AprPeriod]
