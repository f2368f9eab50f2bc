from __future__ import annotations

import logging
from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException

from position_engine.api.deps import (
    get_apr_periods_use_case,
    get_break_even_price_use_case,
    get_position_ledger_use_case,
    get_position_pnl_use_case,
    get_project_position_apr_use_case,
)
from position_engine.api.mappers import (
    to_fee_growth_input,
    to_ledger_events,
    to_pnl_breakdown,
    to_pool_snapshot,
    to_position,
)
from position_engine.api.schemas.positions import (
    AprPeriodResponse,
    AprPeriodsResponse,
    BreakEvenRequest,
    BreakEvenResponse,
    LedgerEntryResponse,
    PnLBreakdownResponse,
    PositionAprRequest,
    PositionAprResponse,
    PositionLedgerRequest,
    PositionLedgerResponse,
    PositionPnlRequest,
    PositionPnlResponse,
    PositionStateResponse,
    PositionStatesResponse,
)
from position_engine.application.dto.break_even import GetBreakEvenPriceInput
from position_engine.application.dto.position_apr import GetAprPeriodsInput, ProjectPositionAprInput
from position_engine.application.dto.position_ledger import GetPositionLedgerInput
from position_engine.application.dto.position_pnl import GetPositionPnlInput
from position_engine.application.use_cases.get_apr_periods import GetAprPeriodsUseCase
from position_engine.application.use_cases.get_break_even_price import GetBreakEvenPriceUseCase
from position_engine.application.use_cases.get_position_ledger import GetPositionLedgerUseCase
from position_engine.application.use_cases.get_position_pnl import GetPositionPnlUseCase
from position_engine.application.use_cases.project_position_apr import ProjectPositionAprUseCase
from position_engine.domain.entities.break_even import BreakEvenResult
from position_engine.domain.entities.position import PositionState
from position_engine.domain.entities.pool import PoolVolumeMetrics
from position_engine.domain.exceptions import OrderingViolationError, PreconditionViolationError

router = APIRouter()
logger = logging.getLogger(__name__)


def _raise_http(route: str, exc: Exception) -> NoReturn:
    if isinstance(exc, OrderingViolationError):
        logger.warning(
            "positions_router: ordering_violation route=%s index=%s previous=%s current=%s",
            route,
            exc.index,
            exc.previous_key,
            exc.current_key,
        )
        raise HTTPException(
            status_code=409,
            detail={
                "message": str(exc),
                "index": exc.index,
                "previous_key": list(exc.previous_key),
                "current_key": list(exc.current_key),
            },
        ) from exc
    logger.warning("positions_router: invalid_input route=%s detail=%s", route, exc)
    raise HTTPException(status_code=400, detail=str(exc)) from exc


def _state_response(state: PositionState) -> PositionStateResponse:
    return PositionStateResponse(
        tick=state.tick,
        base_amount=state.base_amount,
        quote_amount=state.quote_amount,
        price=state.price,
        position_value=state.position_value,
        pnl_including_fees=state.pnl_including_fees,
        pnl_excluding_fees=state.pnl_excluding_fees,
    )


def _break_even_response(result: BreakEvenResult, current_price: int) -> BreakEvenResponse:
    return BreakEvenResponse(
        status=result.status,
        price=result.price,
        target_value=result.target_value,
        iterations=result.iterations,
        current_price=current_price,
    )


@router.post("/v1/positions/pnl", response_model=PositionPnlResponse)
def get_position_pnl(
    req: PositionPnlRequest,
    use_case: GetPositionPnlUseCase = Depends(get_position_pnl_use_case),
):
    try:
        result = use_case.execute(
            GetPositionPnlInput(
                snapshot=to_pool_snapshot(req.pool),
                position=to_position(req.position),
                events=to_ledger_events(req.events),
                unclaimed_fees=req.unclaimed_fees,
                fee_growth=to_fee_growth_input(req.fee_growth),
            )
        )
    except (PreconditionViolationError, OrderingViolationError) as exc:
        _raise_http("pnl", exc)

    breakdown = result.breakdown
    return PositionPnlResponse(
        current_price=result.current_price,
        breakdown=PnLBreakdownResponse(
            current_value=breakdown.current_value,
            current_cost_basis=breakdown.current_cost_basis,
            realized_pnl=breakdown.realized_pnl,
            collected_fees=breakdown.collected_fees,
            unclaimed_fees=breakdown.unclaimed_fees,
            unrealized_pnl=breakdown.unrealized_pnl,
            total_pnl=breakdown.total_pnl,
        ),
        states=PositionStatesResponse(
            lower_range=_state_response(result.states.lower_range),
            current=_state_response(result.states.current),
            upper_range=_state_response(result.states.upper_range),
        ),
        break_even=_break_even_response(result.break_even, result.current_price),
    )


@router.post("/v1/positions/ledger", response_model=PositionLedgerResponse)
def get_position_ledger(
    req: PositionLedgerRequest,
    use_case: GetPositionLedgerUseCase = Depends(get_position_ledger_use_case),
):
    try:
        result = use_case.execute(
            GetPositionLedgerInput(
                snapshot=to_pool_snapshot(req.pool),
                is_token0_quote=req.is_token0_quote,
                events=to_ledger_events(req.events),
            )
        )
    except (PreconditionViolationError, OrderingViolationError) as exc:
        _raise_http("ledger", exc)

    return PositionLedgerResponse(
        entries=[
            LedgerEntryResponse(
                event_type=entry.event_type,
                block_number=entry.ordering_key[0],
                transaction_index=entry.ordering_key[1],
                log_index=entry.ordering_key[2],
                timestamp=entry.timestamp,
                pool_price=entry.pool_price,
                token0_amount=entry.token0_amount,
                token1_amount=entry.token1_amount,
                token_value=entry.token_value,
                delta_cost_basis=entry.delta_cost_basis,
                cost_basis_after=entry.cost_basis_after,
                delta_pnl=entry.delta_pnl,
                pnl_after=entry.pnl_after,
                collected_fees_after=entry.collected_fees_after,
                liquidity_after=entry.liquidity_after,
            )
            for entry in result.entries
        ],
        cost_basis=result.cost_basis,
        realized_pnl=result.realized_pnl,
        collected_fees=result.collected_fees,
        active_liquidity=result.active_liquidity,
    )


@router.post("/v1/positions/break-even", response_model=BreakEvenResponse)
def get_break_even_price(
    req: BreakEvenRequest,
    use_case: GetBreakEvenPriceUseCase = Depends(get_break_even_price_use_case),
):
    try:
        result = use_case.execute(
            GetBreakEvenPriceInput(
                snapshot=to_pool_snapshot(req.pool),
                position=to_position(req.position),
                breakdown=to_pnl_breakdown(req.breakdown),
            )
        )
    except PreconditionViolationError as exc:
        _raise_http("break_even", exc)

    return _break_even_response(result.result, result.current_price)


@router.post("/v1/positions/apr", response_model=PositionAprResponse)
def project_position_apr(
    req: PositionAprRequest,
    use_case: ProjectPositionAprUseCase = Depends(get_project_position_apr_use_case),
):
    try:
        result = use_case.execute(
            ProjectPositionAprInput(
                snapshot=to_pool_snapshot(req.pool),
                position=to_position(req.position),
                metrics=PoolVolumeMetrics(
                    volume_token0=req.volume_token0,
                    volume_token1=req.volume_token1,
                ),
            )
        )
    except PreconditionViolationError as exc:
        _raise_http("apr", exc)

    projection = result.projection
    return PositionAprResponse(
        daily_fees_token0=projection.daily_fees_token0,
        daily_fees_token1=projection.daily_fees_token1,
        user_share=projection.user_share,
        user_fees_token0=projection.user_fees_token0,
        user_fees_token1=projection.user_fees_token1,
        user_fees_quote_value=projection.user_fees_quote_value,
        position_value_quote=projection.position_value_quote,
        daily_apr=projection.daily_apr,
        annualized_apr=projection.annualized_apr,
        is_out_of_range=projection.is_out_of_range,
        has_valid_data=projection.has_valid_data,
    )


@router.post("/v1/positions/apr-periods", response_model=AprPeriodsResponse)
def get_apr_periods(
    req: PositionLedgerRequest,
    use_case: GetAprPeriodsUseCase = Depends(get_apr_periods_use_case),
):
    try:
        result = use_case.execute(
            GetAprPeriodsInput(
                snapshot=to_pool_snapshot(req.pool),
                is_token0_quote=req.is_token0_quote,
                events=to_ledger_events(req.events),
            )
        )
    except (PreconditionViolationError, OrderingViolationError) as exc:
        _raise_http("apr_periods", exc)

    return AprPeriodsResponse(
        periods=[
            AprPeriodResponse(
                start_timestamp=period.start_timestamp,
                end_timestamp=period.end_timestamp,
                duration_seconds=period.duration_seconds,
                cost_basis=period.cost_basis,
                collected_fee_value=period.collected_fee_value,
                apr_bps=period.apr_bps,
                event_count=period.event_count,
            )
            for period in result.periods
        ]
    )
