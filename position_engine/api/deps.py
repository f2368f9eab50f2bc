from __future__ import annotations

from position_engine.application.use_cases.get_apr_periods import GetAprPeriodsUseCase
from position_engine.application.use_cases.get_break_even_price import GetBreakEvenPriceUseCase
from position_engine.application.use_cases.get_position_ledger import GetPositionLedgerUseCase
from position_engine.application.use_cases.get_position_pnl import GetPositionPnlUseCase
from position_engine.application.use_cases.project_position_apr import ProjectPositionAprUseCase
from position_engine.shared.config import get_settings


def get_position_pnl_use_case() -> GetPositionPnlUseCase:
    settings = get_settings()
    return GetPositionPnlUseCase(
        max_iterations=settings.break_even_max_iterations,
        search_factor=settings.break_even_search_factor,
    )


def get_position_ledger_use_case() -> GetPositionLedgerUseCase:
    return GetPositionLedgerUseCase()


def get_break_even_price_use_case() -> GetBreakEvenPriceUseCase:
    settings = get_settings()
    return GetBreakEvenPriceUseCase(
        max_iterations=settings.break_even_max_iterations,
        search_factor=settings.break_even_search_factor,
    )


def get_project_position_apr_use_case() -> ProjectPositionAprUseCase:
    settings = get_settings()
    return ProjectPositionAprUseCase(annualization_days=settings.apr_annualization_days)


def get_apr_periods_use_case() -> GetAprPeriodsUseCase:
    return GetAprPeriodsUseCase()
