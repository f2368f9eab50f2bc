from __future__ import annotations

from position_engine.domain.entities.apr import AprPeriod
from position_engine.domain.entities.ledger import LedgerEntry


SECONDS_PER_YEAR = 365 * 24 * 60 * 60


def _duration_seconds(start: LedgerEntry, end: LedgerEntry) -> int:
    return max(int((end.timestamp - start.timestamp).total_seconds()), 0)


def _time_weighted_cost_basis(window: list[LedgerEntry]) -> int:
    total_seconds = _duration_seconds(window[0], window[-1])
    if total_seconds == 0:
        return window[0].cost_basis_after
    weighted = 0
    for current, following in zip(window, window[1:]):
        weighted += current.cost_basis_after * _duration_seconds(current, following)
    return weighted // total_seconds


def calculate_apr_periods(entries: list[LedgerEntry]) -> list[AprPeriod]:
    """Realized fee APR for each stretch between consecutive collects, newest first."""
    timed = [entry for entry in entries if entry.timestamp is not None]
    periods: list[AprPeriod] = []
    start = 0
    for index in range(1, len(timed)):
        if timed[index].event_type != "COLLECT":
            continue
        window = timed[start : index + 1]
        duration = _duration_seconds(window[0], window[-1])
        cost_basis = _time_weighted_cost_basis(window)
        collected = timed[index].token_value
        apr_bps = 0
        if duration > 0 and cost_basis > 0:
            apr_bps = collected * 10_000 * SECONDS_PER_YEAR // (cost_basis * duration)
        periods.append(
            AprPeriod(
                start_timestamp=window[0].timestamp,
                end_timestamp=window[-1].timestamp,
                duration_seconds=duration,
                cost_basis=cost_basis,
                collected_fee_value=collected,
                apr_bps=apr_bps,
                event_count=len(window),
            )
        )
        start = index
    periods.reverse()
    return periods
