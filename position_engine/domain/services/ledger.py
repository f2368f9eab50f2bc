from __future__ import annotations

import logging
from collections.abc import Iterable

from position_engine.domain.entities.ledger import (
    CollectEvent,
    DecreaseLiquidityEvent,
    IncreaseLiquidityEvent,
    LedgerEntry,
    LedgerEvent,
    LedgerReplay,
    PnLBreakdown,
)
from position_engine.domain.exceptions import OrderingViolationError, PreconditionViolationError
from position_engine.domain.services.pair_orientation import quote_value_of_amounts
from position_engine.domain.services.univ3_math import sqrt_price_to_price


logger = logging.getLogger(__name__)


def ensure_ascending_order(events: list[LedgerEvent]) -> None:
    for index in range(1, len(events)):
        previous_key = events[index - 1].ordering_key
        current_key = events[index].ordering_key
        if current_key <= previous_key:
            logger.warning(
                "ledger: ordering_violation index=%s previous=%s current=%s",
                index,
                previous_key,
                current_key,
            )
            raise OrderingViolationError(
                f"Ledger event {index} {current_key} is not after {previous_key}.",
                index=index,
                previous_key=previous_key,
                current_key=current_key,
            )


def _validate_event(event: LedgerEvent) -> None:
    if event.amount0 < 0 or event.amount1 < 0:
        raise PreconditionViolationError("ledger event amounts must be non-negative.")
    if event.sqrt_price_x96 <= 0:
        raise PreconditionViolationError("ledger event sqrt_price_x96 must be positive.")
    if isinstance(event, (IncreaseLiquidityEvent, DecreaseLiquidityEvent)) and event.liquidity < 0:
        raise PreconditionViolationError("ledger event liquidity must be non-negative.")


def replay_ledger(
    events: Iterable[LedgerEvent],
    *,
    is_token0_quote: bool,
    base_decimals: int,
) -> LedgerReplay:
    """Fold the ordered ledger into cost basis, realized PnL and collected fees.

    Every amount is valued in raw quote units at the sqrt price recorded on its
    own event. Events must arrive in strictly ascending
    (block_number, transaction_index, log_index) order.
    """
    ordered = list(events)
    ensure_ascending_order(ordered)

    cost_basis = 0
    realized_pnl = 0
    collected_fees = 0
    active_liquidity = 0
    entries: list[LedgerEntry] = []

    for event in ordered:
        _validate_event(event)
        token_value = quote_value_of_amounts(
            event.amount0,
            event.amount1,
            event.sqrt_price_x96,
            is_token0_quote=is_token0_quote,
        )
        delta_cost_basis = 0
        delta_pnl = 0

        if isinstance(event, IncreaseLiquidityEvent):
            delta_cost_basis = token_value
            active_liquidity += event.liquidity
        elif isinstance(event, DecreaseLiquidityEvent):
            if event.liquidity > active_liquidity:
                raise PreconditionViolationError(
                    f"decrease of {event.liquidity} exceeds active liquidity {active_liquidity}."
                )
            proportional = (cost_basis * event.liquidity) // active_liquidity if active_liquidity else 0
            delta_cost_basis = -proportional
            delta_pnl = token_value - proportional
            active_liquidity -= event.liquidity
        elif isinstance(event, CollectEvent):
            collected_fees += token_value
        else:
            raise PreconditionViolationError(f"unsupported ledger event {type(event).__name__}.")

        cost_basis += delta_cost_basis
        realized_pnl += delta_pnl
        entries.append(
            LedgerEntry(
                event_type=event.event_type,
                ordering_key=event.ordering_key,
                timestamp=event.timestamp,
                pool_price=sqrt_price_to_price(
                    event.sqrt_price_x96,
                    base_is_token0=not is_token0_quote,
                    base_decimals=base_decimals,
                ),
                token0_amount=event.amount0,
                token1_amount=event.amount1,
                token_value=token_value,
                delta_cost_basis=delta_cost_basis,
                cost_basis_after=cost_basis,
                delta_pnl=delta_pnl,
                pnl_after=realized_pnl,
                collected_fees_after=collected_fees,
                liquidity_after=active_liquidity,
            )
        )

    return LedgerReplay(
        cost_basis=cost_basis,
        realized_pnl=realized_pnl,
        collected_fees=collected_fees,
        active_liquidity=active_liquidity,
        entries=entries,
    )


def build_pnl_breakdown(replay: LedgerReplay, *, current_value: int, unclaimed_fees: int) -> PnLBreakdown:
    if unclaimed_fees < 0:
        raise PreconditionViolationError("unclaimed_fees must be non-negative.")
    return PnLBreakdown(
        current_value=current_value,
        current_cost_basis=replay.cost_basis,
        realized_pnl=replay.realized_pnl,
        collected_fees=replay.collected_fees,
        unclaimed_fees=unclaimed_fees,
    )
