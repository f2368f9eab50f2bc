from __future__ import annotations

import logging

from position_engine.application.dto.position_pnl import GetPositionPnlInput, GetPositionPnlOutput
from position_engine.domain.exceptions import PreconditionViolationError
from position_engine.domain.services.break_even import (
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_SEARCH_FACTOR,
    calculate_break_even_price,
)
from position_engine.domain.services.ledger import build_pnl_breakdown, replay_ledger
from position_engine.domain.services.pair_orientation import base_and_quote_tokens
from position_engine.domain.services.position_valuation import (
    calculate_position_states,
    current_position_value,
    ensure_position_matches_pool,
)
from position_engine.domain.services.univ3_fee_growth import unclaimed_fees_value
from position_engine.domain.services.univ3_math import tick_to_price


logger = logging.getLogger(__name__)


class GetPositionPnlUseCase:
    def __init__(
        self,
        *,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        search_factor: int = DEFAULT_SEARCH_FACTOR,
    ):
        self._max_iterations = max_iterations
        self._search_factor = search_factor

    def execute(self, command: GetPositionPnlInput) -> GetPositionPnlOutput:
        snapshot = command.snapshot
        position = command.position
        ensure_position_matches_pool(snapshot, position)
        if command.unclaimed_fees is not None and command.fee_growth is not None:
            raise PreconditionViolationError("Use either unclaimed_fees or fee_growth.")

        base_token, quote_token = base_and_quote_tokens(snapshot, is_token0_quote=position.is_token0_quote)
        replay = replay_ledger(
            command.events,
            is_token0_quote=position.is_token0_quote,
            base_decimals=base_token.decimals,
        )
        if replay.active_liquidity != position.liquidity:
            logger.warning(
                "get_position_pnl: liquidity_mismatch ledger=%s position=%s",
                replay.active_liquidity,
                position.liquidity,
            )

        if command.fee_growth is not None:
            unclaimed = unclaimed_fees_value(
                snapshot,
                position,
                token0=command.fee_growth.token0,
                token1=command.fee_growth.token1,
            )
        else:
            unclaimed = command.unclaimed_fees or 0

        breakdown = build_pnl_breakdown(
            replay,
            current_value=current_position_value(snapshot, position),
            unclaimed_fees=unclaimed,
        )
        break_even = calculate_break_even_price(
            breakdown,
            snapshot,
            position,
            max_iterations=self._max_iterations,
            search_factor=self._search_factor,
        )
        logger.info(
            "get_position_pnl: events=%s cost_basis=%s realized=%s collected=%s break_even=%s",
            len(command.events),
            breakdown.current_cost_basis,
            breakdown.realized_pnl,
            breakdown.collected_fees,
            break_even.status,
        )

        return GetPositionPnlOutput(
            current_price=tick_to_price(
                snapshot.current_tick,
                base_token.address,
                quote_token.address,
                base_token.decimals,
            ),
            breakdown=breakdown,
            states=calculate_position_states(snapshot, position, breakdown),
            break_even=break_even,
        )
