from __future__ import annotations

from position_engine.application.dto.break_even import GetBreakEvenPriceInput, GetBreakEvenPriceOutput
from position_engine.domain.services.break_even import (
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_SEARCH_FACTOR,
    calculate_break_even_price,
)
from position_engine.domain.services.pair_orientation import base_and_quote_tokens
from position_engine.domain.services.position_valuation import ensure_position_matches_pool
from position_engine.domain.services.univ3_math import tick_to_price


class GetBreakEvenPriceUseCase:
    def __init__(
        self,
        *,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        search_factor: int = DEFAULT_SEARCH_FACTOR,
    ):
        self._max_iterations = max_iterations
        self._search_factor = search_factor

    def execute(self, command: GetBreakEvenPriceInput) -> GetBreakEvenPriceOutput:
        ensure_position_matches_pool(command.snapshot, command.position)
        base_token, quote_token = base_and_quote_tokens(
            command.snapshot,
            is_token0_quote=command.position.is_token0_quote,
        )
        result = calculate_break_even_price(
            command.breakdown,
            command.snapshot,
            command.position,
            max_iterations=self._max_iterations,
            search_factor=self._search_factor,
        )
        return GetBreakEvenPriceOutput(
            current_price=tick_to_price(
                command.snapshot.current_tick,
                base_token.address,
                quote_token.address,
                base_token.decimals,
            ),
            result=result,
        )
