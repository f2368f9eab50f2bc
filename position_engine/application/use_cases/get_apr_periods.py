from __future__ import annotations

from position_engine.application.dto.position_apr import GetAprPeriodsInput, GetAprPeriodsOutput
from position_engine.domain.services.apr_periods import calculate_apr_periods
from position_engine.domain.services.ledger import replay_ledger
from position_engine.domain.services.pair_orientation import base_and_quote_tokens


class GetAprPeriodsUseCase:
    def execute(self, command: GetAprPeriodsInput) -> GetAprPeriodsOutput:
        base_token, _ = base_and_quote_tokens(command.snapshot, is_token0_quote=command.is_token0_quote)
        replay = replay_ledger(
            command.events,
            is_token0_quote=command.is_token0_quote,
            base_decimals=base_token.decimals,
        )
        return GetAprPeriodsOutput(periods=calculate_apr_periods(replay.entries))
