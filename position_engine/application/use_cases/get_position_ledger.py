from __future__ import annotations

import logging

from position_engine.application.dto.position_ledger import GetPositionLedgerInput, GetPositionLedgerOutput
from position_engine.domain.services.ledger import replay_ledger
from position_engine.domain.services.pair_orientation import base_and_quote_tokens


logger = logging.getLogger(__name__)


class GetPositionLedgerUseCase:
    def execute(self, command: GetPositionLedgerInput) -> GetPositionLedgerOutput:
        base_token, _ = base_and_quote_tokens(command.snapshot, is_token0_quote=command.is_token0_quote)
        replay = replay_ledger(
            command.events,
            is_token0_quote=command.is_token0_quote,
            base_decimals=base_token.decimals,
        )
        logger.debug("get_position_ledger: replayed events=%s", len(replay.entries))
        return GetPositionLedgerOutput(
            entries=replay.entries,
            cost_basis=replay.cost_basis,
            realized_pnl=replay.realized_pnl,
            collected_fees=replay.collected_fees,
            active_liquidity=replay.active_liquidity,
        )
