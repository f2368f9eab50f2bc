from __future__ import annotations

import logging

from position_engine.application.dto.position_apr import ProjectPositionAprInput, ProjectPositionAprOutput
from position_engine.domain.services.apr_projection import (
    DEFAULT_ANNUALIZATION_DAYS,
    project_position_apr,
)
from position_engine.domain.services.position_valuation import ensure_position_matches_pool


logger = logging.getLogger(__name__)


class ProjectPositionAprUseCase:
    def __init__(self, *, annualization_days: int = DEFAULT_ANNUALIZATION_DAYS):
        self._annualization_days = annualization_days

    def execute(self, command: ProjectPositionAprInput) -> ProjectPositionAprOutput:
        ensure_position_matches_pool(command.snapshot, command.position)
        projection = project_position_apr(
            command.snapshot,
            command.position,
            command.metrics,
            annualization_days=self._annualization_days,
        )
        if not projection.has_valid_data:
            logger.info("project_position_apr: no_valid_data liquidity=%s", command.position.liquidity)
        return ProjectPositionAprOutput(projection=projection)
