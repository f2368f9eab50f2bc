from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


BreakEvenStatus = Literal["not_required", "exact", "approximate"]


@dataclass(frozen=True)
class BreakEvenResult:
    status: BreakEvenStatus
    price: int | None
    target_value: int
    iterations: int

    @property
    def is_approximate(self) -> bool:
        return self.status == "approximate"
