from __future__ import annotations


class DomainError(Exception):
    """Base for domain errors."""


class PreconditionViolationError(DomainError, ValueError):
    """Malformed input: bad range, misaligned ticks, negative liquidity."""


class TickOutOfRangeError(PreconditionViolationError):
    """Tick outside [MIN_TICK, MAX_TICK]."""

    def __init__(self, tick: int):
        super().__init__(f"tick {tick} is outside the supported tick range.")
        self.tick = tick


class OrderingViolationError(DomainError):
    """Ledger events are not in strictly ascending order."""

    def __init__(
        self,
        message: str,
        *,
        index: int,
        previous_key: tuple[int, int, int],
        current_key: tuple[int, int, int],
    ):
        super().__init__(message)
        self.index = index
        self.previous_key = previous_key
        self.current_key = current_key
