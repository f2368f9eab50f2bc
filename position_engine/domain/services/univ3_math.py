from __future__ import annotations

from decimal import Decimal

from position_engine.domain.exceptions import PreconditionViolationError, TickOutOfRangeError


MIN_TICK = -887272
MAX_TICK = 887272
MIN_SQRT_RATIO = 4295128739
MAX_SQRT_RATIO = 1461446703485210103287273052203988822378723970342

Q96 = 2**96
Q192 = 2**192
MAX_UINT256 = 2**256 - 1

# One Q128 multiplier per bit of |tick|: sqrt(1.0001) ** -(2 ** i).
_TICK_BIT_RATIOS = (
    0xFFFCB933BD6FAD37AA2D162D1A594001,
    0xFFF97272373D413259A46990580E213A,
    0xFFF2E50F5F656932EF12357CF3C7FDCC,
    0xFFE5CACA7E10E4E61C3624EAA0941CD0,
    0xFFCB9843D60F6159C9DB58835C926644,
    0xFF973B41FA98C081472E6896DFB254C0,
    0xFF2EA16466C96A3843EC78B326B52861,
    0xFE5DEE046A99A2A811C461F1969C3053,
    0xFCBE86C7900A88AEDCFFC83B479AA3A4,
    0xF987A7253AC413176F2B074CF7815E54,
    0xF3392B0822B70005940C7A398E4B70F3,
    0xE7159475A2C29B7443B29C7FA6E889D9,
    0xD097F3BDFD2022B8845AD8F792AA5825,
    0xA9F746462D870FDF8A65DC1F90E061E5,
    0x70D869A156D2A1B890BB3DF62BAF32F7,
    0x31BE135F97D08FD981231505542FCFA6,
    0x9AA508B5B7A84E1C677DE54F3E99BC9,
    0x5D6AF8DEDB81196699C329225EE604,
    0x2216E584F5FA1EA926041BEDFE98,
    0x48A170391F7DC42444E8FA2,
)


def mul_div(a: int, b: int, denominator: int) -> int:
    if denominator == 0:
        raise PreconditionViolationError("denominator must be non-zero.")
    return (a * b) // denominator


def mul_div_rounding_up(a: int, b: int, denominator: int) -> int:
    if denominator == 0:
        raise PreconditionViolationError("denominator must be non-zero.")
    return -((-(a * b)) // denominator)


def ensure_tick_in_bounds(tick: int) -> None:
    if tick < MIN_TICK or tick > MAX_TICK:
        raise TickOutOfRangeError(tick)


def validate_tick_range(tick_lower: int, tick_upper: int, tick_spacing: int | None = None) -> None:
    ensure_tick_in_bounds(tick_lower)
    ensure_tick_in_bounds(tick_upper)
    if tick_lower >= tick_upper:
        raise PreconditionViolationError("tick_lower must be lower than tick_upper.")
    if tick_spacing is None:
        return
    if tick_spacing <= 0:
        raise PreconditionViolationError("tick_spacing must be a positive integer.")
    if tick_lower % tick_spacing != 0 or tick_upper % tick_spacing != 0:
        raise PreconditionViolationError(
            f"ticks ({tick_lower}, {tick_upper}) are not aligned to tick spacing {tick_spacing}."
        )


def get_sqrt_ratio_at_tick(tick: int) -> int:
    """Q64.96 square root of 1.0001 ** tick, bit-exact with the on-chain TickMath."""
    ensure_tick_in_bounds(tick)
    abs_tick = -tick if tick < 0 else tick

    ratio = 1 << 128
    for bit, multiplier in enumerate(_TICK_BIT_RATIOS):
        if abs_tick & (1 << bit):
            ratio = (ratio * multiplier) >> 128

    if tick > 0:
        ratio = MAX_UINT256 // ratio

    # Q128.128 -> Q64.96, rounding up so the inverse lookup stays consistent.
    return (ratio >> 32) + (0 if ratio % (1 << 32) == 0 else 1)


def get_tick_at_sqrt_ratio(sqrt_price_x96: int) -> int:
    """Greatest tick whose sqrt ratio is less than or equal to the given one."""
    if sqrt_price_x96 < MIN_SQRT_RATIO or sqrt_price_x96 >= MAX_SQRT_RATIO:
        raise PreconditionViolationError("sqrt_price_x96 is outside the supported range.")
    low, high = MIN_TICK, MAX_TICK
    while low < high:
        mid = (low + high + 1) // 2
        if get_sqrt_ratio_at_tick(mid) <= sqrt_price_x96:
            low = mid
        else:
            high = mid - 1
    return low


def ensure_tick_matches_sqrt_price(current_tick: int, sqrt_price_x96: int) -> None:
    derived = get_tick_at_sqrt_ratio(sqrt_price_x96)
    if abs(derived - current_tick) > 1:
        raise PreconditionViolationError(
            f"current_tick {current_tick} is inconsistent with sqrt_price_x96 (tick {derived})."
        )


def _address_value(address: str) -> int | str:
    raw = address.strip().lower()
    try:
        return int(raw, 16)
    except ValueError:
        return raw


def compare_addresses(address_a: str, address_b: str) -> int:
    a = _address_value(address_a)
    b = _address_value(address_b)
    if type(a) is not type(b):
        a, b = str(a), str(b)
    if a < b:
        return -1
    if a > b:
        return 1
    return 0


def is_token0(token_address: str, other_address: str) -> bool:
    """The numerically smaller address is always token0."""
    cmp = compare_addresses(token_address, other_address)
    if cmp == 0:
        raise PreconditionViolationError("token addresses must differ.")
    return cmp < 0


def value_of_token0_amount_in_token1(amount0: int, sqrt_price_x96: int) -> int:
    return mul_div(amount0, sqrt_price_x96 * sqrt_price_x96, Q192)


def value_of_token1_amount_in_token0(amount1: int, sqrt_price_x96: int) -> int:
    if sqrt_price_x96 <= 0:
        raise PreconditionViolationError("sqrt_price_x96 must be positive.")
    return mul_div(amount1, Q192, sqrt_price_x96 * sqrt_price_x96)


def sqrt_price_to_price(sqrt_price_x96: int, *, base_is_token0: bool, base_decimals: int) -> int:
    """Raw quote units for one whole base token at the given sqrt price."""
    one_base = 10**base_decimals
    if base_is_token0:
        return value_of_token0_amount_in_token1(one_base, sqrt_price_x96)
    return value_of_token1_amount_in_token0(one_base, sqrt_price_x96)


def sqrt_price_x96_to_price(
    sqrt_price_x96: int,
    token0_decimals: int,
    token1_decimals: int,
) -> Decimal:
    """Human token1-per-token0 price for display. Not used in any accounting path."""
    if sqrt_price_x96 <= 0:
        raise PreconditionViolationError("sqrt_price_x96 must be positive.")
    raw_price = Decimal(sqrt_price_x96 * sqrt_price_x96) / Decimal(Q192)
    return raw_price * Decimal(10) ** (token0_decimals - token1_decimals)


def tick_to_price(
    tick: int,
    base_token_address: str,
    quote_token_address: str,
    base_decimals: int,
) -> int:
    """Raw quote units per one whole base token at the tick, floored.

    Flooring loses resolution when the raw price is small: with few base
    decimals neighbouring ticks can share one integer price, and
    price_to_tick then returns the greatest tick with that price.
    """
    sqrt_ratio = get_sqrt_ratio_at_tick(tick)
    return sqrt_price_to_price(
        sqrt_ratio,
        base_is_token0=is_token0(base_token_address, quote_token_address),
        base_decimals=base_decimals,
    )


def snap_tick_down(tick: int, tick_spacing: int) -> int:
    if tick_spacing <= 0:
        raise PreconditionViolationError("tick_spacing must be a positive integer.")
    snapped = (tick // tick_spacing) * tick_spacing
    if snapped < MIN_TICK:
        snapped += tick_spacing
    return snapped


def price_to_tick(
    price: int,
    tick_spacing: int,
    base_token_address: str,
    quote_token_address: str,
    base_decimals: int,
) -> int:
    """Tick for a quote-per-base price, floored onto the tick-spacing grid.

    Prices outside the representable range clamp to the outermost usable tick.
    """
    if price <= 0:
        raise PreconditionViolationError("price must be positive.")
    base_is_token0 = is_token0(base_token_address, quote_token_address)

    def not_past(tick: int) -> bool:
        tick_price = sqrt_price_to_price(
            get_sqrt_ratio_at_tick(tick),
            base_is_token0=base_is_token0,
            base_decimals=base_decimals,
        )
        # Pool price rises with the tick; the quote-per-base price falls when base is token1.
        return tick_price <= price if base_is_token0 else tick_price >= price

    low, high = MIN_TICK, MAX_TICK
    while low < high:
        mid = (low + high + 1) // 2
        if not_past(mid):
            low = mid
        else:
            high = mid - 1
    return snap_tick_down(low, tick_spacing)
