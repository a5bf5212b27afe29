"""Constant product (x * y = k) pricing and liquidity share math.

All functions are pure: they read reserves and amounts and return integers,
leaving validation of which inputs are allowed to the pair. Division always
floors, so rounding favours the pool.
"""

from dex.constants import FEE_DENOMINATOR
from dex.safe_int import S


def get_amount_out(
    amount_in: int,
    reserve_in: int,
    reserve_out: int,
    fee_multiplier: int,
) -> int:
    """Calculate swap output using the constant product formula.

    Formula: amount_out = (in * fee * res_out) / (res_in * 10000 + in * fee)

    Args:
        amount_in: Input token amount (raw, before fee)
        reserve_in: Reserve of input token in pool
        reserve_out: Reserve of output token in pool
        fee_multiplier: 10000 - fee_bps (9970 for a 0.3% fee)

    Returns:
        Output token amount, 0 if the input or either reserve is empty
    """
    if amount_in <= 0:
        return 0
    if reserve_in <= 0 or reserve_out <= 0:
        return 0

    amount_in_with_fee = S(amount_in) * S(fee_multiplier)
    numerator = amount_in_with_fee * S(reserve_out)
    denominator = S(reserve_in) * S(FEE_DENOMINATOR) + amount_in_with_fee

    return (numerator // denominator).value


def initial_liquidity(amount0: int, amount1: int) -> int:
    """Shares minted by the first deposit into an empty pool.

    The geometric mean of the deposit, so the first depositor cannot pick an
    arbitrary share price.
    """
    return (S(amount0) * S(amount1)).isqrt().value


def proportional_liquidity(
    amount0: int,
    amount1: int,
    reserve0: int,
    reserve1: int,
    total_supply: int,
) -> int:
    """Shares minted by a deposit into a funded pool.

    The smaller of the two per-side ratios decides, so supplying tokens off
    the current reserve ratio never mints extra shares.

    Raises:
        DivisionByZero: If either reserve is empty
    """
    by_token0 = S(amount0) * S(total_supply) // S(reserve0)
    by_token1 = S(amount1) * S(total_supply) // S(reserve1)
    return by_token0.min(by_token1).value


def burn_amounts(
    liquidity: int,
    reserve0: int,
    reserve1: int,
    total_supply: int,
) -> tuple[int, int]:
    """Reserves paid out for burning liquidity shares.

    Exact when liquidity == total_supply, so a full withdrawal empties the pool.

    Raises:
        DivisionByZero: If total_supply is zero
    """
    amount0 = S(liquidity) * S(reserve0) // S(total_supply)
    amount1 = S(liquidity) * S(reserve1) // S(total_supply)
    return amount0.value, amount1.value


def k_not_decreased(
    reserve0_before: int,
    reserve1_before: int,
    reserve0_after: int,
    reserve1_after: int,
) -> bool:
    """Check that the reserve product did not shrink."""
    return S(reserve0_after) * S(reserve1_after) >= S(reserve0_before) * S(reserve1_before)
