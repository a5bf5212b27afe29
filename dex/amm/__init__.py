"""AMM pricing math."""

from dex.amm.constant_product import (
    burn_amounts,
    get_amount_out,
    initial_liquidity,
    k_not_decreased,
    proportional_liquidity,
)

__all__ = [
    "get_amount_out",
    "initial_liquidity",
    "proportional_liquidity",
    "burn_amounts",
    "k_not_decreased",
]
