"""Minimal DEX - constant product AMM with a pair factory."""

__version__ = "0.1.0"

from dex.errors import (  # noqa: E402
    ConstantProductViolated,
    DexError,
    ErrorKind,
    IdenticalTokenAddresses,
    InsufficientInputAmount,
    InsufficientLiquidity,
    InvalidInputAmount,
    Locked,
    PairAlreadyExists,
    UnknownToken,
)
from dex.exchange import Exchange, get_default_exchange  # noqa: E402
from dex.factory import Factory  # noqa: E402
from dex.pair import Pair, PairState  # noqa: E402

__all__ = [
    "Exchange",
    "get_default_exchange",
    "Factory",
    "Pair",
    "PairState",
    # Errors
    "DexError",
    "ErrorKind",
    "IdenticalTokenAddresses",
    "PairAlreadyExists",
    "InsufficientInputAmount",
    "InvalidInputAmount",
    "InsufficientLiquidity",
    "UnknownToken",
    "Locked",
    "ConstantProductViolated",
    "__version__",
]
