"""Error kinds raised by the factory and pair.

Every failure of a factory or pair operation maps to exactly one ErrorKind.
Each kind has its own exception class so callers can catch a single kind,
or DexError for all of them.
"""

from enum import Enum


class ErrorKind(Enum):
    """Closed set of failure kinds."""

    IDENTICAL_TOKEN_ADDRESSES = "identical_token_addresses"
    PAIR_ALREADY_EXISTS = "pair_already_exists"
    INSUFFICIENT_INPUT_AMOUNT = "insufficient_input_amount"
    INVALID_INPUT_AMOUNT = "invalid_input_amount"
    INSUFFICIENT_LIQUIDITY = "insufficient_liquidity"
    UNKNOWN_TOKEN = "unknown_token"
    LOCKED = "locked"
    CONSTANT_PRODUCT_VIOLATED = "constant_product_violated"


class DexError(Exception):
    """Base error for factory and pair operations."""

    kind: ErrorKind


class IdenticalTokenAddresses(DexError):
    """create_pair was given the same token twice."""

    kind = ErrorKind.IDENTICAL_TOKEN_ADDRESSES


class PairAlreadyExists(DexError):
    """A pair for this token pair is already registered, in either order."""

    kind = ErrorKind.PAIR_ALREADY_EXISTS


class InsufficientInputAmount(DexError):
    """Input amount is zero, or too small to mint shares or buy output."""

    kind = ErrorKind.INSUFFICIENT_INPUT_AMOUNT


class InvalidInputAmount(DexError):
    """Swap was given input on both sides."""

    kind = ErrorKind.INVALID_INPUT_AMOUNT


class InsufficientLiquidity(DexError):
    """Not enough shares to burn, or not enough reserves to trade against."""

    kind = ErrorKind.INSUFFICIENT_LIQUIDITY


class UnknownToken(DexError):
    """Token address is not in the token registry."""

    kind = ErrorKind.UNKNOWN_TOKEN


class Locked(DexError):
    """Pair was re-entered while a mutating call was in progress."""

    kind = ErrorKind.LOCKED


class ConstantProductViolated(DexError):
    """reserve0 * reserve1 decreased across a swap."""

    kind = ErrorKind.CONSTANT_PRODUCT_VIOLATED
