"""Shared type definitions for token identifiers and on-chain amounts."""

from typing import Annotated, Any

from pydantic import AfterValidator, BeforeValidator, Field

from dex.safe_int import UINT256_MAX

ZERO_ADDRESS = "0x" + "0" * 40


def validate_uint256(value: Any) -> str:
    """Validate that a value is a uint256, returning it as a decimal string.

    Raises:
        ValueError: If value is not a non-negative integer within uint256 range
    """
    if isinstance(value, bool):
        raise ValueError("Uint256 cannot be a boolean")
    if isinstance(value, int):
        int_value = value
    elif isinstance(value, str):
        try:
            int_value = int(value)
        except ValueError as err:
            raise ValueError(f"Uint256 must be a decimal integer string: '{value}'") from err
    else:
        raise ValueError(f"Uint256 must be string or int, got {type(value).__name__}")

    if int_value < 0:
        raise ValueError(f"Uint256 cannot be negative: {value}")
    if int_value > UINT256_MAX:
        raise ValueError(f"Uint256 overflow: {value} > 2^256-1")
    return str(int_value)


def normalize_address(address: str, *, validate: bool = False) -> str:
    """Normalize an address to lowercase with a 0x prefix.

    Raises:
        ValueError: If validate=True and address is not a valid 20-byte address
    """
    addr = address.lower()
    if not addr.startswith("0x"):
        addr = "0x" + addr

    if validate and not is_valid_address(addr):
        raise ValueError(f"Invalid address: {address}")

    return addr


def is_valid_address(address: str) -> bool:
    """Check if a string is a 0x-prefixed, 40 hex character address."""
    if not isinstance(address, str):
        return False
    if not address.startswith("0x") or len(address) != 42:
        return False
    try:
        int(address, 16)
        return True
    except ValueError:
        return False


def sort_tokens(token_a: str, token_b: str) -> tuple[str, str]:
    """Canonical (token0, token1) ordering of a token pair.

    Both addresses are normalized first, so ordering is the numeric order of
    the addresses regardless of input casing. Equal tokens are returned as-is;
    callers decide whether that is an error.
    """
    a = normalize_address(token_a, validate=True)
    b = normalize_address(token_b, validate=True)
    return (a, b) if a < b else (b, a)


# 20-byte address, normalized to lowercase
Address = Annotated[
    str,
    Field(pattern=r"^0x[a-fA-F0-9]{40}$"),
    AfterValidator(normalize_address),
]

# 256-bit unsigned integer as decimal string (validated)
Uint256 = Annotated[
    str,
    BeforeValidator(validate_uint256),
    Field(description="256-bit unsigned integer as decimal string"),
]
