"""Protocol constants for the exchange."""

# Fees are expressed in basis points of the swap input
FEE_DENOMINATOR = 10_000
DEFAULT_FEE_BPS = 30

# Prefix byte of a CREATE2 address derivation
CREATE2_PREFIX = b"\xff"

# Stand-in for keccak256(type(Pair).creationCode); only needs to be stable
PAIR_INIT_CODE_HASH = bytes.fromhex(
    "96e8ac4277198ff8b6f785478aa9a39f403cb768dd02cbee326c3e7da348845f"
)
