"""Shared account constants and amounts for tests.

All addresses are lowercase for consistency with normalize_address().

Usage:
    from tests.helpers import ALICE, E18
"""

# =============================================================================
# Accounts (Hardhat default dev accounts)
# =============================================================================

OWNER = "0xf39fd6e51aad88f6f4ce6ab8827279cfffb92266"
ALICE = "0x70997970c51812dc3a010c7d01b50e0d17dc79c8"
BOB = "0x3c44cdddb6a900fa2b585dd299e03d12fa4293bc"
CAROL = "0x90f79bf6eb2c4f870365e785982e1f101e93b906"

# =============================================================================
# Addresses never registered as tokens
# =============================================================================

UNREGISTERED_TOKEN = "0x1111111111111111111111111111111111111111"

# =============================================================================
# Amounts
# =============================================================================

# One whole token with 18 decimals (ethers.parseEther("1"))
E18 = 10**18
