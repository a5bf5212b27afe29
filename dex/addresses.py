"""Deterministic address derivation for deployed contracts."""

from eth_abi.packed import encode_packed
from eth_utils import keccak

from dex.constants import CREATE2_PREFIX, PAIR_INIT_CODE_HASH
from dex.models.types import normalize_address


def _to_address(digest: bytes) -> str:
    return "0x" + digest[12:].hex()


def create2_address(deployer: str, salt: bytes, init_code_hash: bytes) -> str:
    """Address of a contract deployed with CREATE2.

    keccak256(0xff ++ deployer ++ salt ++ init_code_hash)[12:]
    """
    data = encode_packed(
        ["bytes1", "address", "bytes32", "bytes32"],
        [CREATE2_PREFIX, normalize_address(deployer, validate=True), salt, init_code_hash],
    )
    return _to_address(keccak(data))


def pair_address(factory: str, token0: str, token1: str) -> str:
    """Address of the pair for (token0, token1), which must already be sorted."""
    salt = keccak(
        encode_packed(
            ["address", "address"],
            [normalize_address(token0, validate=True), normalize_address(token1, validate=True)],
        )
    )
    return create2_address(factory, salt, PAIR_INIT_CODE_HASH)


def contract_address(label: str, deployer: str, nonce: int) -> str:
    """Address for a non-pair contract (factory, token) deployed by deployer."""
    data = encode_packed(
        ["string", "address", "uint256"],
        [label, normalize_address(deployer, validate=True), nonce],
    )
    return _to_address(keccak(data))
