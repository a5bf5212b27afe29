"""Deployment that wires the token registry and factory together."""

from __future__ import annotations

import os
import threading

import structlog

from dex.config import DexConfig
from dex.factory import Factory
from dex.models.types import normalize_address
from dex.pair import Pair
from dex.tokens import ERC20, TokenRegistry

logger = structlog.get_logger()

# Deployer used when DEX_OWNER is not set (first Hardhat dev account)
DEFAULT_OWNER = "0xf39fd6e51aad88f6f4ce6ab8827279cfffb92266"


class PairNotFound(LookupError):
    """No pair is deployed at the requested address."""

    pass


class Exchange:
    """A factory plus the tokens its pairs can trade.

    Attributes:
        config: Configuration shared by the factory and its pairs
        tokens: Token registry the factory resolves addresses through
        factory: The pair factory, owned by owner
    """

    def __init__(self, owner: str, config: DexConfig | None = None) -> None:
        self.config = config or DexConfig()
        self.tokens = TokenRegistry(deployer=owner)
        self.factory = Factory(owner, self.tokens, config=self.config)

    def deploy_token(self, symbol: str) -> ERC20:
        return self.tokens.deploy(symbol)

    def pair(self, address: str) -> Pair:
        """Deployed pair at address.

        Raises:
            PairNotFound: If the factory has no pair at address
        """
        pair = self.factory.get_pair_by_address(address)
        if pair is None:
            raise PairNotFound(f"No pair deployed at {normalize_address(address)}")
        return pair


_default_exchange: Exchange | None = None
_default_lock = threading.Lock()


def _create_default_exchange() -> Exchange:
    """Create the process-wide exchange from the environment.

    DEX_OWNER sets the factory owner; the remaining settings come from
    DexConfig.from_env().
    """
    owner = os.environ.get("DEX_OWNER", DEFAULT_OWNER)
    config = DexConfig.from_env()
    logger.info("exchange_created", owner=owner, fee_bps=config.fee_bps)
    return Exchange(owner, config)


def get_default_exchange() -> Exchange:
    """Process-wide exchange, created on first use."""
    global _default_exchange
    with _default_lock:
        if _default_exchange is None:
            _default_exchange = _create_default_exchange()
        return _default_exchange
