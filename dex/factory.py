"""Factory that deploys and indexes one Pair per token pair.

Pairs are keyed by the canonical (token0, token1) ordering, so lookups and
uniqueness checks do not depend on the order the caller passed the tokens.
"""

from __future__ import annotations

import threading

import structlog

from dex.addresses import contract_address, pair_address
from dex.config import DEFAULT_CONFIG, DexConfig
from dex.errors import IdenticalTokenAddresses, PairAlreadyExists
from dex.events import EventLog, PairCreated
from dex.models.types import normalize_address, sort_tokens
from dex.pair import Pair
from dex.tokens import TokenRegistry

logger = structlog.get_logger()


class Factory:
    """Registry of pairs.

    Attributes:
        address: Factory address; pair addresses are derived from it
        tokens: Registry used to resolve token addresses when creating pairs
        config: Configuration handed to every pair created here
        events: PairCreated events emitted by this factory
    """

    def __init__(
        self,
        owner: str,
        tokens: TokenRegistry,
        config: DexConfig = DEFAULT_CONFIG,
        address: str | None = None,
    ) -> None:
        self._owner = normalize_address(owner, validate=True)
        self.address = (
            normalize_address(address, validate=True)
            if address is not None
            else contract_address("Factory", self._owner, 0)
        )
        self.tokens = tokens
        self.config = config
        self._pairs: dict[tuple[str, str], Pair] = {}
        self._pairs_by_address: dict[str, Pair] = {}
        self._all_pairs: list[Pair] = []
        self._lock = threading.RLock()
        self.events = EventLog(self.address)

    def __repr__(self) -> str:
        return f"Factory({self.address}, owner={self._owner}, pairs={len(self._all_pairs)})"

    @property
    def owner(self) -> str:
        """Address that deployed the factory; fixed at construction."""
        return self._owner

    @property
    def all_pairs(self) -> list[Pair]:
        """Pairs in creation order."""
        return list(self._all_pairs)

    def all_pairs_length(self) -> int:
        return len(self._all_pairs)

    def create_pair(self, token_a: str, token_b: str) -> Pair:
        """Deploy the pair for token_a and token_b.

        Args:
            token_a: One token address, in any order
            token_b: The other token address

        Returns:
            The new pair, with token0 < token1

        Raises:
            IdenticalTokenAddresses: If both addresses are the same token
            PairAlreadyExists: If the pair exists, in either order
            UnknownToken: If a token is not in the token registry
            ValueError: If an address is malformed
        """
        token0, token1 = sort_tokens(token_a, token_b)
        if token0 == token1:
            raise IdenticalTokenAddresses(f"Cannot pair token {token0} with itself")

        with self._lock:
            if (token0, token1) in self._pairs:
                raise PairAlreadyExists(f"Pair for {token0}/{token1} already exists")

            pair = Pair(
                address=pair_address(self.address, token0, token1),
                token0=self.tokens.get(token0),
                token1=self.tokens.get(token1),
                factory=self.address,
                config=self.config,
            )
            self._pairs[(token0, token1)] = pair
            self._pairs_by_address[pair.address] = pair
            self._all_pairs.append(pair)
            pair_count = len(self._all_pairs)

            checkpoint = self.events.checkpoint()
            try:
                self.events.emit(PairCreated(token0, token1, pair, pair_count))
            except BaseException:
                del self._pairs[(token0, token1)]
                del self._pairs_by_address[pair.address]
                self._all_pairs.remove(pair)
                self.events.rollback(checkpoint)
                raise

        logger.info(
            "pair_created",
            factory=self.address,
            token0=token0,
            token1=token1,
            pair=pair.address,
            pair_count=pair_count,
        )
        return pair

    def get_pair(self, token_a: str, token_b: str) -> Pair | None:
        """Look up the pair for two tokens in either order; None if absent."""
        return self._pairs.get(sort_tokens(token_a, token_b))

    def get_pair_by_address(self, address: str) -> Pair | None:
        return self._pairs_by_address.get(normalize_address(address))
