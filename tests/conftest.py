"""Pytest configuration and fixtures."""

from collections.abc import Iterator

import pytest

from dex.config import DexConfig
from dex.exchange import Exchange
from dex.factory import Factory
from dex.pair import Pair
from dex.tokens import ERC20
from tests.helpers import ALICE, E18, OWNER, deposit


@pytest.fixture
def exchange() -> Exchange:
    """A fresh exchange owned by OWNER with the default 0.3% fee."""
    return Exchange(OWNER)


@pytest.fixture
def factory(exchange: Exchange) -> Factory:
    return exchange.factory


@pytest.fixture
def token_a(exchange: Exchange) -> ERC20:
    return exchange.deploy_token("TKA")


@pytest.fixture
def token_b(exchange: Exchange) -> ERC20:
    return exchange.deploy_token("TKB")


@pytest.fixture
def token_c(exchange: Exchange) -> ERC20:
    return exchange.deploy_token("TKC")


@pytest.fixture
def pair(factory: Factory, token_a: ERC20, token_b: ERC20) -> Pair:
    """An empty pair for token_a/token_b."""
    return factory.create_pair(token_a.address, token_b.address)


@pytest.fixture
def funded_pair(pair: Pair) -> Pair:
    """A pair where ALICE deposited 100 of each token."""
    deposit(pair, ALICE, 100 * E18, 100 * E18)
    return pair


@pytest.fixture
def fee_free_exchange() -> Exchange:
    """An exchange whose pairs charge no trading fee."""
    return Exchange(OWNER, DexConfig(fee_bps=0))


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[pytest.MonkeyPatch]:
    """Remove DEX_* variables so config defaults apply."""
    for name in ("DEX_FEE_BPS", "DEX_HOST", "DEX_PORT", "DEX_DEBUG", "DEX_LOG_LEVEL", "DEX_OWNER"):
        monkeypatch.delenv(name, raising=False)
    yield monkeypatch
