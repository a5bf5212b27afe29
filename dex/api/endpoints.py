"""API endpoints for the exchange."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query

from dex.errors import UnknownToken
from dex.exchange import Exchange, PairNotFound, get_default_exchange
from dex.models.api import (
    AddLiquidityRequest,
    AddLiquidityResponse,
    ApproveRequest,
    BalanceResponse,
    CreatePairRequest,
    DeployTokenRequest,
    FactoryResponse,
    MintRequest,
    PairResponse,
    RemoveLiquidityRequest,
    RemoveLiquidityResponse,
    SwapRequest,
    SwapResponse,
    TokenResponse,
)
from dex.models.types import normalize_address
from dex.tokens import ERC20

router = APIRouter()

ADDRESS_PATTERN = r"^0x[a-fA-F0-9]{40}$"
PathAddress = Annotated[str, Path(pattern=ADDRESS_PATTERN)]


def get_exchange() -> Exchange:
    """Dependency provider for the exchange instance.

    Override this in tests to inject a fresh exchange:
        app.dependency_overrides[get_exchange] = lambda: exchange
    """
    return get_default_exchange()


def _erc20(exchange: Exchange, address: str) -> ERC20:
    token = exchange.tokens.get(address)
    if not isinstance(token, ERC20):
        # Only in-memory tokens can be minted through the API
        raise UnknownToken(f"Token {normalize_address(address)} is not mintable by this exchange")
    return token


# --- Factory ---


@router.get("/factory")
def get_factory(exchange: Exchange = Depends(get_exchange)) -> FactoryResponse:
    factory = exchange.factory
    return FactoryResponse(
        address=factory.address,
        owner=factory.owner,
        pair_count=factory.all_pairs_length(),
        fee_bps=factory.config.fee_bps,
    )


# --- Tokens ---


@router.post("/tokens", status_code=201)
def deploy_token(
    request: DeployTokenRequest,
    exchange: Exchange = Depends(get_exchange),
) -> TokenResponse:
    return TokenResponse.from_token(exchange.deploy_token(request.symbol))


@router.post("/tokens/{token}/mint")
def mint_token(
    token: PathAddress,
    request: MintRequest,
    exchange: Exchange = Depends(get_exchange),
) -> BalanceResponse:
    erc20 = _erc20(exchange, token)
    erc20.mint(request.to, int(request.amount))
    return BalanceResponse(account=request.to, balance=erc20.balance_of(request.to))


@router.post("/tokens/{token}/approve")
def approve_token(
    token: PathAddress,
    request: ApproveRequest,
    exchange: Exchange = Depends(get_exchange),
) -> dict[str, bool]:
    exchange.tokens.get(token).approve(request.owner, request.spender, int(request.amount))
    return {"approved": True}


@router.get("/tokens/{token}/balances/{account}")
def token_balance(
    token: PathAddress,
    account: PathAddress,
    exchange: Exchange = Depends(get_exchange),
) -> BalanceResponse:
    balance = exchange.tokens.get(token).balance_of(account)
    return BalanceResponse(account=account, balance=balance)


# --- Pairs ---


@router.post("/pairs", status_code=201)
def create_pair(
    request: CreatePairRequest,
    exchange: Exchange = Depends(get_exchange),
) -> PairResponse:
    pair = exchange.factory.create_pair(request.token_a, request.token_b)
    return PairResponse.from_pair(pair)


@router.get("/pairs")
def list_pairs(exchange: Exchange = Depends(get_exchange)) -> list[PairResponse]:
    return [PairResponse.from_pair(pair) for pair in exchange.factory.all_pairs]


# Registered before /pairs/{pair} so "lookup" is not taken for an address
@router.get("/pairs/lookup")
def lookup_pair(
    token_a: Annotated[str, Query(alias="tokenA", pattern=ADDRESS_PATTERN)],
    token_b: Annotated[str, Query(alias="tokenB", pattern=ADDRESS_PATTERN)],
    exchange: Exchange = Depends(get_exchange),
) -> PairResponse:
    pair = exchange.factory.get_pair(token_a, token_b)
    if pair is None:
        raise PairNotFound(f"No pair for {normalize_address(token_a)}/{normalize_address(token_b)}")
    return PairResponse.from_pair(pair)


@router.get("/pairs/{pair}")
def get_pair(pair: PathAddress, exchange: Exchange = Depends(get_exchange)) -> PairResponse:
    return PairResponse.from_pair(exchange.pair(pair))


@router.get("/pairs/{pair}/balances/{account}")
def share_balance(
    pair: PathAddress,
    account: PathAddress,
    exchange: Exchange = Depends(get_exchange),
) -> BalanceResponse:
    return BalanceResponse(account=account, balance=exchange.pair(pair).balance_of(account))


@router.post("/pairs/{pair}/liquidity")
def add_liquidity(
    pair: PathAddress,
    request: AddLiquidityRequest,
    exchange: Exchange = Depends(get_exchange),
) -> AddLiquidityResponse:
    target = exchange.pair(pair)
    liquidity = target.add_liquidity(request.sender, int(request.amount0), int(request.amount1))
    return AddLiquidityResponse(liquidity=liquidity, pair=PairResponse.from_pair(target))


@router.post("/pairs/{pair}/liquidity/remove")
def remove_liquidity(
    pair: PathAddress,
    request: RemoveLiquidityRequest,
    exchange: Exchange = Depends(get_exchange),
) -> RemoveLiquidityResponse:
    target = exchange.pair(pair)
    amount0, amount1 = target.remove_liquidity(request.sender, int(request.liquidity))
    return RemoveLiquidityResponse(
        amount0=amount0, amount1=amount1, pair=PairResponse.from_pair(target)
    )


@router.post("/pairs/{pair}/swap")
def swap(
    pair: PathAddress,
    request: SwapRequest,
    exchange: Exchange = Depends(get_exchange),
) -> SwapResponse:
    target = exchange.pair(pair)
    quote = target.execute_swap(request.sender, int(request.amount_in0), int(request.amount_in1))
    return SwapResponse(
        amount_in=quote.amount_in,
        amount_out=quote.amount_out,
        direction=quote.direction.value,
        pair=PairResponse.from_pair(target),
    )
